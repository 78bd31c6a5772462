"""Resolve ``$ref`` pointers within and across documents.

OpenAPI documents use ``$ref`` (e.g. ``{"$ref": "#/components/schemas/Pet"}``
or ``{"$ref": "./pet.yaml"}``) to avoid repetition. Unlike a deep-copy
inliner, the resolver never rewrites documents: it maps each *reference node*
to the node it designates, keeping both locations so that diagnostics can say
where a problem is and through which reference it was reached.

Two layers:

* :class:`BaseResolver` -- resolves one reference string against the
  document it appears in. External documents are loaded once per
  ``absolute_ref`` and shared by every lint run using the same resolver;
  concurrent requests for the same document await a single load. Resolved
  targets are cached by ``(absolute_ref, pointer)`` until the document under
  that ``absolute_ref`` is replaced. Chains of references
  (a target that is itself a ``$ref``) are followed to the final node.
* :func:`resolve_document` -- an async pre-pass that walks a document with
  its node type catalog and resolves every reference it will meet, producing
  a :data:`ResolvedRefMap` the synchronous walker can consult without ever
  suspending.

Failures are :class:`~speclint.exceptions.ResolveError` instances. The
pre-pass records them in the map instead of raising, and the walker reports
them as problems at the reference node.
"""

from __future__ import annotations

import asyncio
import logging
import os
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional
from urllib.parse import urljoin

from speclint.cache import DocumentCache
from speclint.config import get_cache_dir
from speclint.exceptions import ResolveError
from speclint.models import ResolveConfig
from speclint.node_types.base import TypeDefinition
from speclint.node_types.registry import iter_child_nodes, iter_scalar_refs
from speclint.resolver.document import Document, Location, join_pointer, parse_pointer
from speclint.resolver.loader import is_url, make_document, read_source

logger = logging.getLogger(__name__)


def is_ref(node: Any) -> bool:
    """Return True if *node* is a reference object (a mapping with a string ``$ref``)."""
    return isinstance(node, dict) and isinstance(node.get("$ref"), str)


def ref_siblings(node: dict[str, Any]) -> dict[str, Any]:
    """Return the keys written next to ``$ref`` in a reference object."""
    return {key: value for key, value in node.items() if key != "$ref"}


def ref_key(location: Location) -> tuple[str, str]:
    """Key of a node in :data:`ResolvedRefMap` and the resolver caches."""
    return location.source.absolute_ref, location.pointer


@dataclass(frozen=True)
class ResolvedRef:
    """Outcome of resolving one reference.

    Attributes:
        node: The target node (``None`` on failure).
        location: Where the target lives.
        document: The document containing the target.
        error: The failure, if resolution did not succeed.
    """

    node: Any = None
    location: Optional[Location] = None
    document: Optional[Document] = None
    error: Optional[ResolveError] = None

    @property
    def resolved(self) -> bool:
        return self.error is None


ResolvedRefMap = dict[tuple[str, str], ResolvedRef]
"""Resolution results keyed by the *reference node's* ``(absolute_ref, pointer)``."""


def _split_ref(ref: str) -> tuple[str, str]:
    base, _, fragment = ref.partition("#")
    return base, join_pointer(parse_pointer(fragment))


class BaseResolver:
    """Resolves reference strings and memoises loaded documents.

    One resolver may be shared by many concurrent lint runs: documents are
    immutable once parsed, the first request for an ``absolute_ref`` starts
    the load and later requests await the same task.

    Args:
        config: HTTP and cache settings for remote documents.
        cache: Explicit disk cache. When omitted, one is created in
            :func:`~speclint.config.get_cache_dir` if ``config.cache.enabled``.

    Example::

        resolver = BaseResolver()
        resolver.add_document(root)
        resolved = await resolver.resolve_ref("./pet.yaml#/Pet", root)
        print(resolved.location.absolute_pointer)
    """

    def __init__(
        self,
        config: Optional[ResolveConfig] = None,
        cache: Optional[DocumentCache] = None,
    ) -> None:
        self._config = config or ResolveConfig()
        if cache is None and self._config.cache.enabled:
            cache_dir = self._config.cache.directory or get_cache_dir()
            cache = DocumentCache(cache_dir, self._config.cache)
        self._cache = cache
        self._documents: dict[str, Document] = {}
        self._loading: dict[str, asyncio.Task[Document]] = {}
        self._targets: dict[tuple[str, str], ResolvedRef] = {}

    # ------------------------------------------------------------------
    # Documents
    # ------------------------------------------------------------------

    def add_document(self, document: Document) -> None:
        """Register an already-parsed document (typically the lint root).

        Replacing a document under the same ``absolute_ref`` drops every
        target resolved in the previous one.
        """
        absolute_ref = document.source.absolute_ref
        previous = self._documents.get(absolute_ref)
        if previous is not None and previous is not document:
            logger.debug("Replacing document %s", absolute_ref)
            self._targets = {
                key: target for key, target in self._targets.items() if key[0] != absolute_ref
            }
            self._loading.pop(absolute_ref, None)
        self._documents[absolute_ref] = document

    def get_document(self, absolute_ref: str) -> Optional[Document]:
        """Return a document that has finished loading, or ``None``."""
        return self._documents.get(absolute_ref)

    def resolve_external_ref(self, base: Optional[str], ref: str) -> str:
        """Turn a (possibly relative) document reference into an absolute one.

        URLs are joined against URL bases; file paths are resolved relative
        to the directory of the referencing document.
        """
        if is_url(ref):
            return ref
        if base and is_url(base):
            return urljoin(base, ref)
        base_dir = os.path.dirname(base) if base else ""
        return os.path.abspath(os.path.join(base_dir, ref))

    async def load_external_ref(self, absolute_ref: str) -> Document:
        """Read and parse one document. Override to plug in another loader."""
        source = await read_source(
            absolute_ref,
            timeout=self._config.timeout,
            http_headers=self._config.http_headers,
            cache=self._cache,
        )
        return make_document(source)

    async def load_document(self, base: Optional[str], ref: str) -> Document:
        """Return the document *ref* designates, loading it on first use.

        Raises:
            ResolveError: If the document cannot be read or parsed
                (:class:`~speclint.exceptions.YamlParseError`).
        """
        absolute_ref = self.resolve_external_ref(base, ref)
        document = self._documents.get(absolute_ref)
        if document is not None:
            return document

        task = self._loading.get(absolute_ref)
        if task is None:
            logger.debug("Loading %s", absolute_ref)
            task = asyncio.ensure_future(self.load_external_ref(absolute_ref))
            self._loading[absolute_ref] = task
        document = await task
        self._documents[absolute_ref] = document
        return document

    # ------------------------------------------------------------------
    # References
    # ------------------------------------------------------------------

    async def resolve_ref(self, ref: str, from_document: Document) -> ResolvedRef:
        """Resolve *ref* as written in *from_document*.

        Chains of references are followed until a non-reference node is
        reached.

        Raises:
            ResolveError: If a document cannot be loaded, the pointer is
                malformed or does not exist, or the chain loops.
        """
        return await self._follow(ref, from_document, self.load_document)

    def resolve_loaded_ref(self, ref: str, from_document: Document) -> ResolvedRef:
        """Synchronous :meth:`resolve_ref` limited to already-loaded documents.

        Raises:
            ResolveError: As :meth:`resolve_ref`, and additionally when the
                reference points into a document that was never loaded.
        """
        document = from_document
        chain: set[tuple[str, str]] = set()
        current = ref
        while True:
            base, pointer = _split_ref(current)
            if base:
                absolute_ref = self.resolve_external_ref(document.source.absolute_ref, base)
                loaded = self._documents.get(absolute_ref)
                if loaded is None:
                    raise ResolveError(
                        f"Can't resolve $ref: document {absolute_ref} is not loaded",
                        ref=ref,
                    )
                document = loaded
            resolved = self._target(document, pointer, chain, ref)
            if not is_ref(resolved.node):
                return resolved
            current, document = resolved.node["$ref"], resolved.document

    async def _follow(
        self,
        ref: str,
        from_document: Document,
        load: Callable[[Optional[str], str], Awaitable[Document]],
    ) -> ResolvedRef:
        document = from_document
        chain: set[tuple[str, str]] = set()
        current = ref
        while True:
            base, pointer = _split_ref(current)
            if base:
                document = await load(document.source.absolute_ref, base)
            resolved = self._target(document, pointer, chain, ref)
            if not is_ref(resolved.node):
                return resolved
            current, document = resolved.node["$ref"], resolved.document

    def _target(
        self,
        document: Document,
        pointer: str,
        chain: set[tuple[str, str]],
        ref: str,
    ) -> ResolvedRef:
        key = (document.source.absolute_ref, pointer)
        if key in chain:
            raise ResolveError(f"Self-referencing circular pointer: '{ref}'", ref=ref)
        chain.add(key)

        cached = self._targets.get(key)
        if cached is None:
            try:
                node = document.node_at(pointer)
            except ResolveError as exc:
                raise ResolveError(exc.message, ref=ref) from exc
            cached = ResolvedRef(node, Location(document.source, pointer), document)
            self._targets[key] = cached
        return cached


async def resolve_document(
    root_document: Document,
    root_type: TypeDefinition,
    resolver: BaseResolver,
    types: dict[str, TypeDefinition],
) -> ResolvedRefMap:
    """Resolve every reference reachable from *root_document*.

    Walks the document with the node type catalog -- so that ``$ref`` keys
    inside free-form values such as examples are left alone -- and follows
    each resolved target with the type of the position the reference
    appeared in. External documents are loaded as they are met.

    Args:
        root_document: The document being linted.
        root_type: Type of the document root (``types["Root"]``).
        resolver: Resolver used to load documents and resolve references.
        types: The node type catalog for the document's version.

    Returns:
        A :data:`ResolvedRefMap` covering every reference node the walker
        will visit. Failed resolutions are recorded with their ``error``.
    """
    resolver.add_document(root_document)
    resolved_refs: ResolvedRefMap = {}
    visited: set[tuple[str, str, str]] = set()

    async def resolve(node: Any, location: Location, document: Document) -> ResolvedRef:
        key = ref_key(location)
        resolved = resolved_refs.get(key)
        if resolved is None:
            try:
                resolved = await resolver.resolve_ref(node["$ref"], document)
            except ResolveError as exc:
                logger.debug("Unresolved $ref at %s: %s", location.absolute_pointer, exc)
                resolved = ResolvedRef(error=exc)
            resolved_refs[key] = resolved
        return resolved

    async def walk(node: Any, definition: TypeDefinition, location: Location, document: Document) -> None:
        if is_ref(node):
            resolved = await resolve(node, location, document)
            if resolved.resolved:
                await walk(resolved.node, definition, resolved.location, resolved.document)
            if not definition.ref_siblings:
                return
            node = ref_siblings(node)

        visit = (location.source.absolute_ref, location.pointer, definition.name)
        if visit in visited:
            return
        visited.add(visit)

        for segment, value in iter_scalar_refs(node, definition):
            await resolve(value, location.child(segment), document)
        for segment, value, child_type in iter_child_nodes(node, definition, types):
            await walk(value, child_type, location.child(segment), document)

    await walk(root_document.parsed, root_type, Location(root_document.source), root_document)
    logger.debug(
        "Resolved %d reference(s) in %s",
        len(resolved_refs),
        root_document.source.absolute_ref,
    )
    return resolved_refs
