"""Read and parse documents from local files, URLs, or strings.

This module is the I/O layer of the resolver. It turns a location string into
a :class:`~speclint.resolver.document.Source` (raw text) and a source into a
:class:`~speclint.resolver.document.Document` (parsed tree). Both JSON and
YAML are accepted, with the format detected from the file extension, the
server's ``content-type``, or -- as a last resort -- by trying JSON first.

YAML is parsed with a :class:`yaml.SafeLoader` variant that behaves like the
JSON data model OpenAPI is defined on:

* ISO dates such as ``2024-01-01`` stay strings instead of becoming
  :class:`datetime.date` objects.
* Non-string mapping keys (``200:`` in a ``responses`` map, ``true:``) keep
  their original text, and complex keys (``? [a, b]``) their source text,
  so every key is a ``str``.

The public functions are :func:`read_source` (async), :func:`make_document`,
and :func:`document_from_string`.
"""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Optional

import httpx
import yaml

from speclint.cache import DocumentCache
from speclint.exceptions import ResolveError, YamlParseError
from speclint.models import HttpHeader
from speclint.resolver.document import Document, Source

logger = logging.getLogger(__name__)

_TIMESTAMP_TAG = "tag:yaml.org,2002:timestamp"


class _SpecLoader(yaml.SafeLoader):
    """SafeLoader without timestamp resolution and with string-only keys."""


_SpecLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag != _TIMESTAMP_TAG]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


def _construct_mapping(loader: _SpecLoader, node: yaml.MappingNode) -> dict[str, Any]:
    loader.flatten_mapping(node)
    mapping: dict[str, Any] = {}
    for key_node, value_node in node.value:
        if isinstance(key_node, yaml.ScalarNode):
            key = loader.construct_object(key_node, deep=True)
            if not isinstance(key, str):
                key = key_node.value
        else:
            key = _source_text(loader, key_node)
        mapping[key] = loader.construct_object(value_node, deep=True)
    return mapping


def _source_text(loader: _SpecLoader, node: yaml.Node) -> str:
    """Return the text a complex key (``? [a, b]``) occupies in the source."""
    start, end = node.start_mark, node.end_mark
    if start.buffer is not None:
        return start.buffer[start.index:end.index].strip()
    return str(loader.construct_object(node, deep=True))


_SpecLoader.add_constructor(
    yaml.resolver.BaseResolver.DEFAULT_MAPPING_TAG, _construct_mapping
)


def is_url(ref: str) -> bool:
    """Return True for ``http://`` and ``https://`` references."""
    return ref.startswith(("http://", "https://"))


async def read_source(
    absolute_ref: str,
    *,
    timeout: float = 30.0,
    http_headers: Optional[list[HttpHeader]] = None,
    cache: Optional[DocumentCache] = None,
) -> Source:
    """Read the raw text behind *absolute_ref*.

    Args:
        absolute_ref: An http(s) URL or a local file path.
        timeout: HTTP timeout in seconds.
        http_headers: Extra headers, each applied only to URLs starting with
            its ``matches`` prefix.
        cache: Optional disk cache for remote bodies.

    Returns:
        The loaded :class:`~speclint.resolver.document.Source`.

    Raises:
        ResolveError: If the file does not exist or cannot be read, or the
            URL cannot be fetched.
        YamlParseError: If a local file is not valid UTF-8.
    """
    if is_url(absolute_ref):
        return await _read_from_url(absolute_ref, timeout, http_headers or [], cache)
    return await asyncio.to_thread(_read_from_file, absolute_ref)


async def _read_from_url(
    url: str,
    timeout: float,
    http_headers: list[HttpHeader],
    cache: Optional[DocumentCache],
) -> Source:
    """Fetch a document over HTTP(S), consulting the disk cache first."""
    if cache is not None:
        hit = cache.get(url)
        if hit is not None:
            return Source(url, hit["body"], hit.get("mime_type"))

    headers = {h.name: h.value for h in http_headers if url.startswith(h.matches)}
    try:
        async with httpx.AsyncClient(timeout=timeout, follow_redirects=True) as client:
            response = await client.get(url, headers=headers)
            response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise ResolveError(
            f"HTTP {exc.response.status_code} fetching {url}", ref=url
        ) from exc
    except httpx.RequestError as exc:
        raise ResolveError(f"Failed to fetch {url}: {exc}", ref=url) from exc

    mime_type = response.headers.get("content-type")
    logger.debug("Fetched %s (%s)", url, mime_type or "no content-type")
    if cache is not None:
        cache.set(url, response.text, mime_type)
    return Source(url, response.text, mime_type)


def _read_from_file(path: str) -> Source:
    """Read a local file into a :class:`Source`."""
    file_path = Path(path)
    if not file_path.is_file():
        raise ResolveError(f"Can't resolve $ref: file not found: {path}", ref=path)
    try:
        body = file_path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise YamlParseError(
            f"Failed to parse: {path} is not valid UTF-8 ({exc.reason} at byte {exc.start})",
            ref=path,
        ) from exc
    except OSError as exc:
        raise ResolveError(f"Failed to read {path}: {exc}", ref=path) from exc
    logger.debug("Read %s (%d bytes)", path, len(body))
    return Source(path, body)


def make_document(source: Source) -> Document:
    """Parse a :class:`Source` into a :class:`Document`.

    The format hint comes from the ``content-type`` when present, otherwise
    from the file extension of ``absolute_ref``.

    Raises:
        YamlParseError: If the body is neither valid JSON nor valid YAML.
    """
    hint = ""
    mime_type = (source.mime_type or "").lower()
    if "json" in mime_type:
        hint = "json"
    elif "yaml" in mime_type or "yml" in mime_type:
        hint = "yaml"
    else:
        suffix = Path(source.absolute_ref.split("#", 1)[0]).suffix.lower()
        if suffix == ".json":
            hint = "json"
        elif suffix in (".yaml", ".yml"):
            hint = "yaml"
    return Document(source, parse_content(source.body, hint=hint))


def document_from_string(body: str, absolute_ref: str) -> Document:
    """Build a :class:`Document` from in-memory text.

    Args:
        body: JSON or YAML text.
        absolute_ref: Identifier reported as ``source`` in diagnostics.
    """
    return make_document(Source(absolute_ref, body))


def parse_content(content: str, hint: str = "") -> Any:
    """Parse content as JSON or YAML.

    Tries JSON first (unless hint is ``'yaml'``), then falls back to YAML.
    Valid JSON is also valid YAML, but JSON parsing is stricter and faster.

    Args:
        content: The raw string content.
        hint: Optional format hint (``'json'`` or ``'yaml'``).

    Returns:
        The parsed value.

    Raises:
        YamlParseError: If the content cannot be parsed as either format.
    """
    json_error: Exception | None = None

    if hint != "yaml":
        try:
            return json.loads(content)
        except json.JSONDecodeError as exc:
            json_error = exc
            if hint == "json":
                raise YamlParseError(f"Failed to parse: invalid JSON: {exc}") from exc

    try:
        return yaml.load(content, Loader=_SpecLoader)
    except yaml.YAMLError as exc:
        msg = f"Failed to parse: {exc}"
        if json_error is not None and hint == "":
            msg += f"\n  JSON error: {json_error}"
        raise YamlParseError(msg) from exc
