"""Structural validation of a document against its node type catalog.

The :class:`Walker` descends from the document root with the ``Root`` type
definition and checks each node against the definition of the position it
occupies:

1. the node has the right shape (mapping for object types, list for list
   types) -- otherwise nothing below it is checked;
2. required fields are present, and at least one of ``required_one_of``;
3. every field is declared (or a specification extension), and allowed by
   the discriminant when the type narrows its fields (``SecurityScheme``);
4. primitive fields hold an allowed literal, the right JSON type, and respect
   ``minimum``;
5. nested nodes are visited -- declared fields first, in declaration order,
   then additional keys in document order.

Reference nodes are replaced by their target, which is validated with the
type of the *referencing* position. Problems found under a reference carry
the reference node as their ``from`` -- one hop, the nearest one. A target
that is already being descended on the current path is not entered again.
Where the type accepts keywords beside ``$ref`` (OAS 3.1 ``Schema``), those
are checked after the target, at the reference node itself.

The walker never suspends: every reference was resolved beforehand by
:func:`~speclint.resolver.resolver.resolve_document`.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from speclint.collector import ProblemCollector
from speclint.exceptions import ResolveError
from speclint.node_types.base import UNDECLARED, ScalarSchema, TypeDefinition
from speclint.node_types.registry import iter_child_nodes
from speclint.resolver.document import Document, Location
from speclint.resolver.resolver import (
    BaseResolver,
    ResolvedRef,
    ResolvedRefMap,
    is_ref,
    ref_key,
    ref_siblings,
)

logger = logging.getLogger(__name__)

SPEC_RULE = "spec"


def json_type(value: Any) -> str:
    """Return the JSON Schema type name of a parsed value.

    Integral floats (``1.0``) count as ``integer``; booleans never do.
    """
    if isinstance(value, list):
        return "array"
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, int):
        return "integer"
    if isinstance(value, float):
        return "integer" if value.is_integer() else "number"
    if isinstance(value, str):
        return "string"
    return "object"


def matches_type(value: Any, expected: str) -> bool:
    actual = json_type(value)
    if expected == "number":
        return actual in ("number", "integer")
    return actual == expected


def _format_number(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(value)


class Walker:
    """Validate one document, reporting into a :class:`ProblemCollector`.

    Args:
        types: Node type catalog for the document's version.
        resolved_refs: Output of the resolution pre-pass.
        resolver: Used for references missing from ``resolved_refs``; only
            already-loaded documents are consulted.
        collector: Receives every problem.
        rule_id: Rule id problems are reported under.
    """

    def __init__(
        self,
        types: dict[str, TypeDefinition],
        resolved_refs: ResolvedRefMap,
        resolver: BaseResolver,
        collector: ProblemCollector,
        rule_id: str = SPEC_RULE,
    ) -> None:
        self._types = types
        self._resolved_refs = resolved_refs
        self._resolver = resolver
        self._collector = collector
        self._rule_id = rule_id
        self._provenance: list[Location] = []
        # Active path: the node each reference jump entered, and the reference
        # it left through. The current segment's exit is the reference being
        # followed.
        self._entries: list[Location] = []
        self._exits: list[Location] = []

    def walk(self, document: Document, root_type: TypeDefinition) -> None:
        """Validate *document* starting at its root with *root_type*."""
        root = Location(document.source)
        self._entries = [root]
        self._exits = []
        self._provenance = []
        self._visit(document.parsed, root_type, root, document, None)

    # ------------------------------------------------------------------
    # Nodes
    # ------------------------------------------------------------------

    def _visit(
        self,
        node: Any,
        definition: TypeDefinition,
        location: Location,
        document: Document,
        key: Optional[str],
    ) -> None:
        if is_ref(node):
            self._visit_ref(node, definition, location, document, key)
            if not definition.ref_siblings:
                return
            node = ref_siblings(node)

        if definition.items is not None:
            if not isinstance(node, list):
                self._report(
                    f"Expected type `{definition.name}` (array) but got `{json_type(node)}`",
                    location,
                )
                return
        elif not isinstance(node, dict):
            self._report(
                f"Expected type `{definition.name}` (object) but got `{json_type(node)}`",
                location,
            )
            return
        else:
            self._check_fields(node, definition, location, document, key)

        for segment, value, child_type in iter_child_nodes(node, definition, self._types):
            self._visit(value, child_type, location.child(segment), document, str(segment))

    def _check_fields(
        self,
        node: dict[str, Any],
        definition: TypeDefinition,
        location: Location,
        document: Document,
        key: Optional[str],
    ) -> None:
        for name in definition.required_fields(node, key):
            if name not in node:
                self._report(f"The field `{name}` must be present on this level.", location.key())

        if definition.required_one_of and not any(n in node for n in definition.required_one_of):
            self._report(
                "Must contain at least one of the following fields: "
                f"{', '.join(definition.required_one_of)}.",
                location.key(),
            )

        allowed = definition.allowed(node) if definition.allowed is not None else None

        for raw_name, value in node.items():
            name = str(raw_name)
            child = location.child(name)
            is_extension = name.startswith(definition.extensions_prefix)

            if allowed is not None and name not in allowed and not is_extension:
                self._report(
                    f"Property `{name}` is not expected here.",
                    child.key(),
                    suggest_for=(name, allowed),
                )
                continue

            prop = definition.prop_type(name, value)
            if prop is UNDECLARED:
                if not is_extension:
                    self._report(
                        f"Property `{name}` is not expected here.",
                        child.key(),
                        suggest_for=(name, list(definition.properties)),
                    )
                continue

            if isinstance(prop, ScalarSchema):
                self._check_scalar(name, value, prop, child, document)

    # ------------------------------------------------------------------
    # Primitive values
    # ------------------------------------------------------------------

    def _check_scalar(
        self,
        name: str,
        value: Any,
        schema: ScalarSchema,
        location: Location,
        document: Document,
    ) -> None:
        if value is None:
            return

        if is_ref(value) and schema.resolvable:
            resolved = self._lookup(value, location, document)
            if not resolved.resolved:
                self._report(resolved.error.message, location)
                return
            self._provenance.append(location)
            try:
                self._check_scalar(name, resolved.node, schema, resolved.location, resolved.document)
            finally:
                self._provenance.pop()
            return

        if not self._check_value(name, value, schema, location):
            return

        if schema.items is not None and isinstance(value, list):
            for index, item in enumerate(value):
                if item is not None:
                    self._check_value(name, item, schema.items, location.child(index))

        if (
            schema.minimum is not None
            and json_type(value) in ("integer", "number")
            and value < schema.minimum
        ):
            self._report(
                f"The value of the `{name}` field must be greater than or equal to "
                f"{_format_number(schema.minimum)}",
                location,
            )

    def _check_value(self, name: str, value: Any, schema: ScalarSchema, location: Location) -> bool:
        """Check one value's literal set or JSON type. Returns False on a problem."""
        if schema.enum is not None:
            if value in schema.enum:
                return True
            literals = ", ".join(f'"{literal}"' for literal in schema.enum)
            self._report(
                f"`{name}` can be one of the following only: {literals}.",
                location,
                suggest_for=(str(value), list(schema.enum)),
            )
            return False
        if schema.type is not None and not matches_type(value, schema.type):
            self._report(f"Expected type `{schema.type}` but got `{json_type(value)}`.", location)
            return False
        return True

    # ------------------------------------------------------------------
    # References
    # ------------------------------------------------------------------

    def _visit_ref(
        self,
        node: dict[str, Any],
        definition: TypeDefinition,
        location: Location,
        document: Document,
        key: Optional[str],
    ) -> None:
        resolved = self._lookup(node, location, document)
        if not resolved.resolved:
            self._report(resolved.error.message, location)
            return

        target = resolved.location
        if self._on_active_path(target, location):
            logger.debug("Cycle: %s -> %s", location.absolute_pointer, target.absolute_pointer)
            return

        self._provenance.append(location)
        self._entries.append(target)
        self._exits.append(location)
        try:
            self._visit(resolved.node, definition, target, resolved.document, key)
        finally:
            self._exits.pop()
            self._entries.pop()
            self._provenance.pop()

    def _lookup(self, node: dict[str, Any], location: Location, document: Document) -> ResolvedRef:
        resolved = self._resolved_refs.get(ref_key(location))
        if resolved is not None:
            return resolved
        try:
            return self._resolver.resolve_loaded_ref(node["$ref"], document)
        except ResolveError as exc:
            return ResolvedRef(error=exc)

    def _on_active_path(self, target: Location, via: Location) -> bool:
        """Return True if *target* is an ancestor of a node being descended."""
        exits = self._exits + [via]
        return any(
            entry.contains(target) and target.contains(exit_)
            for entry, exit_ in zip(self._entries, exits)
        )

    def _report(
        self,
        message: str,
        location: Location,
        suggest_for: Optional[tuple[str, list[str]]] = None,
    ) -> None:
        self._collector.report(
            self._rule_id,
            message,
            location,
            from_=self._provenance[-1] if self._provenance else None,
            suggest_for=suggest_for,
        )
