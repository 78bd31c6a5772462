"""Version detection and catalog lookup.

Catalogs are built once at import time, checked for dangling type names, and
shared by every lint run. The version of a document is decided once, at the
start of a run, by :func:`detect_spec_version`; nothing downstream branches on
the version again.
"""

from __future__ import annotations

import enum
from typing import Any, Callable, Iterator

from speclint.exceptions import TypeRegistryError, UnsupportedSpecVersionError
from speclint.node_types.base import (
    UNDECLARED,
    PropType,
    Segment,
    ScalarSchema,
    TypeDefinition,
    is_named_type,
)
from speclint.node_types.oas3 import OAS3_TYPES
from speclint.node_types.oas3_1 import OAS3_1_TYPES


class SpecVersion(str, enum.Enum):
    """OpenAPI grammar revisions with a node type catalog."""

    OAS3_0 = "oas3_0"
    OAS3_1 = "oas3_1"


def _check_catalog(types: dict[str, TypeDefinition]) -> dict[str, TypeDefinition]:
    """Verify every statically referenced type name exists in *types*.

    Names returned by selectors are only known at walk time and are checked
    by :func:`named_type` instead.

    Raises:
        TypeRegistryError: On the first dangling reference.
    """

    def check(prop: PropType, owner: str) -> None:
        if isinstance(prop, str) and prop not in types:
            raise TypeRegistryError(f"Type '{owner}' references unknown type '{prop}'")
        if isinstance(prop, TypeDefinition):
            check_definition(prop)

    def check_definition(definition: TypeDefinition) -> None:
        for prop in definition.properties.values():
            check(prop, definition.name)
        check(definition.additional_properties, definition.name)
        if definition.items is not None:
            check(definition.items, definition.name)

    for definition in types.values():
        check_definition(definition)
    return types


_CATALOGS: dict[SpecVersion, dict[str, TypeDefinition]] = {
    SpecVersion.OAS3_0: _check_catalog(OAS3_TYPES),
    SpecVersion.OAS3_1: _check_catalog(OAS3_1_TYPES),
}


def detect_spec_version(root: Any) -> SpecVersion:
    """Return the grammar revision a parsed document declares.

    Args:
        root: The parsed document root.

    Returns:
        :attr:`SpecVersion.OAS3_0` for ``openapi: 3.0.x`` and
        :attr:`SpecVersion.OAS3_1` for ``openapi: 3.1.x``.

    Raises:
        UnsupportedSpecVersionError: For Swagger 2.x, a missing ``openapi``
            field, a non-mapping root, or any other version.
    """
    if not isinstance(root, dict):
        raise UnsupportedSpecVersionError(
            "Document root must be a mapping (got "
            f"{type(root).__name__ if root is not None else 'empty document'})"
        )

    if "swagger" in root:
        raise UnsupportedSpecVersionError(
            f"Swagger {root['swagger']} is not supported. "
            "Only OpenAPI 3.0.x and 3.1.x are supported."
        )

    version = root.get("openapi")
    if version is None:
        raise UnsupportedSpecVersionError(
            "Missing 'openapi' field. Is this an OpenAPI 3.x document?"
        )

    version_str = str(version)
    if version_str == "3.0" or version_str.startswith("3.0."):
        return SpecVersion.OAS3_0
    if version_str == "3.1" or version_str.startswith("3.1."):
        return SpecVersion.OAS3_1

    raise UnsupportedSpecVersionError(
        f"Unsupported OpenAPI version: {version_str}. "
        "Only OpenAPI 3.0.x and 3.1.x are supported."
    )


def get_types(spec_version: SpecVersion | str) -> dict[str, TypeDefinition]:
    """Return the whole catalog for *spec_version*.

    Raises:
        TypeRegistryError: If no catalog exists for the version.
    """
    try:
        return _CATALOGS[SpecVersion(spec_version)]
    except ValueError as exc:
        raise TypeRegistryError(f"No node types for version '{spec_version}'") from exc


def definition_for(type_name: str, spec_version: SpecVersion | str) -> TypeDefinition:
    """Return the :class:`TypeDefinition` named *type_name* for *spec_version*.

    Raises:
        TypeRegistryError: If the version or the type name is unknown.
    """
    return named_type(get_types(spec_version), type_name)


def named_type(types: dict[str, TypeDefinition], prop: str | TypeDefinition) -> TypeDefinition:
    """Resolve a property type that designates a node type to its definition."""
    if isinstance(prop, TypeDefinition):
        return prop
    try:
        return types[prop]
    except KeyError as exc:
        raise TypeRegistryError(f"Unknown node type '{prop}'") from exc


def _allowed_keys(node: dict[str, Any], definition: TypeDefinition) -> Callable[[str], bool]:
    """Return a predicate for keys the discriminant of *node* does not reject."""
    if definition.allowed is None:
        return lambda name: True
    allowed = definition.allowed(node)
    if allowed is None:
        return lambda name: True
    return lambda name: name in allowed or name.startswith(definition.extensions_prefix)


def iter_child_nodes(
    node: Any, definition: TypeDefinition, types: dict[str, TypeDefinition]
) -> Iterator[tuple[Segment, Any, TypeDefinition]]:
    """Yield ``(segment, value, definition)`` for every nested node of *node*.

    List types yield their items by index. Object types yield declared
    properties in declaration order, then keys matched by
    ``additional_properties`` in the node's own order, skipping fields the
    discriminant rejects (``allowed``). Bare reference strings
    (discriminator mappings) are yielded as synthetic ``{"$ref": value}``
    nodes so that they are resolved like any other reference.
    """
    if definition.items is not None:
        if isinstance(node, list):
            item_type = named_type(types, definition.items)
            for index, item in enumerate(node):
                yield index, item, item_type
        return
    if not isinstance(node, dict):
        return

    keys: list[Any] = [name for name in definition.properties if name in node]
    if definition.additional_properties is not UNDECLARED:
        keys.extend(k for k in node if str(k) not in definition.properties)
    allowed = _allowed_keys(node, definition)

    for key in keys:
        if not allowed(str(key)):
            continue
        value = node[key]
        prop = definition.prop_type(str(key), value)
        if isinstance(prop, ScalarSchema):
            if prop.direct_resolve_as and isinstance(value, str):
                yield key, {"$ref": value}, named_type(types, prop.direct_resolve_as)
        elif is_named_type(prop):
            yield key, value, named_type(types, prop)


def iter_scalar_refs(node: Any, definition: TypeDefinition) -> Iterator[tuple[Segment, Any]]:
    """Yield ``(key, value)`` for ``$ref`` mappings found in primitive fields.

    A field constrained by a resolvable :class:`ScalarSchema` may still be
    written as a reference; its target is checked against the constraint.
    """
    if definition.items is not None or not isinstance(node, dict):
        return
    allowed = _allowed_keys(node, definition)
    for key, value in node.items():
        if not (isinstance(value, dict) and isinstance(value.get("$ref"), str)):
            continue
        if not allowed(str(key)):
            continue
        prop = definition.prop_type(str(key), value)
        if isinstance(prop, ScalarSchema) and prop.resolvable:
            yield key, value
