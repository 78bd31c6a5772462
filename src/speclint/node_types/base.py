"""Building blocks for node type catalogs.

A catalog maps type names (``"Info"``, ``"Parameter"``, ``"Schema"``) to
:class:`TypeDefinition` objects describing which fields a node of that type
may carry and what each field holds. A field's *property type* is one of:

* a type name (``str``) or an anonymous :class:`TypeDefinition` -- the value
  is a nested node and is validated recursively;
* a :class:`ScalarSchema` -- the value is a primitive checked in place
  (JSON type, enumerated literals, per-item constraints, minimum);
* ``None`` -- the field is allowed and its value is not validated;
* a *selector* -- a pure callable ``(value, key) -> property type`` used for
  polymorphic fields such as ``items`` (schema or boolean) or the OAS 3.1
  ``type`` keyword (literal or list of literals);
* :data:`UNDECLARED` -- the field is not allowed.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Union


class _Undeclared:
    """Sentinel type for fields a :class:`TypeDefinition` does not allow."""

    def __repr__(self) -> str:
        return "UNDECLARED"


UNDECLARED = _Undeclared()
"""Property type meaning "this field is not expected here"."""


@dataclass(frozen=True)
class ScalarSchema:
    """Constraint on a primitive field value.

    Attributes:
        type: Expected JSON type (``string``, ``boolean``, ``number``,
            ``integer``, ``array``, ``object``, ``null``).
        enum: Closed set of allowed literals, in the order they are listed
            in diagnostics.
        items: Constraint applied to every element when the value is a list.
        minimum: Inclusive lower bound for numeric values.
        direct_resolve_as: The value is a bare reference string (discriminator
            mappings) that resolves to a node of this type.
        resolvable: Whether a ``$ref`` mapping in this position is followed
            before the constraint is applied.
    """

    type: Optional[str] = None
    enum: Optional[tuple[str, ...]] = None
    items: Optional[ScalarSchema] = None
    minimum: Optional[float] = None
    direct_resolve_as: Optional[str] = None
    resolvable: bool = True


Segment = Union[str, int]

Selector = Callable[[Any, str], "PropType"]

PropType = Union[str, "TypeDefinition", ScalarSchema, None, _Undeclared, Selector]

RequiredFn = Callable[[Any, Optional[str]], list[str]]
AllowedFn = Callable[[Any], Optional[list[str]]]


@dataclass(frozen=True, eq=False)
class TypeDefinition:
    """One node type of the OpenAPI grammar.

    Attributes:
        name: Type name used in diagnostics and catalog lookups.
        properties: Declared fields, in the order they are validated.
        additional_properties: Property type for keys not listed in
            ``properties``; :data:`UNDECLARED` makes them unexpected.
        items: Item type name -- set only for list types.
        required: Field names that must be present, or a pure function of
            the node (and its key in the parent) returning them.
        required_one_of: Alternative fields of which at least one must be
            present.
        allowed: Pure function of the node narrowing the allowed declared
            fields by a discriminant (``SecurityScheme.type``).
        extensions_prefix: Keys with this prefix are specification
            extensions and never reported as unexpected.
        ref_siblings: Keys written next to a ``$ref`` are validated against
            this type as well, after the target (OAS 3.1 ``Schema``).
    """

    name: str
    properties: dict[str, PropType] = field(default_factory=dict)
    additional_properties: PropType = UNDECLARED
    items: Optional[str] = None
    required: Union[tuple[str, ...], RequiredFn] = ()
    required_one_of: tuple[str, ...] = ()
    allowed: Optional[AllowedFn] = None
    extensions_prefix: str = "x-"
    ref_siblings: bool = False

    def required_fields(self, node: Any, key: Optional[str] = None) -> list[str]:
        if callable(self.required):
            return list(self.required(node, key))
        return list(self.required)

    def prop_type(self, key: str, value: Any) -> PropType:
        """Return the property type for *key*, evaluating selectors on *value*."""
        prop = self.properties.get(key, UNDECLARED)
        if prop is UNDECLARED:
            prop = self.additional_properties
        if is_selector(prop):
            prop = prop(value, key)
        return prop


def is_selector(prop: PropType) -> bool:
    return callable(prop) and not isinstance(prop, (TypeDefinition, ScalarSchema))


def is_named_type(prop: PropType) -> bool:
    """Return True if *prop* designates a nested node type."""
    return isinstance(prop, (str, TypeDefinition))


def list_of(item_type: str, name: Optional[str] = None) -> TypeDefinition:
    """Anonymous list type whose items are nodes of *item_type*."""
    return TypeDefinition(name or f"{item_type}List", items=item_type)


def map_of(value_type: str, name: Optional[str] = None) -> TypeDefinition:
    """Anonymous map type whose values are nodes of *value_type*."""
    return TypeDefinition(name or f"{value_type}Map", additional_properties=value_type)
