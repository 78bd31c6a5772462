"""Per-version catalogs of OpenAPI node types.

Sub-modules:

* :mod:`~speclint.node_types.base` -- :class:`TypeDefinition`,
  :class:`ScalarSchema`, selectors, ``list_of``/``map_of`` helpers.
* :mod:`~speclint.node_types.oas3` -- the OpenAPI 3.0 catalog.
* :mod:`~speclint.node_types.oas3_1` -- the OpenAPI 3.1 catalog.
* :mod:`~speclint.node_types.registry` -- version detection and lookup.
"""

from speclint.node_types.base import (
    UNDECLARED,
    ScalarSchema,
    TypeDefinition,
    is_named_type,
    list_of,
    map_of,
)
from speclint.node_types.registry import (
    SpecVersion,
    definition_for,
    detect_spec_version,
    get_types,
    iter_child_nodes,
    iter_scalar_refs,
    named_type,
)

__all__ = [
    "UNDECLARED",
    "ScalarSchema",
    "SpecVersion",
    "TypeDefinition",
    "definition_for",
    "detect_spec_version",
    "get_types",
    "iter_child_nodes",
    "iter_scalar_refs",
    "is_named_type",
    "list_of",
    "map_of",
    "named_type",
]
