"""Document loading and ``$ref`` resolution.

Sub-modules:

* :mod:`~speclint.resolver.document` -- :class:`Source`, :class:`Document`,
  :class:`Location` and JSON Pointer helpers.
* :mod:`~speclint.resolver.loader` -- reading files and URLs, JSON/YAML parsing.
* :mod:`~speclint.resolver.resolver` -- :class:`BaseResolver` and the
  :func:`resolve_document` pre-pass.
"""

from speclint.resolver.document import (
    ROOT_POINTER,
    Document,
    Location,
    Source,
    escape_pointer_segment,
    join_pointer,
    parse_pointer,
    unescape_pointer_segment,
)
from speclint.resolver.loader import document_from_string, make_document, parse_content, read_source
from speclint.resolver.resolver import (
    BaseResolver,
    ResolvedRef,
    ResolvedRefMap,
    is_ref,
    ref_key,
    ref_siblings,
    resolve_document,
)

__all__ = [
    "ROOT_POINTER",
    "BaseResolver",
    "Document",
    "Location",
    "ResolvedRef",
    "ResolvedRefMap",
    "Source",
    "document_from_string",
    "escape_pointer_segment",
    "is_ref",
    "join_pointer",
    "make_document",
    "parse_content",
    "parse_pointer",
    "read_source",
    "ref_key",
    "ref_siblings",
    "resolve_document",
    "unescape_pointer_segment",
]
