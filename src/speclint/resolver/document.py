"""Documents, sources, and JSON-Pointer locations.

Everything the linter reports is addressed by a :class:`Location`: the
:class:`Source` a node lives in plus an RFC 6901 JSON Pointer rooted at ``#/``.
Documents are treated as an addressable arena -- nodes are never linked to
their parents, and ``(absolute_ref, pointer)`` pairs are the stable keys used
for reference caching and cycle detection.

Pointer syntax:

* ``#/`` is the document root.
* Segments are separated by ``/``.
* Within a segment ``~`` is written ``~0`` and ``/`` is written ``~1``
  (so the path key ``/pets`` becomes the segment ``~1pets``).
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Optional
from urllib.parse import unquote

from speclint.exceptions import ResolveError
from speclint.node_types.base import Segment

ROOT_POINTER = "#/"


def escape_pointer_segment(segment: Segment) -> str:
    """Escape one pointer segment (``~`` -> ``~0``, ``/`` -> ``~1``)."""
    return str(segment).replace("~", "~0").replace("/", "~1")


def unescape_pointer_segment(segment: str) -> str:
    """Reverse :func:`escape_pointer_segment`, also undoing URI percent-encoding."""
    return unquote(segment).replace("~1", "/").replace("~0", "~")


def parse_pointer(pointer: str) -> list[str]:
    """Split a pointer into unescaped segments.

    Accepts both the fragment form (``#/components/schemas/Pet``) and the
    bare form (``/components/schemas/Pet``). ``#``, ``#/`` and the empty
    string all denote the root.

    Raises:
        ResolveError: If the pointer is neither empty nor starts with ``/``
            (e.g. a plain-name fragment such as ``#Pet``).
    """
    body = pointer[1:] if pointer.startswith("#") else pointer
    if body in ("", "/"):
        return []
    if not body.startswith("/"):
        raise ResolveError(f"Invalid JSON pointer: '{pointer}'")
    return [unescape_pointer_segment(seg) for seg in body[1:].split("/")]


def join_pointer(segments: list[Segment]) -> str:
    """Build a ``#/``-rooted pointer from raw (unescaped) segments."""
    return ROOT_POINTER + "/".join(escape_pointer_segment(s) for s in segments)


@dataclass(frozen=True)
class Source:
    """A loaded input: its identifier, raw text, and optional MIME type.

    Two sources are equal when their ``absolute_ref`` is equal; the body is
    not compared.

    Attributes:
        absolute_ref: File path, URL, or any caller-chosen identifier
            (e.g. ``"foobar.yaml"``).
        body: The raw text the document was parsed from.
        mime_type: ``content-type`` reported by a server, if any.
    """

    absolute_ref: str
    body: str = field(default="", compare=False, repr=False)
    mime_type: Optional[str] = field(default=None, compare=False)


@dataclass(frozen=True)
class Document:
    """A parsed :class:`Source`. Never mutated after load.

    Attributes:
        source: Where the document came from.
        parsed: The root value (usually a ``dict``) produced by the parser.
    """

    source: Source
    parsed: Any = field(compare=False, repr=False)

    def node_at(self, pointer: str) -> Any:
        """Return the node addressed by *pointer*.

        Raises:
            ResolveError: If the pointer is malformed or any segment does
                not exist in the document.
        """
        current: Any = self.parsed
        for segment in parse_pointer(pointer):
            if isinstance(current, dict):
                if segment not in current:
                    raise ResolveError(
                        f"Can't resolve $ref: key '{segment}' not found "
                        f"in {self.source.absolute_ref}{pointer}"
                    )
                current = current[segment]
            elif isinstance(current, list):
                try:
                    current = current[int(segment)]
                except (ValueError, IndexError) as exc:
                    raise ResolveError(
                        f"Can't resolve $ref: invalid array index '{segment}' "
                        f"in {self.source.absolute_ref}{pointer}"
                    ) from exc
            else:
                raise ResolveError(
                    f"Can't resolve $ref: cannot navigate into "
                    f"{type(current).__name__} in {self.source.absolute_ref}{pointer}"
                )
        return current


@dataclass(frozen=True)
class Location:
    """A node position: source plus ``#/``-rooted pointer.

    Attributes:
        source: The source the node belongs to.
        pointer: Escaped JSON pointer, always starting with ``#/``.
        report_on_key: Whether diagnostics should be anchored to the
            mapping key rather than the value.
    """

    source: Source
    pointer: str = ROOT_POINTER
    report_on_key: bool = False

    @property
    def absolute_pointer(self) -> str:
        """``absolute_ref`` and pointer concatenated, e.g. ``api.yaml#/info``."""
        return self.source.absolute_ref + self.pointer

    @property
    def segments(self) -> list[str]:
        return parse_pointer(self.pointer)

    def child(self, *segments: Segment) -> Location:
        """Return the location of a descendant, escaping each segment."""
        base = "#" if self.pointer == ROOT_POINTER else self.pointer
        suffix = "".join("/" + escape_pointer_segment(s) for s in segments)
        return Location(self.source, base + suffix)

    def key(self) -> Location:
        """Return a copy of this location that reports on the mapping key."""
        return replace(self, report_on_key=True)

    def contains(self, other: Location) -> bool:
        """Return True if *other* is this node or one of its descendants."""
        if self.source.absolute_ref != other.source.absolute_ref:
            return False
        if self.pointer == ROOT_POINTER or other.pointer == self.pointer:
            return True
        return other.pointer.startswith(self.pointer + "/")
