"""Exception hierarchy for speclint.

All exceptions inherit from :class:`SpeclintError`. Faults *in the linted
document* are never raised -- they are reported as
:class:`~speclint.models.LintProblem` objects. Exceptions are reserved for
conditions the caller has to deal with: an unsupported specification version,
a broken type catalog, or invalid configuration. :class:`ResolveError` is the
one exception that is both raised (by the resolver) and recorded (on a
:class:`~speclint.resolver.resolver.ResolvedRef`, later turned into a problem
by the walker).

Subclass hierarchy::

    SpeclintError
    +-- ConfigError
    +-- ResolveError
    |   +-- YamlParseError
    +-- UnsupportedSpecVersionError
    +-- TypeRegistryError
"""

from __future__ import annotations


class SpeclintError(Exception):
    """Base exception for all speclint errors.

    Args:
        message: Human-readable error description.
    """

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ConfigError(SpeclintError):
    """Raised for invalid lint configuration (unknown severities, bad cache settings)."""


class ResolveError(SpeclintError):
    """Raised when a ``$ref`` cannot be resolved.

    Covers missing targets, malformed JSON pointers, and documents that cannot
    be read from disk or fetched over HTTP.

    Args:
        message: Human-readable error description.
        ref: The reference string that failed, when known.
    """

    def __init__(self, message: str, ref: str | None = None):
        super().__init__(message)
        self.ref = ref


class YamlParseError(ResolveError):
    """Raised when a referenced document is not valid YAML or JSON."""


class UnsupportedSpecVersionError(SpeclintError):
    """Raised when a document does not declare a supported OpenAPI version."""


class TypeRegistryError(SpeclintError):
    """Raised when a node type catalog references a type it does not define."""
