"""Canonical Pydantic models shared across all speclint modules.

The models fall into two groups:

**Configuration models** -- supplied by the caller of
:func:`~speclint.lint.lint_document`:
    :class:`RuleSeverity`, :class:`HttpHeader`, :class:`CacheConfig`,
    :class:`ResolveConfig`, and :class:`LintConfig`.

**Diagnostic models** -- produced by the
:class:`~speclint.collector.ProblemCollector`:
    :class:`LocationObject`, :class:`ProblemSource`, and :class:`LintProblem`.

Diagnostic models use snake_case attribute names with camelCase aliases, so
``problem.model_dump(by_alias=True)`` yields the wire shape consumed by the rest
of the linting pipeline (``ruleId``, ``from``, ``reportOnKey``).
"""

from __future__ import annotations

import enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


# --- Configuration ---


class RuleSeverity(str, enum.Enum):
    """Severity assigned to a rule in :class:`LintConfig`.

    ``OFF`` discards every problem the rule produces instead of downgrading it.
    """

    ERROR = "error"
    WARN = "warn"
    OFF = "off"


class HttpHeader(BaseModel):
    """An extra HTTP header sent when fetching remote documents.

    The header is only attached to URLs starting with ``matches``, so that
    credentials for one host never leak to another.

    Example::

        HttpHeader(matches="https://api.example.com/", name="Authorization",
                   value="Bearer abc123")
    """

    matches: str = Field(description="URL prefix the header applies to")
    name: str
    value: str


class CacheConfig(BaseModel):
    """Disk cache settings for remote (http/https) documents."""

    enabled: bool = Field(default=False, description="Cache fetched remote documents")
    ttl_seconds: int = Field(default=3600, description="Cache TTL in seconds")
    directory: Optional[str] = Field(
        default=None, description="Cache directory (defaults to the XDG cache dir)"
    )


class ResolveConfig(BaseModel):
    """Settings for loading documents referenced through ``$ref``."""

    http_headers: list[HttpHeader] = Field(default_factory=list)
    timeout: float = Field(default=30.0, description="HTTP timeout in seconds")
    cache: CacheConfig = Field(default_factory=CacheConfig)


class LintConfig(BaseModel):
    """Configuration for a single lint run.

    ``rules`` maps a rule identifier to its severity. The structural validator
    reports under the ``spec`` rule id. Rules that are not listed default to
    ``error``.

    Example::

        LintConfig(rules={"spec": "warn"})
    """

    model_config = ConfigDict(extra="allow")

    rules: dict[str, RuleSeverity] = Field(
        default_factory=lambda: {"spec": RuleSeverity.ERROR}
    )
    resolve: ResolveConfig = Field(default_factory=ResolveConfig)


# --- Diagnostics ---


class ProblemSource(BaseModel):
    """A ``(source, pointer)`` pair -- used for the one-hop ``from`` entry."""

    source: str
    pointer: str


class LocationObject(BaseModel):
    """Primary location of a problem.

    ``report_on_key`` tells renderers to underline the mapping key rather than
    its value (missing and unexpected fields).
    """

    source: str
    pointer: str
    report_on_key: bool = Field(default=False, alias="reportOnKey")

    model_config = {"populate_by_name": True}


class LintProblem(BaseModel):
    """A single diagnostic returned by :func:`~speclint.lint.lint_document`.

    ``location`` always holds exactly one entry for problems raised by the
    structural validator. ``from_`` is set only when the offending node was
    reached through a ``$ref`` and names the referencing node, one hop back.
    """

    rule_id: str = Field(alias="ruleId")
    severity: RuleSeverity
    message: str
    suggest: list[str] = Field(default_factory=list)
    from_: Optional[ProblemSource] = Field(default=None, alias="from")
    location: list[LocationObject] = Field(min_length=1)

    model_config = {"populate_by_name": True}
