"""Accumulate problems emitted by the walker.

The collector is the only place where severities and suggestions are
attached: the walker reports *what* is wrong and *where*, the collector
decides how loud it is (from :attr:`~speclint.models.LintConfig.rules`) and
asks the suggestion function for replacement candidates.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from speclint.config import rule_severity
from speclint.models import LintConfig, LintProblem, LocationObject, ProblemSource, RuleSeverity
from speclint.resolver.document import Location

logger = logging.getLogger(__name__)

SuggestFn = Callable[[str, list[str]], list[str]]
"""``(offending_name, allowed_names) -> candidates``."""


def no_suggestions(name: str, allowed: list[str]) -> list[str]:
    """Default suggestion function: never suggests anything."""
    return []


class ProblemCollector:
    """Ordered sink for :class:`~speclint.models.LintProblem` objects.

    Problems are kept in the order they are reported. Nothing is sorted or
    de-duplicated: the same fault reached through two references is two
    problems.

    Args:
        config: Lint configuration supplying rule severities.
        suggest: Suggestion function called for unexpected fields and
            invalid enumerated values.
    """

    def __init__(self, config: Optional[LintConfig] = None, suggest: Optional[SuggestFn] = None) -> None:
        self._config = config or LintConfig()
        self._suggest = suggest or no_suggestions
        self._problems: list[LintProblem] = []
        self.dropped = 0

    @property
    def problems(self) -> list[LintProblem]:
        return list(self._problems)

    def report(
        self,
        rule_id: str,
        message: str,
        location: Location,
        *,
        from_: Optional[Location] = None,
        suggest_for: Optional[tuple[str, list[str]]] = None,
    ) -> Optional[LintProblem]:
        """Record one problem.

        Args:
            rule_id: Rule the problem belongs to (``"spec"``).
            message: Human-readable description.
            location: Where the problem is.
            from_: The reference node the problem was reached through.
            suggest_for: ``(name, allowed)`` to pass to the suggestion
                function, for unexpected fields and invalid literals.

        Returns:
            The recorded problem, or ``None`` if the rule is ``off``.
        """
        severity = rule_severity(self._config, rule_id)
        if severity == RuleSeverity.OFF:
            self.dropped += 1
            return None

        suggest: list[str] = []
        if suggest_for is not None:
            name, allowed = suggest_for
            suggest = list(self._suggest(name, list(allowed)))

        problem = LintProblem(
            rule_id=rule_id,
            severity=severity,
            message=message,
            suggest=suggest,
            from_=_problem_source(from_),
            location=[
                LocationObject(
                    source=location.source.absolute_ref,
                    pointer=location.pointer,
                    report_on_key=location.report_on_key,
                )
            ],
        )
        self._problems.append(problem)
        return problem


def _problem_source(location: Optional[Location]) -> Optional[ProblemSource]:
    if location is None:
        return None
    return ProblemSource(source=location.source.absolute_ref, pointer=location.pointer)
