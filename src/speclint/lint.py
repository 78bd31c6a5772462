"""Entry points: lint a parsed document, a string, or a file.

Example::

    import asyncio
    from speclint.lint import lint_from_string
    from speclint.models import LintConfig

    problems = asyncio.run(
        lint_from_string(text, "openapi.yaml", LintConfig(rules={"spec": "warn"}))
    )
    for problem in problems:
        print(problem.model_dump(by_alias=True))
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from speclint.collector import ProblemCollector, SuggestFn
from speclint.models import LintConfig, LintProblem
from speclint.node_types.registry import detect_spec_version, get_types, named_type
from speclint.resolver.document import Document
from speclint.resolver.loader import document_from_string
from speclint.resolver.resolver import BaseResolver, resolve_document
from speclint.walker import Walker

logger = logging.getLogger(__name__)


async def lint_document(
    document: Document,
    external_ref_resolver: Optional[BaseResolver] = None,
    config: Optional[LintConfig] = None,
    suggest: Optional[SuggestFn] = None,
) -> list[LintProblem]:
    """Validate *document* against the OpenAPI grammar of its declared version.

    Args:
        document: The parsed document to lint.
        external_ref_resolver: Resolver used for ``$ref``. Sharing one
            resolver between runs shares its loaded documents. A new one is
            created from ``config.resolve`` when omitted.
        config: Rule severities and resolve settings.
        suggest: ``(name, allowed) -> candidates`` called for unexpected
            fields and invalid literals.

    Returns:
        Problems in the order they were found.

    Raises:
        UnsupportedSpecVersionError: If the document is not OpenAPI 3.0/3.1.
    """
    config = config or LintConfig()
    resolver = external_ref_resolver or BaseResolver(config.resolve)

    version = detect_spec_version(document.parsed)
    types = get_types(version)
    root_type = named_type(types, "Root")
    logger.debug("Linting %s as %s", document.source.absolute_ref, version.value)

    resolved_refs = await resolve_document(document, root_type, resolver, types)

    collector = ProblemCollector(config, suggest)
    Walker(types, resolved_refs, resolver, collector).walk(document, root_type)

    problems = collector.problems
    logger.debug(
        "Found %d problem(s) in %s (%d dropped by config)",
        len(problems),
        document.source.absolute_ref,
        collector.dropped,
    )
    return problems


async def lint_from_string(
    source: str,
    absolute_ref: str = "",
    config: Optional[LintConfig] = None,
    external_ref_resolver: Optional[BaseResolver] = None,
    suggest: Optional[SuggestFn] = None,
) -> list[LintProblem]:
    """Parse *source* (JSON or YAML) and lint it.

    Args:
        source: Document text.
        absolute_ref: Identifier reported as each problem's ``source``;
            relative file references are resolved against it.

    Raises:
        YamlParseError: If *source* is not valid JSON or YAML.
        UnsupportedSpecVersionError: If the document is not OpenAPI 3.0/3.1.
    """
    document = document_from_string(source, absolute_ref)
    return await lint_document(document, external_ref_resolver, config, suggest)


async def lint_file(
    path: str,
    config: Optional[LintConfig] = None,
    external_ref_resolver: Optional[BaseResolver] = None,
    suggest: Optional[SuggestFn] = None,
) -> list[LintProblem]:
    """Load the document at *path* (a file path or http(s) URL) and lint it.

    Raises:
        ResolveError: If the document cannot be read or parsed.
        UnsupportedSpecVersionError: If the document is not OpenAPI 3.0/3.1.
    """
    config = config or LintConfig()
    resolver = external_ref_resolver or BaseResolver(config.resolve)
    document = await resolver.load_document(None, path)
    return await lint_document(document, resolver, config, suggest)


def lint_sync(
    path: str,
    config: Optional[LintConfig] = None,
    suggest: Optional[SuggestFn] = None,
) -> list[LintProblem]:
    """Blocking :func:`lint_file` for callers without an event loop."""
    return asyncio.run(lint_file(path, config, suggest=suggest))
