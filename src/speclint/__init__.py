"""speclint -- Structural validation of OpenAPI 3.0/3.1 descriptions.

This package checks an OpenAPI document against the grammar of the
specification version it declares and reports every structural fault with a
JSON-Pointer location. It is meant to be embedded in a larger linting pipeline:
callers hand over a parsed document and a reference resolver and get an ordered
list of :class:`~speclint.models.LintProblem` objects back.

Typical usage::

    import asyncio

    from speclint.lint import lint_file
    from speclint.models import LintConfig

    problems = asyncio.run(lint_file("openapi.yaml", LintConfig()))
    for problem in problems:
        print(problem.message, problem.location[0].pointer)

Modules:
    lint: Public entry points (``lint_document`` and friends).
    walker: Recursive structural validator (the ``spec`` rule).
    collector: Severity assignment, suggestions, and problem accumulation.
    node_types: Per-version catalogs of OpenAPI node types.
    resolver: Documents, pointers, loading, and ``$ref`` resolution.
    models: Pydantic models for configuration and diagnostics.
    config: Cache directory and rule-severity helpers.
    exceptions: Exception hierarchy.
"""

__version__ = "0.3.0"
