"""Shared test fixtures for speclint.

Provides fixtures for building documents from inline YAML, loading the
fixture files under ``tests/fixtures/``, running the linter synchronously,
and isolating the cache directory. These fixtures are automatically
discovered by pytest and available to all test modules without explicit
imports.
"""

from __future__ import annotations

import asyncio
import textwrap
from pathlib import Path
from typing import Any, Callable, Optional

import pytest

from speclint.lint import lint_document
from speclint.models import LintConfig
from speclint.resolver import BaseResolver, Document, document_from_string


FIXTURES_DIR = Path(__file__).parent / "fixtures"


# ---------------------------------------------------------------------------
# Environment isolation
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _isolated_cache_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point the cache directory at a per-test temp dir."""
    cache_dir = tmp_path / "speclint-cache"
    monkeypatch.setenv("SPECLINT_CACHE_DIR", str(cache_dir))
    return cache_dir


# ---------------------------------------------------------------------------
# Document builders
# ---------------------------------------------------------------------------


@pytest.fixture
def fixtures_dir() -> Path:
    return FIXTURES_DIR


@pytest.fixture
def make_document() -> Callable[..., Document]:
    """Return a builder that parses dedented YAML into a Document.

    Usage::

        doc = make_document('''
            openapi: 3.0.0
            paths: {}
        ''', "foobar.yaml")
    """

    def _make(text: str, absolute_ref: str = "foobar.yaml") -> Document:
        return document_from_string(textwrap.dedent(text).strip() + "\n", absolute_ref)

    return _make


@pytest.fixture
def lint_yaml(make_document: Callable[..., Document]) -> Callable[..., list[dict[str, Any]]]:
    """Return a helper that lints inline YAML and dumps problems in wire shape.

    Problems come back as ``model_dump(by_alias=True)`` dicts so tests can
    compare against the ``{ruleId, severity, message, ...}`` shape directly.
    """

    def _lint(
        text: str,
        absolute_ref: str = "foobar.yaml",
        config: Optional[LintConfig] = None,
        **kwargs: Any,
    ) -> list[dict[str, Any]]:
        document = make_document(text, absolute_ref)
        problems = asyncio.run(
            lint_document(document, BaseResolver(), config or LintConfig(), **kwargs)
        )
        return [p.model_dump(by_alias=True, mode="json") for p in problems]

    return _lint
