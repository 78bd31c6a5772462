"""Configuration helpers: cache directory resolution and rule severities.

Configuration *files* are discovered and merged by the surrounding pipeline;
this module only turns an already-loaded mapping into a validated
:class:`~speclint.models.LintConfig` and answers the two questions the engine
asks of it:

* Where do remote documents get cached? See :func:`get_cache_dir`
  (XDG Base Directory compliant on Linux/BSD, ``~/.speclint/cache`` elsewhere,
  ``$SPECLINT_CACHE_DIR`` overrides both).
* Which severity does a rule report at? See :func:`rule_severity`.
"""

from __future__ import annotations

import os
import platform
from pathlib import Path
from typing import Any, Mapping

from pydantic import ValidationError

from speclint.exceptions import ConfigError
from speclint.models import LintConfig, RuleSeverity

_APP_NAME = "speclint"
_CACHE_DIR_ENV = "SPECLINT_CACHE_DIR"

DEFAULT_SEVERITY = RuleSeverity.ERROR
"""Severity used for rules the configuration does not mention."""


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _xdg_base(env_var: str, default_segments: tuple[str, ...]) -> Path:
    """Resolve an XDG base directory from an env var with fallback segments under $HOME."""
    env_value = os.environ.get(env_var, "")
    if env_value:
        return Path(env_value)
    base = Path.home()
    for seg in default_segments:
        base = base / seg
    return base


def get_cache_dir() -> Path:
    """Return the cache directory for remote documents, creating it if necessary.

    Resolution order:

    1. ``$SPECLINT_CACHE_DIR``
    2. ``$XDG_CACHE_HOME/speclint/`` (default ``~/.cache/speclint/``) on Linux/BSD
    3. ``~/.speclint/cache/`` on macOS/Windows

    Returns:
        Absolute path to the cache directory (guaranteed to exist).
    """
    override = os.environ.get(_CACHE_DIR_ENV, "")
    if override:
        path = Path(override)
    elif _is_xdg_platform():
        path = _xdg_base("XDG_CACHE_HOME", (".cache",)) / _APP_NAME
    else:
        path = Path.home() / f".{_APP_NAME}" / "cache"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Lint config ---


def load_lint_config(data: Mapping[str, Any] | None = None) -> LintConfig:
    """Validate a configuration mapping into a :class:`~speclint.models.LintConfig`.

    Args:
        data: The already-parsed configuration (e.g. the ``lint`` section of
            a project config file). ``None`` yields the defaults.

    Returns:
        The validated configuration.

    Raises:
        ConfigError: If the mapping has an unknown severity or a malformed
            ``resolve`` section.
    """
    if data is None:
        return LintConfig()
    try:
        return LintConfig.model_validate(dict(data))
    except ValidationError as exc:
        raise ConfigError(f"Invalid lint config: {exc}") from exc


def rule_severity(config: LintConfig, rule_id: str) -> RuleSeverity:
    """Return the configured severity for *rule_id*, defaulting to ``error``."""
    return config.rules.get(rule_id, DEFAULT_SEVERITY)
