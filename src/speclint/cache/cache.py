"""Disk-based caching for remote documents.

Uses :mod:`diskcache` to persist the raw body and content type of documents
fetched over HTTP(S) with a configurable time-to-live (TTL). Local files are
never cached -- they are cheap to re-read and may change between runs.

Cache keys are SHA-256 hashes of the absolute URL.

See Also:
    :class:`~speclint.models.CacheConfig` -- the Pydantic model that
    controls ``enabled``, ``ttl_seconds``, and ``directory``.
"""

from __future__ import annotations

import hashlib
import logging
from pathlib import Path
from typing import Any, Optional

import diskcache

from speclint.models import CacheConfig

logger = logging.getLogger(__name__)


class DocumentCache:
    """Disk-backed cache for remote document bodies.

    Stores ``{"body": str, "mime_type": str | None}`` entries in a
    :class:`diskcache.Cache` directory. Entries expire after
    :attr:`~speclint.models.CacheConfig.ttl_seconds`.

    Args:
        cache_dir: Root directory for the cache. A ``documents/``
            subdirectory is created inside it.
        config: Cache configuration (``enabled`` flag and ``ttl_seconds``).

    Example::

        cache = DocumentCache("/tmp/speclint-cache", CacheConfig(enabled=True))
        cache.set("https://example.com/pet.yaml", "type: object", "application/yaml")
        hit = cache.get("https://example.com/pet.yaml")
    """

    def __init__(self, cache_dir: str | Path, config: CacheConfig) -> None:
        self._config = config
        self._cache: Optional[diskcache.Cache] = None
        if config.enabled:
            self._cache = diskcache.Cache(str(Path(cache_dir) / "documents"))

    def get(self, url: str) -> Optional[dict[str, Any]]:
        """Look up a cached document.

        Args:
            url: The absolute document URL.

        Returns:
            A ``dict`` with ``body`` and ``mime_type`` keys on a cache hit,
            or ``None`` on a miss or when caching is disabled.
        """
        if self._cache is None or not _is_remote(url):
            return None
        hit = self._cache.get(self._make_key(url))
        if hit is not None:
            logger.debug("Document cache hit for %s", url)
        return hit

    def set(self, url: str, body: str, mime_type: Optional[str] = None) -> None:
        """Store a fetched document body.

        Non-remote sources are silently ignored.

        Args:
            url: The absolute document URL.
            body: The raw document text.
            mime_type: The ``content-type`` the server reported, if any.
        """
        if self._cache is None or not _is_remote(url):
            return
        self._cache.set(
            self._make_key(url),
            {"body": body, "mime_type": mime_type},
            expire=self._config.ttl_seconds,
        )

    def close(self) -> None:
        """Close the underlying :class:`diskcache.Cache` and release resources."""
        if self._cache is not None:
            self._cache.close()

    def _make_key(self, url: str) -> str:
        return hashlib.sha256(url.encode()).hexdigest()


def _is_remote(url: str) -> bool:
    return url.startswith(("http://", "https://"))
