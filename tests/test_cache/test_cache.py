"""Tests for the DocumentCache module."""

from __future__ import annotations

import time

import pytest

from speclint.cache import DocumentCache
from speclint.models import CacheConfig

URL = "https://api.example.com/specs/pet.yaml"


@pytest.fixture()
def cache(tmp_path):
    """Create a DocumentCache with default config pointing at tmp_path."""
    config = CacheConfig(enabled=True, ttl_seconds=300)
    c = DocumentCache(tmp_path, config)
    yield c
    c.close()


@pytest.fixture()
def disabled_cache(tmp_path):
    """Create a disabled DocumentCache."""
    c = DocumentCache(tmp_path, CacheConfig(enabled=False))
    yield c
    c.close()


# ------------------------------------------------------------------ #
# Core get/set behaviour
# ------------------------------------------------------------------ #


class TestGetSet:
    def test_set_and_get(self, cache: DocumentCache) -> None:
        """Cache stores and retrieves a document body with its content type."""
        cache.set(URL, "type: object\n", "application/yaml")
        assert cache.get(URL) == {"body": "type: object\n", "mime_type": "application/yaml"}

    def test_cache_miss_returns_none(self, cache: DocumentCache) -> None:
        assert cache.get("https://api.example.com/missing.yaml") is None

    @pytest.mark.parametrize("ref", ["/abs/pet.yaml", "pet.yaml", "file:///pet.yaml"])
    def test_local_sources_not_cached(self, cache: DocumentCache, ref: str) -> None:
        """Only http(s) documents are cached."""
        cache.set(ref, "type: object\n")
        assert cache.get(ref) is None


class TestTTL:
    def test_ttl_expiry(self, tmp_path) -> None:
        """Entries expire after ttl_seconds."""
        c = DocumentCache(tmp_path, CacheConfig(enabled=True, ttl_seconds=1))
        try:
            c.set(URL, "{}")
            assert c.get(URL) is not None
            time.sleep(1.5)
            assert c.get(URL) is None
        finally:
            c.close()


class TestDisabled:
    def test_disabled_get_and_set(self, disabled_cache: DocumentCache) -> None:
        disabled_cache.set(URL, "{}")
        assert disabled_cache.get(URL) is None


class TestKeys:
    def test_entries_persist_across_instances(self, tmp_path) -> None:
        """A second cache on the same directory sees earlier entries."""
        config = CacheConfig(enabled=True, ttl_seconds=300)
        first = DocumentCache(tmp_path, config)
        first.set(URL, "a")
        first.close()

        second = DocumentCache(tmp_path, config)
        try:
            assert second.get(URL) == {"body": "a", "mime_type": None}
            assert second.get(URL + "?v=2") is None
        finally:
            second.close()

    def test_key_is_deterministic(self, cache: DocumentCache) -> None:
        assert cache._make_key(URL) == cache._make_key(URL)
        assert cache._make_key(URL) != cache._make_key(URL + "?v=2")


class TestClose:
    def test_double_close(self, tmp_path) -> None:
        c = DocumentCache(tmp_path, CacheConfig(enabled=True))
        c.close()
        c.close()
