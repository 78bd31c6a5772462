"""Disk-based caching of remote documents for speclint.

This package provides :class:`DocumentCache`, which stores the bodies of
documents fetched over HTTP(S) while resolving ``$ref`` pointers, so that
repeated lint runs against the same remote schemas do not hit the network
again until the TTL expires.

The cache is consumed by :class:`~speclint.resolver.resolver.BaseResolver`
and is controlled by :class:`~speclint.models.CacheConfig`.
"""

from speclint.cache.cache import DocumentCache

__all__ = ["DocumentCache"]
