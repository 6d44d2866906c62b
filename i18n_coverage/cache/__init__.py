"""Caching layer: TTL tiers, fallback snapshots and cached upstream access."""

from .store import CacheKind, CacheEntry, CacheStore
from .content_source import CachedContentSource

__all__ = ["CacheKind", "CacheEntry", "CacheStore", "CachedContentSource"]
