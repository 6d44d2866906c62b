"""Multi-tier TTL cache with a never-expiring fallback tier."""

import threading
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, Optional

from ..config import Config, config as default_config
from ..utils.logger_utils import LoggerUtils

logger = LoggerUtils.get_logger(__name__)


class CacheKind(str, Enum):
    """Cache tiers, each with its own TTL."""
    STRUCTURE = "structure"
    FILE = "file"
    LISTING = "listing"
    COVERAGE = "coverage"
    KEY_COUNTS = "key_counts"


@dataclass(frozen=True)
class CacheEntry:
    """A cached value together with its insertion time and lifetime."""

    key: str
    value: Any
    inserted_at: float
    ttl_seconds: Optional[float]   # None never expires
    updated_at: str = ""

    def is_expired(self, now: float) -> bool:
        if self.ttl_seconds is None:
            return False
        return now - self.inserted_at >= self.ttl_seconds


@dataclass
class TierStats:
    """Hit/miss counters of one tier."""
    hits: int = 0
    misses: int = 0
    keys: int = 0


class _Tier:
    """A single key/value tier with one default TTL."""

    def __init__(self, ttl: Optional[float], clock: Callable[[], float]):
        self.ttl = ttl
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}
        self.stats = TierStats()

    def get(self, key: str) -> Optional[CacheEntry]:
        entry = self._entries.get(key)
        if entry is None:
            self.stats.misses += 1
            return None
        if entry.is_expired(self._clock()):
            del self._entries[key]
            self.stats.misses += 1
            return None
        self.stats.hits += 1
        return entry

    def set(self, key: str, value: Any, ttl: Optional[float] = None) -> CacheEntry:
        entry = CacheEntry(
            key=key,
            value=value,
            inserted_at=self._clock(),
            ttl_seconds=self.ttl if ttl is None else ttl,
            updated_at=datetime.now(timezone.utc).isoformat(),
        )
        self._entries[key] = entry
        return entry

    def delete_matching(self, fragment: str) -> int:
        doomed = [key for key in self._entries if fragment in key]
        for key in doomed:
            del self._entries[key]
        return len(doomed)

    def clear(self) -> None:
        self._entries.clear()

    def snapshot_stats(self) -> Dict[str, int]:
        return {
            "hits": self.stats.hits,
            "misses": self.stats.misses,
            "keys": len(self._entries),
        }


class CacheStore:
    """
    Owns every cached value of the service.

    Keys are built from (kind, owner, repo, path[, language]). Each kind has a
    TTL-scoped tier; the fallback tier never expires and keeps the most recent
    successful value per key so it can be served during upstream outages.

    Values must be immutable snapshots (frozen dataclasses, tuples, bytes);
    the store never copies them. All operations are guarded by one lock so the
    store can be shared by concurrent requests.
    """

    def __init__(
        self,
        settings: Optional[Config] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        settings = settings or default_config
        self._clock = clock
        self._lock = threading.RLock()
        self._tiers: Dict[CacheKind, _Tier] = {
            CacheKind.STRUCTURE: _Tier(settings.structure_ttl, clock),
            CacheKind.FILE: _Tier(settings.file_ttl, clock),
            CacheKind.LISTING: _Tier(settings.listing_ttl, clock),
            CacheKind.COVERAGE: _Tier(settings.coverage_ttl, clock),
            CacheKind.KEY_COUNTS: _Tier(settings.key_counts_ttl, clock),
        }
        self._fallback = _Tier(None, clock)

    @staticmethod
    def make_key(
        kind: CacheKind,
        owner: str,
        repo: str,
        path: str = "",
        language: Optional[str] = None,
    ) -> str:
        """Build the cache key for a (kind, owner, repo, path[, language]) tuple."""
        key = f"{kind.value}:{owner}:{repo}:{path}"
        if language is not None:
            key = f"{key}:{language}"
        return key

    def get(
        self,
        kind: CacheKind,
        owner: str,
        repo: str,
        path: str = "",
        language: Optional[str] = None,
    ) -> Optional[Any]:
        """Return a fresh cached value, or None on miss/expiry."""
        key = self.make_key(kind, owner, repo, path, language)
        with self._lock:
            entry = self._tiers[kind].get(key)
        return entry.value if entry else None

    def set(
        self,
        kind: CacheKind,
        owner: str,
        repo: str,
        value: Any,
        path: str = "",
        language: Optional[str] = None,
        ttl: Optional[float] = None,
    ) -> None:
        """Store a value in its kind's tier (tier TTL unless ttl is given)."""
        key = self.make_key(kind, owner, repo, path, language)
        with self._lock:
            self._tiers[kind].set(key, value, ttl)

    def get_fallback(
        self,
        kind: CacheKind,
        owner: str,
        repo: str,
        path: str = "",
        language: Optional[str] = None,
    ) -> Optional[Any]:
        """Return the last known good value, regardless of age."""
        entry = self.get_fallback_entry(kind, owner, repo, path, language)
        return entry.value if entry else None

    def get_fallback_entry(
        self,
        kind: CacheKind,
        owner: str,
        repo: str,
        path: str = "",
        language: Optional[str] = None,
    ) -> Optional[CacheEntry]:
        """Like get_fallback, but with the entry's bookkeeping (updated_at)."""
        key = self.make_key(kind, owner, repo, path, language)
        with self._lock:
            return self._fallback.get(key)

    def set_fallback(
        self,
        kind: CacheKind,
        owner: str,
        repo: str,
        value: Any,
        path: str = "",
        language: Optional[str] = None,
    ) -> None:
        """Record the most recent successful value; never expires."""
        key = self.make_key(kind, owner, repo, path, language)
        with self._lock:
            self._fallback.set(key, value)

    def invalidate_repository(self, owner: str, repo: str) -> int:
        """
        Drop TTL-scoped entries of one repository.

        The fallback tier is left intact so an outage right after an
        invalidation can still be bridged.
        """
        fragment = f":{owner}:{repo}:"
        with self._lock:
            removed = sum(tier.delete_matching(fragment) for tier in self._tiers.values())
        logger.info("Invalidated %d cache entries for %s/%s", removed, owner, repo)
        return removed

    def flush_all(self, include_fallback: bool = False) -> None:
        """Clear every TTL-scoped tier (and the fallback tier if asked)."""
        with self._lock:
            for tier in self._tiers.values():
                tier.clear()
            if include_fallback:
                self._fallback.clear()

    def stats(self) -> Dict[str, Dict[str, int]]:
        """Hit/miss/key counts per tier."""
        with self._lock:
            result = {kind.value: tier.snapshot_stats() for kind, tier in self._tiers.items()}
            result["fallback"] = self._fallback.snapshot_stats()
        return result
