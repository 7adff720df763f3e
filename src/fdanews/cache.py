"""In-memory TTL cache shared by the openFDA and Finnhub clients.

Semantics:
    - get() returns a value only while ``clock() - stored_at < ttl``
    - a stale entry is ignored, not removed; it stays until overwritten or
      until cleanup_expired() is called explicitly
    - set() always overwrites (never merges)
    - no capacity limit

Key conventions:
    - openFDA: openfda_{operation}_{limit}_{year}
    - symbols: symbol_{company_name}
    - dashboards: pharma_quotes_{year}, pharma_market_news_{year}

Usage:
    cache = TTLCache(ttl_seconds=300)
    quotes = cache.get("pharma_quotes_2026")
    if quotes is None:
        quotes = fetch_quotes()
        cache.set("pharma_quotes_2026", quotes)
"""
from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from .logger import get_logger
from .monitoring.metrics import record_cache_lookup

logger = get_logger(__name__)

DEFAULT_TTL_SECONDS = 300.0


class _Missing:
    def __repr__(self) -> str:
        return "MISSING"


# Distinguishes "not cached" from a cached None
MISSING: Any = _Missing()


@dataclass
class CacheEntry:
    """A cached value and the clock reading when it was stored."""

    value: Any
    stored_at: float

    def age(self, now: float) -> float:
        return now - self.stored_at


class TTLCache:
    """Process-wide key/value cache with a fixed time-to-live.

    Example:
        >>> clock = FakeClock()
        >>> cache = TTLCache(ttl_seconds=300, clock=clock)
        >>> cache.set("k", [1, 2])
        >>> cache.get("k")
        [1, 2]
        >>> clock.advance(301)
        >>> cache.get("k") is None
        True
        >>> len(cache)   # the stale entry is still there
        1
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Optional[Callable[[], float]] = None,
    ):
        """Create a cache.

        Args:
            ttl_seconds: Time-to-live (default 300s); values <= 0 are rejected
            clock: Zero-argument callable returning seconds (default time.monotonic)
        """
        if ttl_seconds <= 0:
            raise ValueError(f"ttl_seconds must be > 0, got {ttl_seconds!r}")
        self.ttl_seconds = float(ttl_seconds)
        self._clock = clock or time.monotonic
        self._store: Dict[str, CacheEntry] = {}
        self._lock = threading.Lock()
        self._stats = {"hits": 0, "misses": 0, "expired": 0, "puts": 0}

    def _is_fresh(self, entry: CacheEntry, now: float) -> bool:
        return entry.age(now) < self.ttl_seconds

    def get(self, key: str, default: Any = None) -> Any:
        """Return the cached value for key, or default when absent or stale."""
        now = self._clock()
        with self._lock:
            entry = self._store.get(key)
            if entry is None:
                self._stats["misses"] += 1
                result = "miss"
            elif not self._is_fresh(entry, now):
                self._stats["misses"] += 1
                self._stats["expired"] += 1
                result = "expired"
            else:
                self._stats["hits"] += 1
                result = "hit"

        record_cache_lookup(result)
        if result != "hit":
            logger.debug("Cache %s: %s", result, key)
            return default
        logger.debug("Cache hit: %s", key)
        return entry.value

    def set(self, key: str, value: Any) -> None:
        """Store value under key, overwriting any previous entry."""
        entry = CacheEntry(value=value, stored_at=self._clock())
        with self._lock:
            self._store[key] = entry
            self._stats["puts"] += 1
        logger.debug("Cached: %s", key)

    def has(self, key: str) -> bool:
        """True when key holds a fresh entry (does not touch stats)."""
        now = self._clock()
        with self._lock:
            entry = self._store.get(key)
            return entry is not None and self._is_fresh(entry, now)

    # ============================================================
    # Maintenance
    # ============================================================

    def cleanup_expired(self) -> int:
        """Drop stale entries. Never called implicitly.

        Returns:
            Number of entries removed
        """
        now = self._clock()
        with self._lock:
            stale = [k for k, e in self._store.items() if not self._is_fresh(e, now)]
            for k in stale:
                del self._store[k]
        if stale:
            logger.info("Removed %d expired cache entries", len(stale))
        return len(stale)

    def clear(self) -> None:
        with self._lock:
            self._store.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._store

    @property
    def stats(self) -> Dict[str, float]:
        """Copy of lookup statistics plus hit_rate."""
        with self._lock:
            s: Dict[str, float] = dict(self._stats)
        lookups = s["hits"] + s["misses"]
        s["hit_rate"] = s["hits"] / lookups if lookups else 0.0
        return s

    def summary(self) -> Dict[str, Any]:
        """Stats plus entry counts (fresh vs stale) and the TTL."""
        now = self._clock()
        with self._lock:
            fresh = sum(1 for e in self._store.values() if self._is_fresh(e, now))
            total = len(self._store)
        out: Dict[str, Any] = dict(self.stats)
        out.update({
            "n_entries": total,
            "n_fresh": fresh,
            "n_stale": total - fresh,
            "ttl_seconds": self.ttl_seconds,
        })
        return out
