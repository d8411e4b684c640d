# dogsearch/services/search/result_cache.py
"""
In-process search result cache with TTL expiry and LRU eviction.

Policy:
- Entries live for a fixed TTL measured from creation. Hits never extend it,
  so results are never served past their TTL however popular they are.
- Expiry is lazy: an expired entry is dropped when it is looked up, or when
  the evictor needs room.
- Over capacity, expired entries go first, then least recently accessed.

All state sits behind one lock that is held only for map mutations. Callers
receive snapshot copies of entries and never mutate cache-owned state.
"""
from __future__ import annotations

from collections import OrderedDict
from dataclasses import dataclass, replace
import json
import logging
import threading
import time
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from .distance import AnnotatedResult
from .metrics import CACHE_ENTRIES, CACHE_EVICTIONS, CACHE_LOOKUPS
from .query_normalizer import CacheKey

logger = logging.getLogger(__name__)

# Configuration defaults (in seconds / entries)
DEFAULT_TTL_SECONDS = 60 * 5  # 5 minutes
DEFAULT_MAX_ENTRIES = 1000


@dataclass(frozen=True)
class CacheEntry:
    """A cached, fully annotated result set for one normalized query."""

    key: CacheKey
    results: Tuple[AnnotatedResult, ...]
    created_at: float
    expires_at: float
    last_accessed: float
    hit_count: int = 0
    size_bytes: int = 0

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at


@dataclass(frozen=True)
class CacheStats:
    """Point-in-time snapshot of cache counters."""

    entries: int
    hits: int
    misses: int
    evictions: int
    expirations: int
    max_entries: int
    ttl_seconds: float
    size_bytes: int

    @property
    def hit_rate(self) -> float:
        """Percentage of lookups served from cache."""
        total = self.hits + self.misses
        return round(self.hits / total * 100, 2) if total else 0.0


def estimate_size_bytes(results: Iterable[AnnotatedResult]) -> int:
    """Approximate serialized size of a result set."""
    payload = [item.to_dict() for item in results]
    return len(json.dumps(payload, default=str).encode())


class SearchResultCache:
    """
    Maps normalized query keys to annotated result sets.

    Lookups are O(1) through an OrderedDict whose order doubles as the LRU
    list (least recently accessed first).
    """

    def __init__(
        self,
        *,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self.ttl_seconds = float(ttl_seconds)
        self.max_entries = int(max_entries)
        self._clock = clock
        self._entries: "OrderedDict[CacheKey, CacheEntry]" = OrderedDict()
        self._lock = threading.Lock()
        self._stats: Dict[str, int] = self._initialize_stats()

    @staticmethod
    def _initialize_stats() -> Dict[str, int]:
        return {
            "hits": 0,
            "misses": 0,
            "evictions": 0,
            "expirations": 0,
            "size_bytes": 0,
        }

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def get(self, key: CacheKey) -> Optional[CacheEntry]:
        """Return a snapshot of the entry for key, or None on miss or expiry."""
        now = self._clock()
        with self._lock:
            try:
                entry = self._entries.get(key)
                if entry is None:
                    self._stats["misses"] += 1
                    CACHE_LOOKUPS.labels(outcome="miss").inc()
                    return None

                if entry.is_expired(now):
                    self._remove(key)
                    self._stats["misses"] += 1
                    self._stats["expirations"] += 1
                    CACHE_LOOKUPS.labels(outcome="expired").inc()
                    CACHE_EVICTIONS.labels(reason="expired").inc()
                    logger.debug(f"Cache entry expired: {key}")
                    return None

                refreshed = replace(entry, last_accessed=now, hit_count=entry.hit_count + 1)
                self._entries[key] = refreshed
                self._entries.move_to_end(key)
                self._stats["hits"] += 1
                CACHE_LOOKUPS.labels(outcome="hit").inc()
                logger.debug(f"Cache HIT: {key} (hits={refreshed.hit_count})")
                return refreshed
            except Exception as e:
                # Corrupted bookkeeping heals by forgetting the entry
                logger.warning(f"Cache lookup error for {key}, treating as miss: {e}")
                self._entries.pop(key, None)
                self._recount_size()
                self._stats["misses"] += 1
                return None

    def put(
        self,
        key: CacheKey,
        results: Iterable[AnnotatedResult],
        ttl: Optional[float] = None,
    ) -> CacheEntry:
        """Insert or replace the entry for key, evicting to stay within capacity."""
        frozen = tuple(results)
        size = estimate_size_bytes(frozen)
        lifetime = self.ttl_seconds if ttl is None else float(ttl)
        if lifetime <= 0:
            raise ValueError("ttl must be positive")

        now = self._clock()
        entry = CacheEntry(
            key=key,
            results=frozen,
            created_at=now,
            expires_at=now + lifetime,
            last_accessed=now,
            size_bytes=size,
        )

        with self._lock:
            if key in self._entries:
                self._remove(key)
            self._entries[key] = entry
            self._stats["size_bytes"] += size
            self._enforce_capacity(now)
            CACHE_ENTRIES.set(len(self._entries))

        logger.debug(f"Cached {len(frozen)} results for {key} (size: {size} bytes, ttl: {lifetime:.0f}s)")
        return entry

    def _enforce_capacity(self, now: float) -> None:
        if len(self._entries) <= self.max_entries:
            return

        expired = [k for k, e in self._entries.items() if e.is_expired(now)]
        for key in expired:
            self._remove(key)
            self._stats["expirations"] += 1
            CACHE_EVICTIONS.labels(reason="expired").inc()

        while len(self._entries) > self.max_entries:
            key, entry = next(iter(self._entries.items()))
            self._remove(key)
            self._stats["evictions"] += 1
            CACHE_EVICTIONS.labels(reason="capacity").inc()
            logger.debug(f"Evicted LRU cache entry {key} (hits: {entry.hit_count})")

    def _remove(self, key: CacheKey) -> None:
        entry = self._entries.pop(key, None)
        if entry is not None:
            self._stats["size_bytes"] = max(0, self._stats["size_bytes"] - entry.size_bytes)

    def _recount_size(self) -> None:
        self._stats["size_bytes"] = sum(e.size_bytes for e in self._entries.values())

    def stats(self) -> CacheStats:
        with self._lock:
            return CacheStats(
                entries=len(self._entries),
                hits=self._stats["hits"],
                misses=self._stats["misses"],
                evictions=self._stats["evictions"],
                expirations=self._stats["expirations"],
                max_entries=self.max_entries,
                ttl_seconds=self.ttl_seconds,
                size_bytes=self._stats["size_bytes"],
            )

    def clear(self) -> int:
        """Drop every entry and reset counters. Returns the number of entries removed."""
        with self._lock:
            entry_count = len(self._entries)
            self._entries.clear()
            self._stats = self._initialize_stats()
            CACHE_ENTRIES.set(0)
        if entry_count:
            CACHE_EVICTIONS.labels(reason="cleared").inc(entry_count)
        logger.info(f"Cleared search cache ({entry_count} entries)")
        return entry_count

    def invalidate(
        self,
        *,
        kind: Optional[str] = None,
        category: Optional[str] = None,
        postal_code: Optional[str] = None,
        state: Optional[str] = None,
    ) -> int:
        """
        Drop entries whose key matches every given filter.

        A key that does not restrict a field matches any filter on that
        field, because its results may hold listings of every kind, category,
        postal code and state. Counters are kept.
        """
        category = " ".join(category.lower().split()) if category else None
        postal_code = postal_code.strip().lower() if postal_code else None
        state = state.strip().upper() if state else None

        def matches(key: CacheKey) -> bool:
            if kind and key.kind not in (None, kind.strip().lower()):
                return False
            if category and key.categories and category not in key.categories:
                return False
            if postal_code and key.postal_code and key.postal_code != postal_code:
                return False
            if state and key.state and key.state != state:
                return False
            return True

        with self._lock:
            doomed: List[CacheKey] = [key for key in self._entries if matches(key)]
            for key in doomed:
                self._remove(key)
            CACHE_ENTRIES.set(len(self._entries))

        if doomed:
            CACHE_EVICTIONS.labels(reason="invalidated").inc(len(doomed))
            logger.info(f"Invalidated {len(doomed)} search cache entries")
        return len(doomed)
