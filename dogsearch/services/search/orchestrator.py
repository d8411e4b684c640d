# dogsearch/services/search/orchestrator.py
"""
Search orchestration: normalize, consult the cache, and only on a miss pass
the admission gate, fetch from the data store, annotate and cache.

Per-request flow:
    Received -> Normalized -> CacheHit -> Responding
    Received -> Normalized -> CacheMiss -> Admitted -> Fetching -> Annotating
             -> Cached -> Responding
    Received -> Normalized -> CacheMiss -> Denied -> Responding(error)

Concurrent misses for the same key are not coalesced; each fetches and the
last put wins. No lock is held while the data store is queried.
"""
from __future__ import annotations

import asyncio
from dataclasses import dataclass
import inspect
import logging
import time
from typing import Any, Awaitable, Callable, List, Optional, Sequence, Union

from dogsearch.core.exceptions import FetchFailedException, RateLimitedException
from dogsearch.domain.search_filters import CandidateFilters, ListingRecord
from dogsearch.ratelimit.gate import AdmissionGate
from dogsearch.ratelimit.window import Decision
from dogsearch.schemas.search import SearchQuery

from .distance import AnnotatedResult, annotate
from .metrics import FETCH_FAILURES, FETCH_LATENCY, SEARCH_RESULT_COUNT
from .query_normalizer import DEFAULT_COORDINATE_PRECISION, CacheKey, normalize
from .result_cache import SearchResultCache

logger = logging.getLogger(__name__)

CandidateFetcher = Callable[
    [CandidateFilters],
    Union[Sequence[ListingRecord], Awaitable[Sequence[ListingRecord]]],
]


@dataclass(frozen=True)
class SearchOutcome:
    """Results of one search and how they were produced."""

    key: CacheKey
    results: Sequence[AnnotatedResult]
    from_cache: bool
    # Gate decision, present only when the request took the miss path
    decision: Optional[Decision] = None

    def to_payload(self) -> List[dict[str, Any]]:
        return [item.to_dict() for item in self.results]


class SearchOrchestrator:
    """Composes normalizer, cache, admission gate, data store and annotator."""

    def __init__(
        self,
        *,
        cache: SearchResultCache,
        gate: AdmissionGate,
        fetch_candidates: CandidateFetcher,
        coordinate_precision: int = DEFAULT_COORDINATE_PRECISION,
        ttl_seconds: Optional[float] = None,
    ) -> None:
        self.cache = cache
        self.gate = gate
        self._fetch_candidates = fetch_candidates
        self.coordinate_precision = coordinate_precision
        self.ttl_seconds = ttl_seconds

    def normalize(self, query: SearchQuery) -> CacheKey:
        return normalize(query, coordinate_precision=self.coordinate_precision)

    async def search(self, query: SearchQuery, identity: str) -> SearchOutcome:
        """
        Serve a search from cache, or through the gate and the data store.

        Raises:
            InvalidQueryException: malformed query; cache and gate untouched
            RateLimitedException: miss denied by the gate; nothing fetched
            FetchFailedException: data store failed; cache untouched
        """
        perf_start = time.perf_counter()
        key = self.normalize(query)

        entry = self.cache.get(key)
        if entry is not None:
            SEARCH_RESULT_COUNT.labels(from_cache="true").observe(len(entry.results))
            logger.debug(f"Search served from cache: {key} ({len(entry.results)} results)")
            return SearchOutcome(key=key, results=entry.results, from_cache=True)

        decision = self.gate.check(identity)
        if not decision.allowed:
            raise RateLimitedException(
                decision.retry_after_s,
                limit=decision.limit,
                window_s=self.gate.policy.window_s,
                reset_epoch_s=decision.reset_epoch_s,
            )

        records = await self._fetch(key)
        results = annotate(records, key.location, key.sort_by_distance)
        self.cache.put(key, results, ttl=self.ttl_seconds)

        total_ms = int((time.perf_counter() - perf_start) * 1000)
        SEARCH_RESULT_COUNT.labels(from_cache="false").observe(len(results))
        logger.info(f"Search miss served: {key} results={len(results)} total_ms={total_ms}")
        return SearchOutcome(key=key, results=tuple(results), from_cache=False, decision=decision)

    async def _fetch(self, key: CacheKey) -> Sequence[ListingRecord]:
        filters = key.to_filters()
        fetch_start = time.perf_counter()
        try:
            if inspect.iscoroutinefunction(self._fetch_candidates):
                records = await self._fetch_candidates(filters)
            else:
                records = await asyncio.to_thread(self._fetch_candidates, filters)
                if inspect.isawaitable(records):
                    records = await records
        except Exception as e:
            FETCH_FAILURES.inc()
            logger.error(f"Candidate fetch failed for {key}: {e}")
            raise FetchFailedException(details={"key": str(key)}) from e
        finally:
            FETCH_LATENCY.observe((time.perf_counter() - fetch_start) * 1000)
        return list(records or [])
