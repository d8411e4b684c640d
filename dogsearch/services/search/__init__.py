"""
Cached, rate-limited listing search.

Components:
- query_normalizer: canonical cache keys
- distance: haversine annotation and ordering
- result_cache: TTL + LRU result cache
- orchestrator: cache, gate, data store and annotation composed per request
- runtime: process-wide handle with init/shutdown
"""

from .distance import AnnotatedResult, annotate, haversine_miles
from .orchestrator import SearchOrchestrator, SearchOutcome
from .query_normalizer import CacheKey, normalize
from .result_cache import CacheEntry, CacheStats, SearchResultCache
from .runtime import SearchRuntime, init_search_runtime, shutdown_search_runtime

__all__ = [
    "AnnotatedResult",
    "CacheEntry",
    "CacheKey",
    "CacheStats",
    "SearchOrchestrator",
    "SearchOutcome",
    "SearchResultCache",
    "SearchRuntime",
    "annotate",
    "haversine_miles",
    "init_search_runtime",
    "normalize",
    "shutdown_search_runtime",
]
