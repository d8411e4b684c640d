# dogsearch/services/search/metrics.py
"""
Prometheus metrics for listing search.

Provides observability for:
- Result cache hits, misses, evictions and expirations
- Fetch latency and failures on the miss path
"""
from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram

from dogsearch.monitoring.prometheus_metrics import REGISTRY

CACHE_LOOKUPS = Counter(
    "dogsearch_search_cache_lookups_total",
    "Result cache lookups by outcome",
    ["outcome"],  # hit | miss | expired
    registry=REGISTRY,
)

CACHE_EVICTIONS = Counter(
    "dogsearch_search_cache_evictions_total",
    "Entries removed from the result cache",
    ["reason"],  # capacity | expired | invalidated | cleared
    registry=REGISTRY,
)

CACHE_ENTRIES = Gauge(
    "dogsearch_search_cache_entries",
    "Entries currently held by the result cache",
    registry=REGISTRY,
)

FETCH_LATENCY = Histogram(
    "dogsearch_search_fetch_latency_ms",
    "Data store fetch latency on cache misses in milliseconds",
    registry=REGISTRY,
    buckets=[5, 10, 25, 50, 100, 200, 500, 1000, 2000],
)

FETCH_FAILURES = Counter(
    "dogsearch_search_fetch_failures_total",
    "Data store fetches that failed on the miss path",
    registry=REGISTRY,
)

SEARCH_RESULT_COUNT = Histogram(
    "dogsearch_search_result_count",
    "Number of search results returned",
    ["from_cache"],
    registry=REGISTRY,
    buckets=[0, 1, 5, 10, 20, 50, 100],
)
