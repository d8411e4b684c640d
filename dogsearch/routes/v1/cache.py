# dogsearch/routes/v1/cache.py
"""
Search cache introspection endpoints (v1 API).

GET reports counters for the in-process result cache; DELETE clears it, or
drops only matching entries when filters are given.
"""

from datetime import datetime, timezone
import logging
from typing import Optional, Union

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from ...api.dependencies.services import get_search_cache
from ...core.constants import (
    CACHE_TYPE,
    ERROR_CACHE_CLEAR,
    ERROR_CACHE_STATS,
    SUCCESS_CACHE_CLEARED,
    SUCCESS_CACHE_INVALIDATED,
)
from ...schemas.cache import (
    CacheClearData,
    CacheClearResponse,
    CacheErrorResponse,
    CacheStatsData,
    CacheStatsResponse,
)
from ...services.search.result_cache import SearchResultCache

logger = logging.getLogger(__name__)

router = APIRouter(
    tags=["cache"],
    responses={500: {"model": CacheErrorResponse, "description": "Cache operation failed"}},
)


def _require(cache: Optional[SearchResultCache]) -> SearchResultCache:
    if cache is None:
        raise RuntimeError("Search runtime is not initialized")
    return cache


def _error(message: str) -> JSONResponse:
    return JSONResponse(CacheErrorResponse(error=message).model_dump(), status_code=500)


@router.get("/stats", response_model=CacheStatsResponse)
async def get_cache_stats(
    cache: Optional[SearchResultCache] = Depends(get_search_cache),
) -> Union[CacheStatsResponse, JSONResponse]:
    """
    Get search cache statistics.

    Returns:
        Entry count, lookup counters, capacity, TTL and hit rate
    """
    try:
        stats = _require(cache).stats()
        return CacheStatsResponse(
            data=CacheStatsData(
                entries=stats.entries,
                hits=stats.hits,
                misses=stats.misses,
                evictions=stats.evictions,
                expirations=stats.expirations,
                max_entries=stats.max_entries,
                ttl_seconds=stats.ttl_seconds,
                size_bytes=stats.size_bytes,
                hit_rate=stats.hit_rate,
                timestamp=datetime.now(timezone.utc),
                cache_type=CACHE_TYPE,
            )
        )
    except Exception as e:
        logger.error(f"Cache stats error: {e}")
        return _error(ERROR_CACHE_STATS)


@router.delete("/stats", response_model=CacheClearResponse)
async def clear_cache(
    type: Optional[str] = Query(None, description="Only drop entries that may hold this listing kind"),
    category: Optional[str] = Query(None, description="Only drop entries filtered by this category"),
    postal_code: Optional[str] = Query(None, description="Only drop entries for this postal code"),
    state: Optional[str] = Query(None, description="Only drop entries for this state"),
    cache: Optional[SearchResultCache] = Depends(get_search_cache),
) -> Union[CacheClearResponse, JSONResponse]:
    """
    Clear the search cache.

    With no filters every entry is dropped and counters reset. With any
    filter only matching entries are removed and counters are kept.
    """
    try:
        if any(value for value in (type, category, postal_code, state)):
            removed = _require(cache).invalidate(kind=type, category=category, postal_code=postal_code, state=state)
            message = SUCCESS_CACHE_INVALIDATED
        else:
            removed = _require(cache).clear()
            message = SUCCESS_CACHE_CLEARED
        return CacheClearResponse(message=message, data=CacheClearData(cleared=removed))
    except Exception as e:
        logger.error(f"Cache clear error: {e}")
        return _error(ERROR_CACHE_CLEAR)
