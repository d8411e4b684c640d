# dogsearch/api/dependencies/services.py
"""
Service layer dependencies for dependency injection.

Search components live on the runtime handle the application lifespan stores
on app.state; these factories hand them to route handlers.
"""

import logging
from typing import Optional

from fastapi import Depends, Request

from ...services.search.orchestrator import SearchOrchestrator
from ...services.search.result_cache import SearchResultCache
from ...services.search.runtime import SearchRuntime

logger = logging.getLogger(__name__)


def get_search_runtime(request: Request) -> SearchRuntime:
    """Get the process-wide search runtime for dependency injection."""
    runtime = getattr(request.app.state, "search_runtime", None)
    if runtime is None or runtime.closed:
        raise RuntimeError("Search runtime is not initialized")
    return runtime


def get_search_orchestrator(
    runtime: SearchRuntime = Depends(get_search_runtime),
) -> SearchOrchestrator:
    return runtime.orchestrator


def get_search_cache(request: Request) -> Optional[SearchResultCache]:
    """
    Get the result cache, or None when the runtime is missing or shut down.

    Cache routes report an unavailable cache with their own error envelope.
    """
    runtime = getattr(request.app.state, "search_runtime", None)
    if runtime is None or runtime.closed:
        return None
    return runtime.cache
