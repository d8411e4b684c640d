# dogsearch/routes/v1/search.py
"""
Search routes - API v1

Location-aware listing search under /api/search, served from the result
cache when possible and rate limited per caller on cache misses.

Endpoints:
    POST /    → search services and products, annotated with distances
"""

import logging

from fastapi import APIRouter, Depends, Request, Response

from ...api.dependencies.services import get_search_orchestrator
from ...ratelimit.headers import set_decision_headers
from ...ratelimit.identity import resolve_identity
from ...schemas.search import SearchErrorResponse, SearchQuery, SearchResponse
from ...services.search.orchestrator import SearchOrchestrator

logger = logging.getLogger(__name__)

router = APIRouter(tags=["search"])


@router.post(
    "",
    response_model=SearchResponse,
    responses={
        400: {"model": SearchErrorResponse, "description": "Invalid search query"},
        429: {"model": SearchErrorResponse, "description": "Rate limit exceeded"},
        500: {"model": SearchErrorResponse, "description": "Search failed"},
    },
)
async def search_listings(
    payload: SearchQuery,
    request: Request,
    response: Response,
    orchestrator: SearchOrchestrator = Depends(get_search_orchestrator),
) -> SearchResponse:
    """
    Search listings near the user.

    Cache hits are served without consulting the rate limiter. On a miss the
    caller's rate window is checked first; denials return 429 with a
    Retry-After header.
    """
    identity = resolve_identity(request)
    outcome = await orchestrator.search(payload, identity)

    if outcome.decision is not None:
        set_decision_headers(response, outcome.decision)
    response.headers["X-Cache"] = "HIT" if outcome.from_cache else "MISS"

    return SearchResponse(results=outcome.to_payload(), from_cache=outcome.from_cache)
