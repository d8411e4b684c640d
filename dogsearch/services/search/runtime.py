# dogsearch/services/search/runtime.py
"""
Lifecycle of the search runtime: the cache, admission gate and orchestrator
shared by every request in the process.

The application creates exactly one handle at startup and tears it down on
shutdown. Tests build their own handles so no state leaks between them.
"""
from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import Optional

from sqlalchemy.engine import Engine

from dogsearch.core.config import Settings
from dogsearch.database import build_engine, build_session_factory, init_db
from dogsearch.ratelimit.config import policy_from_settings
from dogsearch.ratelimit.gate import AdmissionGate
from dogsearch.repositories.listing_repository import make_listing_fetcher

from .orchestrator import CandidateFetcher, SearchOrchestrator
from .result_cache import SearchResultCache

logger = logging.getLogger(__name__)


@dataclass
class SearchRuntime:
    cache: SearchResultCache
    gate: AdmissionGate
    orchestrator: SearchOrchestrator
    # Owned engine, only when the runtime bound the default data store
    engine: Optional[Engine] = None
    closed: bool = field(default=False)


def init_search_runtime(
    settings: Settings,
    fetch_candidates: Optional[CandidateFetcher] = None,
) -> SearchRuntime:
    """
    Build the shared search components from settings.

    Without an explicit fetcher the SQLAlchemy listing repository is bound to
    a fresh engine on settings.database_url.
    """
    engine: Optional[Engine] = None
    if fetch_candidates is None:
        engine = build_engine(settings.database_url, echo=settings.database_echo)
        init_db(engine)
        fetch_candidates = make_listing_fetcher(build_session_factory(engine))

    cache = SearchResultCache(
        ttl_seconds=settings.search_cache_ttl_seconds,
        max_entries=settings.search_cache_max_entries,
    )
    gate = AdmissionGate(policy_from_settings(settings))
    orchestrator = SearchOrchestrator(
        cache=cache,
        gate=gate,
        fetch_candidates=fetch_candidates,
        coordinate_precision=settings.search_coordinate_precision,
    )
    logger.info(
        f"Search runtime ready: ttl={cache.ttl_seconds:g}s max_entries={cache.max_entries} "
        f"rate_limit={gate.policy.limit}/{gate.policy.window_s:g}s enabled={gate.policy.enabled}"
    )
    return SearchRuntime(cache=cache, gate=gate, orchestrator=orchestrator, engine=engine)


def shutdown_search_runtime(runtime: SearchRuntime) -> None:
    """Release cache and gate state. Safe to call more than once."""
    if runtime.closed:
        return
    runtime.closed = True
    runtime.cache.clear()
    runtime.gate.clear()
    if runtime.engine is not None:
        runtime.engine.dispose()
    logger.info("Search runtime shut down")
