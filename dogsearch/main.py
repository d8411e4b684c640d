# dogsearch/main.py
"""
FastAPI application for the dog services directory search API.

The search runtime (result cache, admission gate, orchestrator) is created
in the lifespan and stored on app.state; it never lives in a module global.
"""

from contextlib import asynccontextmanager
import logging
from typing import AsyncGenerator, Optional

from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .core.config import Settings, settings as default_settings
from .core.constants import ALLOWED_ORIGINS, API_DESCRIPTION, API_TITLE, API_VERSION, BRAND_NAME
from .errors import register_error_handlers
from .middleware.prometheus_middleware import PrometheusMiddleware
from .routes.v1 import cache as cache_v1, health as health_v1, search as search_v1
from .services.search.orchestrator import CandidateFetcher
from .services.search.runtime import init_search_runtime, shutdown_search_runtime

# Configure logging
logging.basicConfig(
    level=default_settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    fetch_candidates: Optional[CandidateFetcher] = None,
) -> FastAPI:
    """
    Build an application with its own search runtime.

    Args:
        settings: Configuration; the module-level settings when omitted
        fetch_candidates: Data store collaborator; the SQLAlchemy listing
            repository when omitted
    """
    app_settings = settings or default_settings

    @asynccontextmanager
    async def app_lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Handle application startup/shutdown without deprecated events."""
        logger.info(f"{BRAND_NAME} search API starting up...")
        logger.info(f"Environment: {app_settings.environment}")
        runtime = init_search_runtime(app_settings, fetch_candidates)
        app.state.search_runtime = runtime
        try:
            yield
        finally:
            logger.info(f"{BRAND_NAME} search API shutting down...")
            shutdown_search_runtime(runtime)

    app = FastAPI(
        title=API_TITLE,
        description=API_DESCRIPTION,
        version=API_VERSION,
        lifespan=app_lifespan,
    )
    app.state.settings = app_settings

    register_error_handlers(app)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=[
            "Retry-After",
            "X-Cache",
            "X-RateLimit-Limit",
            "X-RateLimit-Remaining",
            "X-RateLimit-Reset",
        ],
    )
    app.add_middleware(PrometheusMiddleware)

    api = APIRouter(prefix="/api")
    api.include_router(search_v1.router, prefix="/search")
    api.include_router(cache_v1.router, prefix="/cache")
    app.include_router(api)
    app.include_router(health_v1.router)

    return app


app = create_app()

__all__ = ["app", "create_app"]


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("dogsearch.main:app", host="0.0.0.0", port=8000, log_level="info")
