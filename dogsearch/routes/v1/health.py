# dogsearch/routes/v1/health.py
"""
Health check and metrics endpoints for monitoring and load balancer probes.
"""

from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Request, Response

from dogsearch.core.config import settings
from dogsearch.core.constants import API_VERSION, BRAND_NAME
from dogsearch.monitoring.prometheus_metrics import render_latest
from dogsearch.schemas.health import HealthResponse

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
def health_check(request: Request) -> HealthResponse:
    app_settings = getattr(request.app.state, "settings", settings)
    return HealthResponse(
        status="healthy",
        service=f"{BRAND_NAME.lower().replace(' ', '-')}-search",
        version=API_VERSION,
        environment=app_settings.environment,
        timestamp=datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
    )


@router.get("/metrics", include_in_schema=False)
def prometheus_metrics() -> Response:
    """Prometheus exposition of the service registry."""
    payload, content_type = render_latest()
    return Response(content=payload, media_type=content_type, headers={"Cache-Control": "no-cache"})
