import logging
from typing import Any, Dict, Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .core.constants import ERROR_INVALID_QUERY
from .core.exceptions import DomainException, RateLimitedException

logger = logging.getLogger(__name__)


def _title_from_status(status_code: int) -> str:
    mapping = {
        400: "Bad Request",
        404: "Not Found",
        405: "Method Not Allowed",
        429: "Too Many Requests",
        500: "Internal Server Error",
    }
    return mapping.get(status_code, "Error")


def _envelope(
    *,
    error: str,
    code: Optional[str] = None,
    details: Optional[Any] = None,
) -> Dict[str, Any]:
    body: Dict[str, Any] = {"error": error}
    if code:
        body["code"] = code
    if details:
        body["details"] = jsonable_encoder(details)
    return body


def _parse_detail(detail: Any) -> tuple[Optional[str], Optional[str], Optional[Any]]:
    if isinstance(detail, dict):
        code = detail.get("code") if isinstance(detail.get("code"), str) else None
        message = detail.get("message") or detail.get("error") or detail.get("detail")
        detail_text = message if isinstance(message, str) else None
        errors = detail.get("details") or detail.get("errors")
        return detail_text, code, errors
    if isinstance(detail, str):
        return detail, None, None
    if detail is None:
        return None, None, None
    return str(detail), None, None


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(DomainException)
    async def domain_exception_handler(request: Request, exc: DomainException) -> JSONResponse:
        body = _envelope(error=exc.message, code=exc.code)
        if isinstance(exc, RateLimitedException):
            body["retryAfter"] = exc.retry_after_header_value(exc.retry_after_s)
        if exc.status_code >= 500:
            logger.error(f"{exc.code} on {request.method} {request.url.path}: {exc.message}")
        return JSONResponse(body, status_code=exc.status_code, headers=exc.headers())

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
        detail_text, code, errors = _parse_detail(exc.detail)
        return JSONResponse(
            _envelope(
                error=detail_text or _title_from_status(exc.status_code),
                code=code,
                details=errors,
            ),
            status_code=exc.status_code,
            headers=exc.headers,
        )

    @app.exception_handler(StarletteHTTPException)
    async def starlette_http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        detail_text, code, errors = _parse_detail(exc.detail)
        return JSONResponse(
            _envelope(
                error=detail_text or _title_from_status(exc.status_code),
                code=code,
                details=errors,
            ),
            status_code=exc.status_code,
            headers=exc.headers,
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        # Malformed payloads are invalid queries, not a distinct 422 class
        errors = jsonable_encoder(exc.errors())
        first = errors[0] if errors else {}
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        reason = first.get("msg", "malformed request")
        message = f"{ERROR_INVALID_QUERY}: {location}: {reason}" if location else f"{ERROR_INVALID_QUERY}: {reason}"
        return JSONResponse(
            _envelope(error=message, code="INVALID_QUERY", details=errors),
            status_code=400,
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
        return JSONResponse(
            _envelope(error=_title_from_status(500), code="INTERNAL_ERROR"),
            status_code=500,
        )
