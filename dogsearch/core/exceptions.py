# dogsearch/core/exceptions.py
"""
Domain-specific exceptions for the search API.

These exceptions carry a client-facing message, a stable code and optional
details, and know how to convert themselves into an HTTPException at the
API layer.
"""

import math
from typing import Any, Dict, Optional

from fastapi import HTTPException, status

from .constants import ERROR_FETCH_FAILED, ERROR_INVALID_QUERY, ERROR_RATE_LIMITED


class DomainException(Exception):
    """Base exception for all domain-specific errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def headers(self) -> Optional[Dict[str, str]]:
        return None

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=self.status_code,
            detail={
                "message": self.message,
                "code": self.code,
                "details": self.details,
            },
            headers=self.headers(),
        )


class InvalidQueryException(DomainException):
    """Raised when a search request has a bad shape or impossible coordinates."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, reason: str, *, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=f"{ERROR_INVALID_QUERY}: {reason}",
            code="INVALID_QUERY",
            details=details or {},
        )
        self.reason = reason


class RateLimitedException(DomainException):
    """Raised when the admission gate denies an uncached search."""

    status_code = status.HTTP_429_TOO_MANY_REQUESTS

    def __init__(
        self,
        retry_after_s: float,
        *,
        limit: int,
        window_s: float,
        reset_epoch_s: Optional[float] = None,
    ):
        if not math.isfinite(retry_after_s):
            # A zero limit never reopens; advertise one window
            retry_after_s = window_s
        super().__init__(
            message=ERROR_RATE_LIMITED,
            code="RATE_LIMITED",
            details={"retry_after": self.retry_after_header_value(retry_after_s), "limit": limit, "window_s": window_s},
        )
        self.retry_after_s = retry_after_s
        self.limit = limit
        self.window_s = window_s
        self.reset_epoch_s = reset_epoch_s

    @staticmethod
    def retry_after_header_value(retry_after_s: float) -> int:
        # Retry-After is whole seconds; never advertise 0 for a denied request
        return max(1, int(math.ceil(retry_after_s)))

    def headers(self) -> Dict[str, str]:
        headers = {
            "Retry-After": str(self.retry_after_header_value(self.retry_after_s)),
            "X-RateLimit-Limit": str(self.limit),
            "X-RateLimit-Remaining": "0",
        }
        if self.reset_epoch_s is not None and math.isfinite(self.reset_epoch_s):
            headers["X-RateLimit-Reset"] = str(int(self.reset_epoch_s))
        return headers


class FetchFailedException(DomainException):
    """Raised when the listings data store fails while serving a cache miss."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: Optional[str] = None, *, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message or ERROR_FETCH_FAILED,
            code="FETCH_FAILED",
            details=details or {},
        )


class RepositoryException(Exception):
    """
    Exception raised for repository layer errors.

    This exception is used when data access operations fail,
    such as database connection issues or query failures.
    """
