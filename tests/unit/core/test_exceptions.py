from dogsearch.core.exceptions import (
    FetchFailedException,
    InvalidQueryException,
    RateLimitedException,
)


def test_invalid_query_to_http_exception():
    exc = InvalidQueryException("bad lat", details={"lat": 95})
    http_exc = exc.to_http_exception()
    assert http_exc.status_code == 400
    assert http_exc.detail["code"] == "INVALID_QUERY"
    assert http_exc.detail["message"] == "Invalid search query: bad lat"
    assert http_exc.detail["details"] == {"lat": 95}


def test_rate_limited_retry_after_is_whole_positive_seconds():
    assert RateLimitedException(0.01, limit=10, window_s=60).headers()["Retry-After"] == "1"
    exc = RateLimitedException(41.2, limit=10, window_s=60)
    assert exc.headers()["Retry-After"] == "42"
    assert exc.to_http_exception().status_code == 429
    assert exc.details["limit"] == 10


def test_fetch_failed_defaults():
    exc = FetchFailedException()
    assert exc.status_code == 500
    assert exc.code == "FETCH_FAILED"
    assert exc.message == "Search failed"


def test_rate_limited_with_infinite_retry_uses_window():
    exc = RateLimitedException(float("inf"), limit=0, window_s=60)
    assert exc.headers()["Retry-After"] == "60"


def test_rate_limited_headers_match_allowed_response_headers():
    exc = RateLimitedException(12.5, limit=10, window_s=60, reset_epoch_s=1_700_000_060.9)
    assert exc.headers() == {
        "Retry-After": "13",
        "X-RateLimit-Limit": "10",
        "X-RateLimit-Remaining": "0",
        "X-RateLimit-Reset": "1700000060",
    }


def test_rate_limited_headers_skip_unknown_reset():
    headers = RateLimitedException(5, limit=0, window_s=60, reset_epoch_s=float("inf")).headers()
    assert "X-RateLimit-Reset" not in headers
    assert headers["X-RateLimit-Limit"] == "0"
