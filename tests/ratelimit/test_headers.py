from fastapi import Response

from dogsearch.ratelimit.headers import set_decision_headers, set_rate_headers
from dogsearch.ratelimit.window import Decision


def test_set_rate_headers_basic():
    res = Response()
    set_rate_headers(res, remaining=3, limit=10, reset_epoch_s=1_700_000_060.7, retry_after_s=None)
    assert res.headers["X-RateLimit-Remaining"] == "3"
    assert res.headers["X-RateLimit-Limit"] == "10"
    assert res.headers["X-RateLimit-Reset"] == "1700000060"
    assert "Retry-After" not in res.headers


def test_retry_after_rounds_up_to_whole_seconds():
    res = Response()
    set_rate_headers(res, remaining=-1, limit=10, reset_epoch_s=100.0, retry_after_s=0.2)
    assert res.headers["Retry-After"] == "1"
    assert res.headers["X-RateLimit-Remaining"] == "0"


def test_infinite_values_are_skipped():
    res = Response()
    set_rate_headers(res, remaining=0, limit=0, reset_epoch_s=float("inf"), retry_after_s=float("inf"))
    assert "X-RateLimit-Reset" not in res.headers
    assert "Retry-After" not in res.headers


def test_set_decision_headers_allowed_omits_retry_after():
    res = Response()
    set_decision_headers(res, Decision(True, retry_after_s=0.0, remaining=9, limit=10, reset_epoch_s=60.0))
    assert res.headers["X-RateLimit-Remaining"] == "9"
    assert "Retry-After" not in res.headers


def test_set_decision_headers_denied_sets_retry_after():
    res = Response()
    set_decision_headers(res, Decision(False, retry_after_s=12.3, remaining=0, limit=10, reset_epoch_s=60.0))
    assert res.headers["Retry-After"] == "13"
