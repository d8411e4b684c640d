import math

from fastapi import Response

from .window import Decision


def set_rate_headers(res: Response, remaining: int, limit: int, reset_epoch_s: float, retry_after_s: float | None):
    res.headers["X-RateLimit-Remaining"] = str(max(remaining, 0))
    res.headers["X-RateLimit-Limit"] = str(limit)
    if math.isfinite(reset_epoch_s):
        res.headers["X-RateLimit-Reset"] = str(int(reset_epoch_s))
    if retry_after_s and retry_after_s > 0 and math.isfinite(retry_after_s):
        res.headers["Retry-After"] = str(max(1, math.ceil(retry_after_s)))


def set_decision_headers(res: Response, decision: Decision) -> None:
    set_rate_headers(
        res,
        decision.remaining,
        decision.limit,
        decision.reset_epoch_s,
        decision.retry_after_s if not decision.allowed else None,
    )
