from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass
class Decision:
    allowed: bool
    retry_after_s: float
    remaining: int
    limit: int
    reset_epoch_s: float


@dataclass(frozen=True)
class RateWindow:
    """Per-identity counter state for the current fixed window."""

    count: int
    window_start: float
    last_seen: float


def fixed_window_decide(
    now_s: float,
    window: Optional[RateWindow],
    limit: int,
    window_s: float,
) -> Tuple[RateWindow, Decision]:
    """
    Fixed-window counter pure decision function.

    Args:
        now_s: current wall time in seconds (epoch)
        window: stored window for the identity, or None if new
        limit: requests permitted per window
        window_s: window length in seconds

    Returns:
        (new_window, Decision)
    """
    if limit <= 0:
        # Zero limit -> always blocked
        state = window or RateWindow(count=0, window_start=now_s, last_seen=now_s)
        decision = Decision(False, retry_after_s=float("inf"), remaining=0, limit=0, reset_epoch_s=float("inf"))
        return RateWindow(state.count, state.window_start, now_s), decision

    # Start a fresh window for new identities or once the current one has elapsed
    if window is None or now_s >= window.window_start + window_s:
        window = RateWindow(count=0, window_start=now_s, last_seen=now_s)

    reset_epoch_s = window.window_start + window_s

    if window.count < limit:
        count = window.count + 1
        new_window = RateWindow(count=count, window_start=window.window_start, last_seen=now_s)
        decision = Decision(True, retry_after_s=0.0, remaining=limit - count, limit=limit, reset_epoch_s=reset_epoch_s)
        return new_window, decision

    # Denied requests do not consume the window; only last_seen moves
    retry_after = max(0.0, reset_epoch_s - now_s)
    new_window = RateWindow(count=window.count, window_start=window.window_start, last_seen=now_s)
    decision = Decision(False, retry_after_s=retry_after, remaining=0, limit=limit, reset_epoch_s=reset_epoch_s)
    return new_window, decision
