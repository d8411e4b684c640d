"""
Admission gate for the expensive search path.

Keeps one fixed-window counter per caller identity in process memory and
decides whether an uncached search may proceed to the data store. Cache hits
never reach the gate.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Dict, Optional

from .config import RateLimitPolicy
from .metrics import rl_decisions, rl_retry_after, rl_tracked_identities, rl_windows_swept
from .window import Decision, RateWindow, fixed_window_decide

logger = logging.getLogger(__name__)


class AdmissionGate:
    """Per-identity fixed-window rate limiter guarded by a single lock."""

    def __init__(
        self,
        policy: Optional[RateLimitPolicy] = None,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.policy = policy or RateLimitPolicy()
        self._clock = clock
        self._windows: Dict[str, RateWindow] = {}
        self._lock = threading.Lock()
        self._checks_since_sweep = 0

    @property
    def tracked_identities(self) -> int:
        with self._lock:
            return len(self._windows)

    def check(self, identity: str) -> Decision:
        """Count a request from identity and decide whether it may proceed."""
        policy = self.policy
        if not policy.enabled:
            return Decision(
                True,
                retry_after_s=0.0,
                remaining=policy.limit,
                limit=policy.limit,
                reset_epoch_s=self._clock() + policy.window_s,
            )

        now = self._clock()
        with self._lock:
            window, decision = fixed_window_decide(
                now, self._windows.get(identity), policy.limit, policy.window_s
            )
            self._windows[identity] = window
            self._checks_since_sweep += 1
            if self._checks_since_sweep >= policy.sweep_interval:
                self._sweep_locked(now)

        shadow = str(policy.shadow)
        if decision.allowed:
            rl_decisions.labels(action="allow", shadow=shadow).inc()
            return decision

        rl_retry_after.labels(shadow=shadow).observe(decision.retry_after_s)
        if policy.shadow:
            rl_decisions.labels(action="shadow_block", shadow=shadow).inc()
            logger.info(
                f"Rate limit exceeded for {identity} (shadow mode, allowing); "
                f"retry_after={decision.retry_after_s:.1f}s"
            )
            return Decision(
                True,
                retry_after_s=0.0,
                remaining=0,
                limit=decision.limit,
                reset_epoch_s=decision.reset_epoch_s,
            )

        rl_decisions.labels(action="block", shadow=shadow).inc()
        logger.warning(
            f"Rate limit exceeded for {identity}: {policy.limit} per {policy.window_s:g}s, "
            f"retry_after={decision.retry_after_s:.1f}s"
        )
        return decision

    def sweep_idle(self) -> int:
        """Discard windows idle longer than the retention horizon."""
        with self._lock:
            return self._sweep_locked(self._clock())

    def _sweep_locked(self, now: float) -> int:
        horizon = now - self.policy.retention_s
        stale = [identity for identity, w in self._windows.items() if w.last_seen < horizon]
        for identity in stale:
            del self._windows[identity]
        self._checks_since_sweep = 0
        rl_tracked_identities.set(len(self._windows))
        if stale:
            rl_windows_swept.inc(len(stale))
            logger.debug(f"Swept {len(stale)} idle rate windows")
        return len(stale)

    def reset(self, identity: str) -> bool:
        """Forget the window for one identity."""
        with self._lock:
            return self._windows.pop(identity, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._windows.clear()
            self._checks_since_sweep = 0
        rl_tracked_identities.set(0)
