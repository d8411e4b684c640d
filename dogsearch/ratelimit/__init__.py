"""Per-caller admission control for uncached searches."""

from .config import RateLimitPolicy, policy_from_settings
from .gate import AdmissionGate
from .window import Decision, RateWindow, fixed_window_decide

__all__ = [
    "AdmissionGate",
    "Decision",
    "RateLimitPolicy",
    "RateWindow",
    "fixed_window_decide",
    "policy_from_settings",
]
