from prometheus_client import Counter, Gauge, Histogram

from dogsearch.monitoring.prometheus_metrics import REGISTRY

rl_decisions = Counter(
    "dogsearch_rl_decisions_total",
    "rate-limit decisions",
    ["action", "shadow"],
    registry=REGISTRY,
)
rl_retry_after = Histogram(
    "dogsearch_rl_retry_after_seconds",
    "retry-after values for denied requests",
    ["shadow"],
    registry=REGISTRY,
    buckets=(0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0, 120.0),
)
rl_tracked_identities = Gauge(
    "dogsearch_rl_tracked_identities",
    "caller identities with a live rate window",
    [],
    registry=REGISTRY,
)
rl_windows_swept = Counter(
    "dogsearch_rl_windows_swept_total",
    "idle rate windows discarded",
    [],
    registry=REGISTRY,
)

__all__ = [
    "rl_decisions",
    "rl_retry_after",
    "rl_tracked_identities",
    "rl_windows_swept",
]
