from dataclasses import dataclass

from dogsearch.core.config import Settings


@dataclass(frozen=True)
class RateLimitPolicy:
    enabled: bool = True
    # Shadow mode records denials in metrics and logs but lets requests through
    shadow: bool = False
    limit: int = 10
    window_s: float = 60.0
    retention_s: float = 600.0
    # Idle windows are swept once every this many checks
    sweep_interval: int = 256

    def __post_init__(self) -> None:
        if self.window_s <= 0:
            raise ValueError("window_s must be positive")
        if self.retention_s < self.window_s:
            raise ValueError("retention_s must cover at least one window")
        if self.sweep_interval < 1:
            raise ValueError("sweep_interval must be at least 1")


def policy_from_settings(settings: Settings) -> RateLimitPolicy:
    """Search admission policy from application settings."""
    return RateLimitPolicy(
        enabled=settings.search_rate_limit_enabled,
        shadow=settings.search_rate_limit_shadow,
        limit=settings.search_rate_limit_requests,
        window_s=settings.search_rate_limit_window_seconds,
        retention_s=settings.search_rate_limit_retention_seconds,
    )
