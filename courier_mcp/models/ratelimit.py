"""Rate limit quota models."""

from dataclasses import dataclass


@dataclass(frozen=True)
class RateLimitState:
    """Quota snapshot reported by the portal.

    Any field may be unknown when the corresponding header was absent.
    """

    remaining: int | None = None
    limit: int | None = None
    reset_time_ms: int | None = None


@dataclass(frozen=True)
class RetryOptions:
    """Backoff policy for rate-limited requests."""

    max_retries: int = 3
    base_delay_ms: int = 1000
    max_delay_ms: int = 30000
