"""Portal rate limit tracking and backoff-wrapped requests.

Quota state is keyed by portal hostname: the portal enforces one quota for
every collector behind it. Each response carrying quota headers replaces the
stored state for its key.
"""

import asyncio
import logging
import time

import httpx

from courier_mcp.models import RateLimitState, RetryOptions
from courier_mcp.services.errors import NetworkError, RateLimitExceededError

logger = logging.getLogger(__name__)

REMAINING_HEADER = "X-Rate-Limit-Remaining"
LIMIT_HEADER = "X-Rate-Limit-Limit"
RESET_HEADER = "X-Rate-Limit-Reset"
RETRY_AFTER_HEADER = "Retry-After"

TOO_MANY_REQUESTS = 429


def _now_ms() -> int:
    return int(time.time() * 1000)


def _parse_int(value: str | None) -> int | None:
    if value is None:
        return None
    try:
        return int(value.strip())
    except ValueError:
        return None


class RateLimiter:
    """Per-portal quota tracker with proactive throttling."""

    def __init__(
        self,
        throttle_threshold: int = 2,
        retry_options: RetryOptions | None = None,
    ) -> None:
        """Initialize rate limiter.

        Args:
            throttle_threshold: Wait for the reset time once remaining
                requests drop to this many or fewer
            retry_options: Default backoff policy for fetch_with_retry
        """
        self.throttle_threshold = throttle_threshold
        self.retry_options = retry_options or RetryOptions()
        self._states: dict[str, RateLimitState] = {}

    def get_state(self, key: str) -> RateLimitState | None:
        return self._states.get(key)

    def clear_state(self, key: str) -> None:
        self._states.pop(key, None)

    def update_from_response(self, key: str, response: httpx.Response) -> None:
        """Record quota headers from a response, whatever its status."""
        remaining = response.headers.get(REMAINING_HEADER)
        limit = response.headers.get(LIMIT_HEADER)
        reset = response.headers.get(RESET_HEADER)

        if remaining is None and limit is None and reset is None:
            return

        reset_seconds = _parse_int(reset)
        self._states[key] = RateLimitState(
            remaining=_parse_int(remaining),
            limit=_parse_int(limit),
            reset_time_ms=reset_seconds * 1000 if reset_seconds is not None else None,
        )

    def get_wait_time(self, key: str) -> int:
        """Milliseconds to wait before the next request to ``key``.

        Non-zero only when the remaining quota is at or below the throttle
        threshold and the reset time is known and still ahead.
        """
        state = self._states.get(key)
        if state is None or state.remaining is None:
            return 0
        if state.remaining > self.throttle_threshold or state.reset_time_ms is None:
            return 0
        wait_ms = state.reset_time_ms - _now_ms()
        return wait_ms if wait_ms > 0 else 0

    def _retry_delay_ms(
        self,
        key: str,
        response: httpx.Response,
        attempt: int,
        options: RetryOptions,
    ) -> int:
        retry_after = _parse_int(response.headers.get(RETRY_AFTER_HEADER))
        if retry_after is not None:
            return retry_after * 1000

        state = self._states.get(key)
        if state is not None and state.reset_time_ms is not None:
            return max(0, state.reset_time_ms - _now_ms())

        return min(options.base_delay_ms * 2**attempt, options.max_delay_ms)

    async def fetch_with_retry(
        self,
        client: httpx.AsyncClient,
        request: httpx.Request,
        key: str,
        options: RetryOptions | None = None,
    ) -> httpx.Response:
        """Send ``request``, backing off and retrying while rate limited.

        Args:
            client: HTTP client used to send the request
            request: Prepared request; resent unchanged on retry
            key: Quota key (portal hostname)
            options: Backoff policy, defaults to the limiter's policy

        Returns:
            First response whose status is not 429.

        Raises:
            RateLimitExceededError: If every attempt was rate limited
            NetworkError: If the transport failed (not retried)
        """
        opts = options or self.retry_options

        for attempt in range(opts.max_retries + 1):
            pre_wait = self.get_wait_time(key)
            if pre_wait > 0:
                delay = min(pre_wait, opts.max_delay_ms)
                logger.info(
                    "Quota nearly exhausted for %s, waiting %dms before request",
                    key,
                    delay,
                )
                await asyncio.sleep(delay / 1000)

            try:
                response = await client.send(request)
            except httpx.HTTPError as e:
                raise NetworkError(
                    f"Request to {key} failed: {type(e).__name__}: {e}"
                ) from e

            self.update_from_response(key, response)

            if response.status_code != TOO_MANY_REQUESTS:
                return response

            if attempt >= opts.max_retries:
                break

            delay_ms = self._retry_delay_ms(key, response, attempt, opts)
            logger.warning(
                "Rate limited by %s (attempt %d/%d), retrying in %dms",
                key,
                attempt + 1,
                opts.max_retries + 1,
                delay_ms,
            )
            await asyncio.sleep(delay_ms / 1000)

        logger.error("Rate limit retries exhausted for %s", key)
        raise RateLimitExceededError(key, opts.max_retries + 1)
