"""Remote job client for the collector debug endpoint.

Commands are submitted to a collector through its portal and the returned
session id is polled until the collector reports a result.
"""

import logging
from collections.abc import Callable
from typing import Any

import httpx

from courier_mcp.models import Credential, JobStatus, PollResult, Target
from courier_mcp.services.cancellation import CancellationToken
from courier_mcp.services.errors import (
    AuthExpiredError,
    AuthMissingError,
    ExecutionCancelledError,
    ExecutionTimeoutError,
    JobFailedError,
    ProtocolError,
)
from courier_mcp.services.ratelimit import RateLimiter

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]

DEBUG_PATH = "/santaba/rest/debug/"

ACCESS_DENIED_MESSAGE = "\n".join(
    [
        "Access denied. This could be due to:",
        "- Your session has expired - try refreshing the portal session",
        "- You don't have permission to run collector debug commands",
        "- Collector debug is disabled for this portal",
    ]
)
SESSION_EXPIRED_MESSAGE = "Session expired - please log in to the portal"


class JobClient:
    """Submit/poll client with bounded, cancellable waiting."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        rate_limiter: RateLimiter,
        api_version: str = "3",
        poll_interval: float = 1.0,
        max_attempts: int = 120,
    ) -> None:
        """Initialize job client.

        Args:
            client: Shared HTTP client
            rate_limiter: Quota tracker wrapping every request
            api_version: Value of the X-version header
            poll_interval: Seconds between polls of a pending job
            max_attempts: Polls before giving up with a timeout
        """
        self.client = client
        self.rate_limiter = rate_limiter
        self.api_version = api_version
        self.poll_interval = poll_interval
        self.max_attempts = max_attempts

    def _headers(self, credential: Credential) -> dict[str, str]:
        return {
            "X-CSRF-Token": credential.token,
            "X-Requested-With": "XMLHttpRequest",
            "X-version": self.api_version,
        }

    def _url(self, target: Target, job_id: str = "") -> str:
        return f"https://{target.portal}{DEBUG_PATH}{job_id}"

    @staticmethod
    def _raise_for_auth(response: httpx.Response) -> None:
        if response.status_code == 403:
            raise AuthExpiredError(ACCESS_DENIED_MESSAGE)
        if response.status_code == 401:
            raise AuthMissingError(SESSION_EXPIRED_MESSAGE)

    @staticmethod
    def _json(response: httpx.Response, target: Target) -> dict[str, Any]:
        if not response.content.strip():
            return {}
        try:
            data = response.json()
        except ValueError as e:
            raise ProtocolError(f"Invalid JSON from {target.label}: {e}") from e
        if not isinstance(data, dict):
            raise ProtocolError(f"Unexpected response body from {target.label}")
        return data

    async def submit(self, target: Target, command: str, credential: Credential) -> str:
        """Submit a command line to a collector.

        Returns:
            Session id to poll.

        Raises:
            AuthExpiredError: On HTTP 403
            AuthMissingError: On HTTP 401
            ProtocolError: On any other failure status or malformed body
        """
        request = self.client.build_request(
            "POST",
            self._url(target),
            params={"collectorId": target.collector_id},
            headers=self._headers(credential),
            json={"cmdline": command},
        )
        response = await self.rate_limiter.fetch_with_retry(
            self.client, request, target.portal
        )

        if not response.is_success:
            self._raise_for_auth(response)
            raise ProtocolError(
                f"Debug API error: {response.status_code} {response.reason_phrase}"
            )

        session_id = self._json(response, target).get("sessionId")
        if not session_id:
            raise ProtocolError("No sessionId returned from debug API")

        logger.debug("Submitted job %s to %s", session_id, target.label)
        return str(session_id)

    async def poll(self, target: Target, job_id: str, credential: Credential) -> PollResult:
        """Poll a submitted job once.

        Raises:
            AuthExpiredError: On HTTP 403
            AuthMissingError: On HTTP 401
        """
        request = self.client.build_request(
            "GET",
            self._url(target, job_id),
            params={"collectorId": target.collector_id},
            headers=self._headers(credential),
        )
        response = await self.rate_limiter.fetch_with_retry(
            self.client, request, target.portal
        )

        if response.status_code == 202:
            return PollResult.pending()

        if not response.is_success:
            self._raise_for_auth(response)
            return PollResult.failed(
                f"Poll failed: {response.status_code} {response.reason_phrase}"
            )

        output = self._json(response, target).get("output")
        return PollResult.complete(output if output is not None else "")

    async def execute_and_poll(
        self,
        target: Target,
        command: str,
        credential: Credential,
        on_progress: ProgressCallback | None = None,
        cancel_token: CancellationToken | None = None,
    ) -> str:
        """Submit a command and poll until it completes.

        Args:
            target: Collector to run on
            command: Full debug command line
            credential: Portal session token
            on_progress: Called with (attempt, max_attempts) before each poll
            cancel_token: Cancellation checked before submit, before each
                poll, and during every wait between polls

        Returns:
            Collector output.

        Raises:
            ExecutionCancelledError: If cancelled at any check point
            JobFailedError: If the collector reported a failure
            ExecutionTimeoutError: If still pending after max_attempts polls
        """
        token = cancel_token or CancellationToken()
        if token.cancelled:
            raise ExecutionCancelledError()

        job_id = await self.submit(target, command, credential)

        for attempt in range(1, self.max_attempts + 1):
            token.raise_if_cancelled()

            if on_progress is not None:
                on_progress(attempt, self.max_attempts)

            result = await self.poll(target, job_id, credential)

            if result.status is JobStatus.COMPLETE:
                logger.debug(
                    "Job %s on %s completed after %d poll(s)",
                    job_id,
                    target.label,
                    attempt,
                )
                return result.output
            if result.status is JobStatus.FAILED:
                raise JobFailedError(result.error_message or "Execution failed")

            await token.sleep(self.poll_interval)

        logger.warning(
            "Job %s on %s still pending after %d polls",
            job_id,
            target.label,
            self.max_attempts,
        )
        raise ExecutionTimeoutError(self.max_attempts, self.poll_interval)
