"""Debug command fan-out across collectors.

One command runs concurrently on every requested collector of a portal.
Each collector's outcome is independent: a failure on one never cancels or
fails its siblings. Fan-out executions do not use the interactive slot and
any number may run at once.
"""

import asyncio
import logging
import time
import uuid
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING

from courier_mcp.models import Credential, DebugCommandRequest, Target, TargetResult
from courier_mcp.services.cancellation import CancellationToken
from courier_mcp.services.credentials import acquire_credential
from courier_mcp.services.errors import ExecutionCancelledError
from courier_mcp.utils.commands import build_debug_command

if TYPE_CHECKING:
    from courier_mcp.protocols import CredentialProvider
    from courier_mcp.services.jobs import JobClient

logger = logging.getLogger(__name__)

TargetProgressCallback = Callable[[int, int, int], None]
TargetCompleteCallback = Callable[[int, TargetResult], None]

NO_CREDENTIAL_MESSAGE = (
    "No session token available - please ensure you are logged into the portal"
)


def _notify_complete(
    on_complete: TargetCompleteCallback | None,
    collector_id: int,
    result: TargetResult,
) -> None:
    """Invoke the completion callback; a raising callback is logged and ignored."""
    if on_complete is None:
        return
    try:
        on_complete(collector_id, result)
    except Exception as callback_error:
        logger.warning(
            "Completion callback for collector %d failed: %s", collector_id, callback_error
        )


class FanoutCoordinator:
    """Runs debug commands on many collectors with per-target results."""

    def __init__(
        self,
        job_client: "JobClient",
        credentials: "CredentialProvider",
    ) -> None:
        self.job_client = job_client
        self.credentials = credentials
        self._active: dict[str, CancellationToken] = {}

    @property
    def active_ids(self) -> list[str]:
        return list(self._active)

    def is_active(self, execution_id: str) -> bool:
        return execution_id in self._active

    def cancel(self, execution_id: str) -> bool:
        """Cancel every in-flight collector of a fan-out execution.

        Returns:
            True if the execution was found and signalled
        """
        token = self._active.get(execution_id)
        if token is None:
            logger.warning("No active debug execution found with ID %s", execution_id)
            return False
        token.cancel()
        logger.info("Debug execution %s cancelled", execution_id)
        return True

    @contextmanager
    def _track(self, execution_id: str, token: CancellationToken) -> Iterator[None]:
        self._active[execution_id] = token
        try:
            yield
        finally:
            self._active.pop(execution_id, None)

    async def execute_debug_command(
        self,
        request: DebugCommandRequest,
        on_progress: TargetProgressCallback | None = None,
        on_complete: TargetCompleteCallback | None = None,
    ) -> dict[int, TargetResult]:
        """Execute a debug command on every requested collector.

        Args:
            request: Portal, collectors and command to run
            on_progress: Called with (collector_id, attempt, max_attempts)
            on_complete: Called with (collector_id, result) as soon as each
                collector finishes

        Returns:
            Result per collector id.
        """
        execution_id = request.execution_id or str(uuid.uuid4())
        collector_ids = list(dict.fromkeys(request.collector_ids))

        if self.is_active(execution_id):
            message = f"Debug execution {execution_id} is already running"
            logger.warning(message)
            return self._fail_all(collector_ids, message, on_complete)

        token = CancellationToken()
        with self._track(execution_id, token):
            credential = await acquire_credential(self.credentials, request.portal)
            if credential is None:
                return self._fail_all(collector_ids, NO_CREDENTIAL_MESSAGE, on_complete)

            command = build_debug_command(
                request.command, request.parameters, request.positional_args
            )
            logger.info(
                "Debug execution %s: running %r on %d collector(s) of %s",
                execution_id,
                command,
                len(collector_ids),
                request.portal,
            )

            results = await asyncio.gather(
                *(
                    self._execute_single(
                        Target(request.portal, collector_id),
                        command,
                        credential,
                        token,
                        on_progress,
                        on_complete,
                    )
                    for collector_id in collector_ids
                )
            )

        succeeded = sum(1 for r in results if r.success)
        logger.info(
            "Debug execution %s finished: %d/%d collectors succeeded",
            execution_id,
            succeeded,
            len(results),
        )
        return {r.collector_id: r for r in results}

    async def _execute_single(
        self,
        target: Target,
        command: str,
        credential: Credential,
        token: CancellationToken,
        on_progress: TargetProgressCallback | None,
        on_complete: TargetCompleteCallback | None,
    ) -> TargetResult:
        """Execute on one collector, converting every failure into a result."""
        started = time.monotonic()

        def report(attempt: int, max_attempts: int) -> None:
            if on_progress is not None:
                on_progress(target.collector_id, attempt, max_attempts)

        try:
            output = await self.job_client.execute_and_poll(
                target, command, credential, on_progress=report, cancel_token=token
            )
            result = TargetResult(collector_id=target.collector_id, success=True, output=output)
        except ExecutionCancelledError as e:
            result = TargetResult(
                collector_id=target.collector_id,
                success=False,
                error=str(e),
                cancelled=True,
            )
        except Exception as e:
            logger.warning("Debug command on %s failed: %s", target.label, e)
            result = TargetResult(collector_id=target.collector_id, success=False, error=str(e))

        result.duration_ms = int((time.monotonic() - started) * 1000)
        _notify_complete(on_complete, target.collector_id, result)
        return result

    @staticmethod
    def _fail_all(
        collector_ids: list[int],
        message: str,
        on_complete: TargetCompleteCallback | None,
    ) -> dict[int, TargetResult]:
        results = {}
        for collector_id in collector_ids:
            results[collector_id] = TargetResult(
                collector_id=collector_id, success=False, error=message
            )
            _notify_complete(on_complete, collector_id, results[collector_id])
        return results
