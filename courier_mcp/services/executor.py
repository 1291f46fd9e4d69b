"""Interactive script execution.

Orchestrates a single script run on one collector:
- groovy: preamble injection, then submit and poll
- powershell: property prefetch, token substitution, then submit and poll

Only one interactive execution runs at a time; concurrent calls are
rejected rather than queued.
"""

import asyncio
import logging
import time
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING

from courier_mcp.models import (
    Credential,
    Dialect,
    ExecutionRequest,
    ExecutionResult,
    ExecutionStatus,
)
from courier_mcp.services.cancellation import CancellationToken
from courier_mcp.services.credentials import acquire_credential
from courier_mcp.services.errors import (
    AuthExpiredError,
    CourierError,
    ExecutionCancelledError,
)
from courier_mcp.services.prefetch import fetch_properties
from courier_mcp.utils.commands import build_script_command
from courier_mcp.utils.tokens import (
    SubstitutionResult,
    has_tokens,
    substitute_tokens,
    substitute_with_empty,
)

if TYPE_CHECKING:
    from courier_mcp.protocols import CredentialProvider
    from courier_mcp.services.jobs import JobClient

logger = logging.getLogger(__name__)

CONCURRENT_EXECUTION_MESSAGE = (
    "Another script is already running. "
    "Please wait for it to complete or cancel it first."
)
NO_CREDENTIAL_MESSAGE = (
    "No session token available - please ensure you are logged into the portal"
)
REFRESH_FAILED_MESSAGE = (
    "Session authentication failed. Please refresh your portal session and try again."
)
CANCELLED_MESSAGE = "Execution was cancelled by user"


def _now_ms() -> int:
    return int(time.time() * 1000)


@dataclass
class ActiveExecution:
    """Registry entry for a running execution."""

    cancel_token: CancellationToken
    start_time_ms: int


@dataclass
class _Attempt:
    """What happened while preparing one execution attempt."""

    substitution: SubstitutionResult | None = None
    prefetch_error: str | None = None

    def warnings(self) -> list[str]:
        lines = []
        if self.prefetch_error:
            lines.append(f"[Warning: Property fetch failed: {self.prefetch_error}]")
        if self.substitution is not None and self.substitution.missing:
            missing = ", ".join(dict.fromkeys(self.substitution.missing))
            lines.append(
                f"[Warning: Missing properties (substituted with empty string): {missing}]"
            )
        return lines


class ScriptExecutor:
    """Single-flight interactive executor."""

    def __init__(
        self,
        job_client: "JobClient",
        credentials: "CredentialProvider",
        max_script_length: int = 64000,
    ) -> None:
        """Initialize executor.

        Args:
            job_client: Remote job client
            credentials: Portal credential provider
            max_script_length: Longest script accepted, in characters
        """
        self.job_client = job_client
        self.credentials = credentials
        self.max_script_length = max_script_length
        self._slot = asyncio.Lock()
        self._active: dict[str, ActiveExecution] = {}

    @property
    def active_execution_id(self) -> str | None:
        """ID of the running execution, if any."""
        return next(iter(self._active), None)

    def is_execution_active(self, execution_id: str) -> bool:
        return execution_id in self._active

    def cancel_execution(self, execution_id: str) -> bool:
        """Cancel a running execution.

        Returns:
            True if the execution was found and signalled
        """
        execution = self._active.get(execution_id)
        if execution is None:
            logger.warning("No active execution found with ID %s", execution_id)
            return False
        execution.cancel_token.cancel()
        logger.info("Execution %s cancelled", execution_id)
        return True

    @contextmanager
    def _track(self, execution_id: str, entry: ActiveExecution) -> Iterator[None]:
        self._active[execution_id] = entry
        try:
            yield
        finally:
            self._active.pop(execution_id, None)

    async def execute(self, request: ExecutionRequest) -> ExecutionResult:
        """Execute a script and return its result.

        Never raises for execution failures: every outcome is reported
        through the result status.
        """
        start_time_ms = _now_ms()
        started = time.monotonic()
        execution_id = request.execution_id or str(uuid.uuid4())

        # locked() and the uncontended acquire below run without yielding
        if self._slot.locked():
            logger.warning(
                "Concurrent execution rejected - execution %s already in progress",
                self.active_execution_id,
            )
            return self._result(
                execution_id,
                ExecutionStatus.ERROR,
                start_time_ms,
                started,
                error=CONCURRENT_EXECUTION_MESSAGE,
            )

        async with self._slot:
            token = request.cancel_token or CancellationToken()
            with self._track(execution_id, ActiveExecution(token, start_time_ms)):
                logger.info(
                    "Executing %s script %s on %s",
                    request.dialect.value,
                    execution_id,
                    request.target.label,
                )
                return await self._run(request, execution_id, token, start_time_ms, started)

    async def _run(
        self,
        request: ExecutionRequest,
        execution_id: str,
        token: CancellationToken,
        start_time_ms: int,
        started: float,
    ) -> ExecutionResult:
        if len(request.script) > self.max_script_length:
            return self._result(
                execution_id,
                ExecutionStatus.ERROR,
                start_time_ms,
                started,
                error=(
                    f"Script is {len(request.script)} characters; "
                    f"the limit is {self.max_script_length}"
                ),
            )

        credential = await acquire_credential(self.credentials, request.portal)
        if credential is None:
            return self._result(
                execution_id,
                ExecutionStatus.ERROR,
                start_time_ms,
                started,
                error=NO_CREDENTIAL_MESSAGE,
            )

        attempt = _Attempt()
        try:
            try:
                output = await self._execute_once(request, credential, token, attempt)
            except AuthExpiredError:
                logger.info(
                    "Credential for %s rejected, refreshing and retrying once",
                    request.portal,
                )
                refreshed = await self.credentials.refresh_credential(request.portal)
                if refreshed is None:
                    return self._result(
                        execution_id,
                        ExecutionStatus.ERROR,
                        start_time_ms,
                        started,
                        error=REFRESH_FAILED_MESSAGE,
                    )
                attempt = _Attempt()
                output = await self._execute_once(request, refreshed, token, attempt)
        except ExecutionCancelledError:
            logger.info("Execution %s cancelled", execution_id)
            return self._result(
                execution_id,
                ExecutionStatus.CANCELLED,
                start_time_ms,
                started,
                error=CANCELLED_MESSAGE,
            )
        except CourierError as e:
            logger.warning("Execution %s failed: %s", execution_id, e)
            return self._result(
                execution_id, ExecutionStatus.ERROR, start_time_ms, started, error=str(e)
            )
        except Exception as e:
            logger.exception("Unexpected error in execution %s", execution_id)
            return self._result(
                execution_id,
                ExecutionStatus.ERROR,
                start_time_ms,
                started,
                error=f"Unexpected execution error: {e}",
            )

        warnings = attempt.warnings()
        raw_output = "\n".join(warnings) + "\n\n" + output if warnings else output
        result = self._result(
            execution_id,
            ExecutionStatus.COMPLETE,
            start_time_ms,
            started,
            raw_output=raw_output,
            warnings=warnings,
        )
        logger.info("Execution %s completed in %dms", execution_id, result.duration_ms)
        return result

    async def _execute_once(
        self,
        request: ExecutionRequest,
        credential: Credential,
        token: CancellationToken,
        attempt: _Attempt,
    ) -> str:
        script = request.script
        if request.dialect is Dialect.POWERSHELL and has_tokens(script):
            script = await self._substitute(request, credential, token, attempt)

        command = build_script_command(request.dialect, script, request.context)
        return await self.job_client.execute_and_poll(
            request.target, command, credential, cancel_token=token
        )

    async def _substitute(
        self,
        request: ExecutionRequest,
        credential: Credential,
        token: CancellationToken,
        attempt: _Attempt,
    ) -> str:
        hostname = request.context.hostname
        if not hostname:
            logger.info("No hostname provided, substituting all tokens with empty strings")
            attempt.substitution = substitute_with_empty(request.script)
            return attempt.substitution.script

        prefetch = await fetch_properties(
            self.job_client, request.target, hostname, credential, cancel_token=token
        )
        if prefetch.success:
            attempt.substitution = substitute_tokens(request.script, prefetch.properties)
            logger.info(
                "Token substitution: %d replaced, %d missing",
                len(attempt.substitution.substitutions),
                len(attempt.substitution.missing),
            )
        else:
            attempt.prefetch_error = prefetch.error or "Unknown error fetching properties"
            attempt.substitution = substitute_with_empty(request.script)
        return attempt.substitution.script

    @staticmethod
    def _result(
        execution_id: str,
        status: ExecutionStatus,
        start_time_ms: int,
        started: float,
        raw_output: str = "",
        error: str | None = None,
        warnings: list[str] | None = None,
    ) -> ExecutionResult:
        return ExecutionResult(
            id=execution_id,
            status=status,
            raw_output=raw_output,
            duration_ms=int((time.monotonic() - started) * 1000),
            start_time_ms=start_time_ms,
            error=error,
            warnings=warnings or [],
        )
