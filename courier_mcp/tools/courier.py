"""Courier tools for running scripts and debug commands on collectors."""

import logging
from dataclasses import asdict
from typing import Any

from fastmcp.exceptions import ToolError

from courier_mcp.models import (
    DebugCommandRequest,
    Dialect,
    ExecutionContext,
    ExecutionRequest,
    TargetResult,
)
from courier_mcp.services import get_dependencies

logger = logging.getLogger(__name__)


def _parse_dialect(dialect: str) -> Dialect:
    try:
        return Dialect(dialect.lower())
    except ValueError:
        choices = ", ".join(d.value for d in Dialect)
        raise ToolError(f"Unknown dialect {dialect!r} (expected one of: {choices})") from None


async def run_script(
    portal: str,
    collector_id: int,
    script: str,
    dialect: str = "groovy",
    hostname: str | None = None,
    wildvalue: str | None = None,
    datasource_id: str | None = None,
    execution_id: str | None = None,
) -> dict[str, Any]:
    """Run a Groovy or PowerShell script on a collector and wait for its output.

    Only one script runs at a time; a call made while another is in flight
    returns an error result immediately.

    Args:
        portal: Portal hostname (e.g. acme.logicmonitor.com)
        collector_id: Collector to run on
        script: Script body
        dialect: "groovy" or "powershell"
        hostname: Device hostname. Groovy scripts receive it as ``hostProps``;
            PowerShell ``##TOKEN##`` placeholders are filled from its properties.
        wildvalue: Instance wildvalue exposed to Groovy scripts
        datasource_id: Datasource ID exposed to Groovy scripts
        execution_id: Optional ID usable with cancel_execution

    Returns:
        Execution result with status, raw_output, duration and warnings.
    """
    deps = get_dependencies()
    request = ExecutionRequest(
        portal=portal,
        collector_id=collector_id,
        script=script,
        dialect=_parse_dialect(dialect),
        context=ExecutionContext(
            hostname=hostname,
            wildvalue=wildvalue,
            datasource_id=datasource_id,
        ),
        execution_id=execution_id,
    )
    result = await deps.executor.execute(request)
    data = asdict(result)
    data["status"] = result.status.value
    return data


async def run_debug_command(
    portal: str,
    collector_ids: list[int],
    command: str,
    parameters: dict[str, str] | None = None,
    positional_args: list[str] | None = None,
    execution_id: str | None = None,
) -> dict[str, Any]:
    """Run a collector debug command (e.g. !tlist) on several collectors at once.

    Collectors are independent: one failing does not affect the others.

    Args:
        portal: Portal hostname
        collector_ids: Collectors to run on
        command: Debug command, with or without the leading "!"
        parameters: key=value arguments; values with spaces or quotes are quoted
        positional_args: Arguments placed before the key=value pairs
        execution_id: Optional ID usable with cancel_execution

    Returns:
        Result per collector id.
    """
    deps = get_dependencies()

    def on_progress(collector_id: int, attempt: int, max_attempts: int) -> None:
        logger.debug("Collector %d: poll %d/%d", collector_id, attempt, max_attempts)

    def on_complete(collector_id: int, result: TargetResult) -> None:
        outcome = "ok" if result.success else f"failed: {result.error}"
        logger.info("Collector %d finished (%s) in %dms", collector_id, outcome, result.duration_ms)

    results = await deps.fanout.execute_debug_command(
        DebugCommandRequest(
            portal=portal,
            collector_ids=collector_ids,
            command=command,
            parameters=parameters or {},
            positional_args=positional_args or [],
            execution_id=execution_id,
        ),
        on_progress=on_progress,
        on_complete=on_complete,
    )
    return {str(collector_id): asdict(result) for collector_id, result in results.items()}


async def cancel_execution(execution_id: str) -> dict[str, bool]:
    """Cancel a running script or debug command.

    Args:
        execution_id: ID passed to run_script or run_debug_command

    Returns:
        Whether a running execution was found and signalled.
    """
    deps = get_dependencies()
    if deps.executor.is_execution_active(execution_id):
        return {"cancelled": deps.executor.cancel_execution(execution_id)}
    return {"cancelled": deps.fanout.cancel(execution_id)}
