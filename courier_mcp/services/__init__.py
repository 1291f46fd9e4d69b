"""Services for Courier MCP."""

from courier_mcp.services.cancellation import CancellationToken
from courier_mcp.services.credentials import FilePortalProvider, acquire_credential
from courier_mcp.services.errors import (
    AuthExpiredError,
    AuthMissingError,
    CourierError,
    ExecutionCancelledError,
    ExecutionTimeoutError,
    JobFailedError,
    NetworkError,
    ProtocolError,
    RateLimitExceededError,
)
from courier_mcp.services.executor import ScriptExecutor
from courier_mcp.services.fanout import FanoutCoordinator
from courier_mcp.services.jobs import JobClient
from courier_mcp.services.prefetch import (
    PrefetchResult,
    fetch_properties,
    parse_properties_output,
)
from courier_mcp.services.ratelimit import RateLimiter
from courier_mcp.services.state import get_dependencies, reset_state, set_dependencies

__all__ = [
    "acquire_credential",
    "AuthExpiredError",
    "AuthMissingError",
    "CancellationToken",
    "CourierError",
    "ExecutionCancelledError",
    "ExecutionTimeoutError",
    "FanoutCoordinator",
    "fetch_properties",
    "FilePortalProvider",
    "get_dependencies",
    "JobClient",
    "JobFailedError",
    "NetworkError",
    "parse_properties_output",
    "PrefetchResult",
    "ProtocolError",
    "RateLimiter",
    "RateLimitExceededError",
    "reset_state",
    "ScriptExecutor",
    "set_dependencies",
]
