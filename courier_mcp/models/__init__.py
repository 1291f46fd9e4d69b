"""Data models for Courier MCP."""

from courier_mcp.models.execution import (
    Dialect,
    ExecutionContext,
    ExecutionRequest,
    ExecutionResult,
    ExecutionStatus,
)
from courier_mcp.models.fanout import DebugCommandRequest, TargetResult
from courier_mcp.models.job import JobStatus, PollResult
from courier_mcp.models.ratelimit import RateLimitState, RetryOptions
from courier_mcp.models.target import Credential, Target

__all__ = [
    "Credential",
    "DebugCommandRequest",
    "Dialect",
    "ExecutionContext",
    "ExecutionRequest",
    "ExecutionResult",
    "ExecutionStatus",
    "JobStatus",
    "PollResult",
    "RateLimitState",
    "RetryOptions",
    "Target",
    "TargetResult",
]
