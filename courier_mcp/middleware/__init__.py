"""Courier MCP middleware components."""

from courier_mcp.middleware.base import CourierMiddleware
from courier_mcp.middleware.errors import ErrorHandlingMiddleware
from courier_mcp.middleware.logging import LoggingMiddleware

__all__ = [
    "CourierMiddleware",
    "ErrorHandlingMiddleware",
    "LoggingMiddleware",
]
