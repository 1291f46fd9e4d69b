"""Error handling middleware for consistent tool errors."""

import logging
from collections import defaultdict
from typing import Any

from fastmcp.exceptions import ToolError
from fastmcp.server.middleware import MiddlewareContext

from courier_mcp.middleware.base import CourierMiddleware
from courier_mcp.services.errors import CourierError


class ErrorHandlingMiddleware(CourierMiddleware):
    """Logs failing MCP calls and turns execution errors into tool errors.

    ``CourierError`` is re-raised as ``ToolError`` so clients receive the
    plain message; anything else is re-raised unchanged after logging.

    Example:
        >>> mcp.add_middleware(ErrorHandlingMiddleware(include_traceback=True))
    """

    def __init__(
        self,
        logger: logging.Logger | None = None,
        include_traceback: bool = False,
    ) -> None:
        """Initialize error handling middleware.

        Args:
            logger: Optional custom logger.
            include_traceback: Whether to include full traceback in logs.
        """
        super().__init__(logger=logger)
        self.include_traceback = include_traceback
        self._error_counts: dict[str, int] = defaultdict(int)

    def get_error_stats(self) -> dict[str, int]:
        """Occurrence count per exception type name."""
        return dict(self._error_counts)

    def reset_stats(self) -> None:
        self._error_counts.clear()

    async def on_message(
        self,
        context: MiddlewareContext,
        call_next: Any,
    ) -> Any:
        try:
            return await call_next(context)
        except Exception as e:
            error_type = type(e).__name__
            self._error_counts[error_type] += 1
            self.logger.error(
                "Error in %s: %s: %s",
                context.method,
                error_type,
                e,
                exc_info=self.include_traceback,
            )
            if isinstance(e, CourierError):
                raise ToolError(str(e)) from e
            raise
