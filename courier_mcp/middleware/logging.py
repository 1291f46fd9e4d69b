"""Logging middleware for tool call tracking."""

import json
import logging
import time
from typing import Any

from fastmcp.server.middleware import MiddlewareContext

from courier_mcp.middleware.base import CourierMiddleware

# Arguments that carry script bodies; logged by size only
_BULKY_ARGS = {"script", "command"}


class LoggingMiddleware(CourierMiddleware):
    """Logs tool calls and resource reads with arguments and timing.

    Script bodies are summarized rather than logged. Calls slower than
    ``slow_threshold_ms`` are logged at WARNING.

    Example:
        >>> mcp.add_middleware(LoggingMiddleware(slow_threshold_ms=5000))
    """

    def __init__(
        self,
        logger: logging.Logger | None = None,
        include_payloads: bool = False,
        max_payload_length: int = 1000,
        slow_threshold_ms: float = 5000.0,
    ) -> None:
        """Initialize logging middleware.

        Args:
            logger: Optional custom logger.
            include_payloads: Whether to log full results at DEBUG.
            max_payload_length: Maximum payload length before truncation.
            slow_threshold_ms: Threshold in ms for slow call warnings.
        """
        super().__init__(logger=logger)
        self.include_payloads = include_payloads
        self.max_payload_length = max_payload_length
        self.slow_threshold_ms = slow_threshold_ms

    def _truncate(self, data: Any) -> str:
        try:
            text = json.dumps(data, default=str)
        except (TypeError, ValueError):
            text = str(data)

        if len(text) > self.max_payload_length:
            return text[: self.max_payload_length] + "... [truncated]"
        return text

    def _format_args(self, args: dict[str, Any] | None) -> str:
        if not args:
            return "()"
        parts = []
        for key, value in args.items():
            if key in _BULKY_ARGS and isinstance(value, str):
                parts.append(f"{key}=<{len(value)} chars>")
            else:
                parts.append(f"{key}={value!r}")
        return f"({', '.join(parts)})"

    def _format_duration(self, duration_ms: float) -> str:
        if duration_ms >= self.slow_threshold_ms:
            return f"{duration_ms:.1f}ms SLOW!"
        return f"{duration_ms:.1f}ms"

    def _summarize_result(self, result: Any) -> str:
        """Brief result summary, preferring the execution status."""
        structured = getattr(result, "structured_content", None)
        if isinstance(structured, dict):
            if "status" in structured:
                return f"status={structured['status']}"
            return f"{len(structured)} keys"
        if isinstance(result, (list, tuple)):
            return f"{len(result)} items"
        if hasattr(result, "content"):
            return "content"
        return type(result).__name__

    async def on_call_tool(
        self,
        context: MiddlewareContext,
        call_next: Any,
    ) -> Any:
        start = time.perf_counter()
        tool_name = getattr(context.message, "name", "unknown")
        args = getattr(context.message, "arguments", None)

        self.logger.info(">>> TOOL: %s%s", tool_name, self._format_args(args))

        try:
            result = await call_next(context)
        except Exception as e:
            duration_ms = (time.perf_counter() - start) * 1000
            self.logger.error(
                "!!! TOOL: %s -> %s: %s [%s]",
                tool_name,
                type(e).__name__,
                e,
                self._format_duration(duration_ms),
            )
            raise

        duration_ms = (time.perf_counter() - start) * 1000
        log_level = logging.WARNING if duration_ms >= self.slow_threshold_ms else logging.INFO
        self.logger.log(
            log_level,
            "<<< TOOL: %s -> %s [%s]",
            tool_name,
            self._summarize_result(result),
            self._format_duration(duration_ms),
        )
        if self.include_payloads:
            self.logger.debug("    Result: %s", self._truncate(getattr(result, "structured_content", result)))
        return result

    async def on_read_resource(
        self,
        context: MiddlewareContext,
        call_next: Any,
    ) -> Any:
        start = time.perf_counter()
        uri = getattr(context.message, "uri", "unknown")
        self.logger.info(">>> RESOURCE: %s", uri)

        result = await call_next(context)

        duration_ms = (time.perf_counter() - start) * 1000
        self.logger.info("<<< RESOURCE: %s [%s]", uri, self._format_duration(duration_ms))
        return result
