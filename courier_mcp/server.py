"""Courier MCP FastMCP server.

This is a thin wrapper that wires together the MCP server with tools and resources.
All business logic is delegated to the tools/, resources/, and services/ modules.
"""

import logging
import os
import sys
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from fastmcp import FastMCP
from starlette.requests import Request
from starlette.responses import PlainTextResponse

from courier_mcp.config import Settings
from courier_mcp.dependencies import Dependencies
from courier_mcp.middleware import ErrorHandlingMiddleware, LoggingMiddleware
from courier_mcp.resources import list_portals_resource
from courier_mcp.services import reset_state, set_dependencies
from courier_mcp.tools import cancel_execution, run_debug_command, run_script
from courier_mcp.utils.console import ColorfulFormatter


def _configure_logging() -> None:
    """Configure colorful logging for the courier_mcp package.

    Called at module load time so logging is ready regardless of how the
    server is started.
    """
    log_level = os.getenv("COURIER_LOG_LEVEL", "INFO").upper()
    use_colors = os.getenv("COURIER_LOG_COLORS", "true").lower() != "false"

    if not sys.stderr.isatty():
        use_colors = False

    courier_logger = logging.getLogger("courier_mcp")
    courier_logger.setLevel(getattr(logging, log_level, logging.INFO))

    if not courier_logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(ColorfulFormatter(use_colors=use_colors))
        courier_logger.addHandler(handler)
        courier_logger.propagate = False

    for noisy_logger in [
        "uvicorn",
        "uvicorn.access",
        "uvicorn.error",
        "httpx",
        "httpcore",
        "fastmcp",
        "starlette",
        "anyio",
    ]:
        lg = logging.getLogger(noisy_logger)
        lg.setLevel(logging.WARNING)
        lg.handlers = []
        lg.propagate = False

    root_logger = logging.getLogger()
    root_logger.handlers = []
    root_logger.setLevel(logging.WARNING)


_configure_logging()

logger = logging.getLogger(__name__)


@asynccontextmanager
async def app_lifespan(server: FastMCP) -> AsyncIterator[dict[str, Any]]:
    """Build the dependency container for the lifetime of the server.

    Args:
        server: The FastMCP server instance

    Yields:
        Dict with the configured portal names
    """
    logger.info("Courier MCP server starting up")

    deps = Dependencies.create()
    set_dependencies(deps)

    portals = sorted(deps.config.parser.parse())
    logger.info(
        "Loaded %d portal(s): %s",
        len(portals),
        ", ".join(portals) if portals else "(none)",
    )
    logger.info("Courier MCP server ready to accept connections")

    try:
        yield {"portals": portals}
    finally:
        logger.info("Courier MCP server shutting down")
        await deps.cleanup()
        reset_state()
        logger.info("Courier MCP server shutdown complete")


def configure_middleware(server: FastMCP, settings: Settings | None = None) -> None:
    """Configure middleware stack for the server.

    Adds middleware in order: ErrorHandling -> Logging

    Args:
        server: The FastMCP server to configure.
        settings: Settings to read logging options from; defaults to the
            environment.
    """
    settings = settings or Settings.from_env()

    # First added = innermost
    server.add_middleware(
        ErrorHandlingMiddleware(include_traceback=settings.include_traceback)
    )
    server.add_middleware(
        LoggingMiddleware(
            include_payloads=settings.log_payloads,
            slow_threshold_ms=settings.slow_threshold_ms,
        )
    )


def create_server() -> FastMCP:
    """Create and configure the MCP server with all middleware and resources.

    Returns:
        Configured FastMCP server instance
    """
    server = FastMCP(
        "courier_mcp",
        lifespan=app_lifespan,
    )

    configure_middleware(server)

    server.tool()(run_script)
    server.tool()(run_debug_command)
    server.tool()(cancel_execution)

    server.resource("portals://list")(list_portals_resource)

    @server.custom_route("/health", methods=["GET"])
    async def health_check(request: Request) -> PlainTextResponse:
        """Health check endpoint."""
        client_host = request.client.host if request.client else "unknown"
        logger.debug("Health check from %s", client_host)
        return PlainTextResponse("OK")

    return server


# Default server instance
mcp = create_server()
