"""Tests for error handling middleware."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from fastmcp.exceptions import ToolError

from courier_mcp.middleware.errors import ErrorHandlingMiddleware
from courier_mcp.services.errors import RateLimitExceededError


@pytest.fixture
def mock_context() -> MagicMock:
    """Create a mock middleware context."""
    context = MagicMock()
    context.method = "tools/call"
    context.message = MagicMock()
    context.message.name = "run_script"
    return context


@pytest.mark.asyncio
async def test_passes_through_success(mock_context: MagicMock) -> None:
    middleware = ErrorHandlingMiddleware()
    call_next = AsyncMock(return_value="success")

    assert await middleware.on_message(mock_context, call_next) == "success"


@pytest.mark.asyncio
async def test_courier_errors_become_tool_errors(mock_context: MagicMock) -> None:
    """Execution errors reach the client as plain tool errors."""
    middleware = ErrorHandlingMiddleware(logger=MagicMock())
    error = RateLimitExceededError("acme.logicmonitor.com", 4)
    call_next = AsyncMock(side_effect=error)

    with pytest.raises(ToolError, match="Rate limit exceeded") as exc_info:
        await middleware.on_message(mock_context, call_next)

    assert exc_info.value.__cause__ is error


@pytest.mark.asyncio
async def test_other_errors_reraised(mock_context: MagicMock) -> None:
    mock_logger = MagicMock()
    middleware = ErrorHandlingMiddleware(logger=mock_logger, include_traceback=True)
    call_next = AsyncMock(side_effect=ValueError("test error"))

    with pytest.raises(ValueError):
        await middleware.on_message(mock_context, call_next)

    mock_logger.error.assert_called_once()
    assert mock_logger.error.call_args.kwargs["exc_info"] is True


@pytest.mark.asyncio
async def test_tracks_error_counts(mock_context: MagicMock) -> None:
    middleware = ErrorHandlingMiddleware(logger=MagicMock())

    for error in (ValueError("a"), ValueError("b"), KeyError("c")):
        with pytest.raises((ValueError, KeyError)):
            await middleware.on_message(mock_context, AsyncMock(side_effect=error))

    assert middleware.get_error_stats() == {"ValueError": 2, "KeyError": 1}

    middleware.reset_stats()
    assert middleware.get_error_stats() == {}
