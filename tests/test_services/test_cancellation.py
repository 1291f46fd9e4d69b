"""Tests for cooperative cancellation."""

import asyncio
import time

import pytest

from courier_mcp.services.cancellation import CancellationToken
from courier_mcp.services.errors import ExecutionCancelledError


class TestCancellationToken:
    """Tests for CancellationToken."""

    def test_starts_uncancelled(self) -> None:
        token = CancellationToken()

        assert not token.cancelled
        token.raise_if_cancelled()

    def test_cancel_is_idempotent(self) -> None:
        token = CancellationToken()
        token.cancel()
        token.cancel()

        assert token.cancelled
        with pytest.raises(ExecutionCancelledError):
            token.raise_if_cancelled()

    @pytest.mark.asyncio
    async def test_sleep_completes_when_not_cancelled(self) -> None:
        token = CancellationToken()

        await token.sleep(0.01)

        assert not token.cancelled

    @pytest.mark.asyncio
    async def test_sleep_wakes_on_cancel(self) -> None:
        token = CancellationToken()
        asyncio.get_running_loop().call_later(0.02, token.cancel)

        started = time.monotonic()
        with pytest.raises(ExecutionCancelledError):
            await token.sleep(10)

        assert time.monotonic() - started < 1

    @pytest.mark.asyncio
    async def test_sleep_after_cancel_raises_immediately(self) -> None:
        token = CancellationToken()
        token.cancel()

        with pytest.raises(ExecutionCancelledError):
            await token.sleep(10)
