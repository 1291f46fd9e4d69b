"""Cooperative cancellation shared across an execution."""

import asyncio

from courier_mcp.services.errors import ExecutionCancelledError


class CancellationToken:
    """Cancellation signal checked at every suspension point.

    Cancelling never aborts a request already in flight; it only stops the
    next step. Sleeps taken through the token wake as soon as it fires.
    """

    def __init__(self) -> None:
        self._event = asyncio.Event()

    def cancel(self) -> None:
        """Signal cancellation. Idempotent."""
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        """Raise ExecutionCancelledError if cancellation was requested."""
        if self._event.is_set():
            raise ExecutionCancelledError()

    async def sleep(self, seconds: float) -> None:
        """Sleep for ``seconds`` unless cancelled first.

        Raises:
            ExecutionCancelledError: If cancelled before or during the wait.
        """
        self.raise_if_cancelled()
        try:
            await asyncio.wait_for(self._event.wait(), timeout=seconds)
        except asyncio.TimeoutError:
            return
        raise ExecutionCancelledError()
