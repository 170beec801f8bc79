"""
Cooperative cancellation tokens for connect attempts.
"""
import asyncio
from typing import Awaitable, Optional, TypeVar

from gateway_core.exceptions import SessionCancelledError

T = TypeVar('T')


class CancellationToken:
    """Read side of a cancellation signal."""

    def __init__(self):
        self._event = asyncio.Event()

    @property
    def is_cancellation_requested(self) -> bool:
        return self._event.is_set()

    async def wait(self) -> None:
        await self._event.wait()

    def raise_if_cancellation_requested(self) -> None:
        if self.is_cancellation_requested:
            raise SessionCancelledError("Operation was cancelled")


class CancellationTokenSource:
    """Owns a token and triggers it."""

    def __init__(self):
        self.token = CancellationToken()

    def cancel(self) -> None:
        self.token._event.set()


async def run_cancellable(awaitable: Awaitable[T], token: Optional[CancellationToken]) -> T:
    """Await ``awaitable`` unless ``token`` fires first.

    The losing side is cancelled. Raises SessionCancelledError when the
    token wins.
    """
    if token is None:
        return await awaitable
    if token.is_cancellation_requested:
        if asyncio.iscoroutine(awaitable):
            awaitable.close()
        raise SessionCancelledError("Operation was cancelled")

    work = asyncio.ensure_future(awaitable)
    waiter = asyncio.ensure_future(token.wait())
    try:
        await asyncio.wait({work, waiter}, return_when=asyncio.FIRST_COMPLETED)
    finally:
        for task in (work, waiter):
            if not task.done():
                task.cancel()
        # Let cancelled tasks unwind before returning
        await asyncio.gather(work, waiter, return_exceptions=True)

    if work.done() and not work.cancelled():
        return work.result()
    raise SessionCancelledError("Operation was cancelled")
