"""Cancellation tokens and the shared outbound concurrency limiter.

A CancellationToken is created per dispatch and handed to every concurrent
branch (enrichment lookups and provider sends). It fires when its deadline
passes or when cancel() is called. Branches run their network-bound work
through token.run(), which cancels the in-flight call when the token fires
and raises DispatchCancelledError so the branch can report a cancelled
outcome instead of aborting the whole dispatch.

The ConcurrencyLimiter bounds the number of simultaneous outbound calls
across all in-flight dispatches.

Usage:
    token = CancellationToken(timeout=30)
    limiter = ConcurrencyLimiter(10)

    value = await token.run(limiter.run_in_thread(blocking_call, arg))
"""

import asyncio
import time
from typing import Any, Awaitable, Callable, Optional, TypeVar

from infrastructure.notifications.errors import DispatchCancelledError

T = TypeVar("T")

DEADLINE_EXCEEDED = "Dispatch deadline exceeded"
CANCELLED = "Dispatch cancelled"


class CancellationToken:
    """Deadline and explicit-abort signal shared by one dispatch.

    Must be used from the event loop thread that runs the dispatch.

    Args:
        timeout: Seconds from creation until the token fires on its own.
            None means no deadline.
    """

    def __init__(self, timeout: Optional[float] = None):
        self._deadline = time.monotonic() + timeout if timeout is not None else None
        self._event = asyncio.Event()
        self._reason: Optional[str] = None

    def cancel(self, reason: str = CANCELLED) -> None:
        """Fire the token. Idempotent; the first reason wins."""
        if self._reason is None:
            self._reason = reason
        self._event.set()

    @property
    def deadline_exceeded(self) -> bool:
        return self._deadline is not None and time.monotonic() >= self._deadline

    @property
    def cancelled(self) -> bool:
        return self._event.is_set() or self.deadline_exceeded

    @property
    def reason(self) -> str:
        if self._reason is not None:
            return self._reason
        if self.deadline_exceeded:
            return DEADLINE_EXCEEDED
        return CANCELLED

    def remaining(self) -> Optional[float]:
        """Seconds until the deadline, None when there is no deadline."""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    def raise_if_cancelled(self) -> None:
        if self.cancelled:
            raise DispatchCancelledError(self.reason)

    async def wait(self) -> None:
        """Return once the token has fired."""
        if self.cancelled:
            return
        try:
            await asyncio.wait_for(self._event.wait(), self.remaining())
        except asyncio.TimeoutError:
            pass

    async def run(self, awaitable: Awaitable[T]) -> T:
        """Await ``awaitable`` unless the token fires first.

        If both finish together the completed result wins.

        Raises:
            DispatchCancelledError: The token fired before the awaitable
                finished; the awaitable has been cancelled.
        """
        if self.cancelled:
            if asyncio.iscoroutine(awaitable):
                awaitable.close()
            raise DispatchCancelledError(self.reason)

        work = asyncio.ensure_future(awaitable)
        waiter = asyncio.ensure_future(self.wait())
        try:
            done, _ = await asyncio.wait(
                {work, waiter}, return_when=asyncio.FIRST_COMPLETED
            )
        except asyncio.CancelledError:
            work.cancel()
            waiter.cancel()
            raise

        if work in done:
            waiter.cancel()
            return work.result()

        work.cancel()
        raise DispatchCancelledError(self.reason)


class ConcurrencyLimiter:
    """Bounds simultaneous outbound calls across all dispatches.

    Wraps an asyncio.Semaphore; bound to the event loop it is first
    contended on. A slot is held for as long as the worker thread runs,
    including after the awaiting coroutine has been cancelled.
    """

    def __init__(self, limit: int):
        if limit < 1:
            raise ValueError("Concurrency limit must be at least 1")
        self._limit = limit
        self._semaphore = asyncio.Semaphore(limit)
        self._in_flight = 0

    @property
    def limit(self) -> int:
        return self._limit

    @property
    def in_flight(self) -> int:
        return self._in_flight

    async def run_in_thread(self, func: Callable[..., T], *args: Any) -> T:
        """Run ``func(*args)`` in a worker thread once a slot is free.

        Cancelling the caller stops the wait but not the thread; the slot
        is released when the thread returns.
        """
        await self._semaphore.acquire()
        self._in_flight += 1
        try:
            worker = asyncio.ensure_future(asyncio.to_thread(func, *args))
        except BaseException:
            self._release()
            raise
        worker.add_done_callback(self._on_worker_done)
        return await asyncio.shield(worker)

    def _on_worker_done(self, worker: "asyncio.Future[Any]") -> None:
        self._release()
        # Mark the outcome retrieved when the caller was cancelled.
        if not worker.cancelled():
            worker.exception()

    def _release(self) -> None:
        self._in_flight -= 1
        self._semaphore.release()
