from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable, Optional, Protocol, Set


class TimerHandle(Protocol):
    def cancel(self) -> None:
        ...


class Timer(Protocol):
    """Host deferred-execution facility driving an ``IntervalJitter``.

    Delays are in milliseconds. ``cancel()`` on a returned handle must be
    harmless once the call has fired or was already cancelled.
    """

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> TimerHandle:
        ...

    def call_soon(self, callback: Callable[[], None]) -> TimerHandle:
        ...

    def spawn(
        self,
        awaitable: Awaitable[Any],
        on_done: Callable[[Any, Optional[BaseException]], None],
    ) -> Any:
        ...

    def report_error(self, message: str, exc: BaseException) -> None:
        ...


class AsyncioTimer:
    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        self._loop = loop
        self._tasks: Set[asyncio.Future[Any]] = set()

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is not None:
            return self._loop
        return asyncio.get_running_loop()

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        return self.loop.call_later(max(0.0, delay_ms) / 1000.0, callback)

    def call_soon(self, callback: Callable[[], None]) -> asyncio.Handle:
        return self.loop.call_soon(callback)

    def spawn(
        self,
        awaitable: Awaitable[Any],
        on_done: Callable[[Any, Optional[BaseException]], None],
    ) -> asyncio.Future[Any]:
        future = asyncio.ensure_future(awaitable, loop=self.loop)
        self._tasks.add(future)

        def _done(fut: asyncio.Future[Any]) -> None:
            self._tasks.discard(fut)
            if fut.cancelled():
                on_done(None, asyncio.CancelledError())
                return
            exc = fut.exception()
            on_done(None if exc is not None else fut.result(), exc)

        future.add_done_callback(_done)
        return future

    def report_error(self, message: str, exc: BaseException) -> None:
        self.loop.call_exception_handler({"message": message, "exception": exc})


__all__ = ["AsyncioTimer", "Timer", "TimerHandle"]
