from __future__ import annotations

import asyncio
import inspect
import logging
import random
from dataclasses import dataclass
from typing import Any, Callable, List, Mapping, Optional, Protocol

import anyio

from .bounds import (
    DEFAULT_MAX_INTERVAL,
    draw_interval,
    normalize_bounds,
    normalize_max,
    normalize_min,
)
from .timers import AsyncioTimer, Timer, TimerHandle


JitterCallback = Callable[["IntervalJitter"], Any]
ExecutedHook = Callable[[Any], None]


class MetricsRecorder(Protocol):
    def increment(self, name: str, tags: Mapping[str, str] | None = None) -> None:
        ...

    def observe(self, name: str, value: float, tags: Mapping[str, str] | None = None) -> None:
        ...


def _noop(_jitter: IntervalJitter) -> None:
    return None


@dataclass(slots=True)
class _PendingHandles:
    """Timer handles owned by one run of the loop."""

    delay: Optional[TimerHandle] = None
    resume: Optional[TimerHandle] = None
    deferred: bool = False

    def release(self) -> None:
        for handle in (self.delay, self.resume):
            if handle is not None:
                handle.cancel()
        self.delay = None
        self.resume = None


class IntervalJitter:
    """Invoke a callback over and over, waiting a random delay before each call.

    Every cycle draws a fresh delay in ``[min_interval, max_interval]``
    milliseconds, waits for it, calls ``callback(jitter)``, hands the result
    to ``on_callback_executed`` and yields once to the event loop before the
    next draw. The loop runs until :meth:`stop` is called.

    Bound setters never raise: invalid values are corrected silently, see
    :mod:`interval_jitter.core.bounds`.
    """

    def __init__(
        self,
        callback: JitterCallback,
        *,
        min_interval: object = 0,
        max_interval: object = DEFAULT_MAX_INTERVAL,
        on_callback_executed: Optional[ExecutedHook] = None,
        name: str = "jitter",
        timer: Optional[Timer] = None,
        logger: Optional[logging.Logger] = None,
        metrics: Optional[MetricsRecorder] = None,
        rng: Optional[Callable[[], float]] = None,
    ) -> None:
        self.callback: JitterCallback = _noop
        self.set_callback(callback)
        self.on_callback_executed = on_callback_executed if callable(on_callback_executed) else None
        self.name = name
        self.min_interval, self.max_interval = normalize_bounds(min_interval, max_interval)
        self._timer: Timer = timer if timer is not None else AsyncioTimer()
        self._logger = logger or logging.getLogger(__name__)
        self._metrics = metrics
        self._rng = rng or random.random
        self._running = False
        self._pending: Optional[_PendingHandles] = None
        self._last_interval: Optional[float] = None
        self._inflight: Any = None
        self._stop_waiters: List[anyio.Event] = []

    @property
    def running(self) -> bool:
        return self._running

    @property
    def last_interval(self) -> Optional[float]:
        """Delay drawn for the most recent cycle, in milliseconds."""
        return self._last_interval

    def set_min_interval(self, value: object) -> None:
        self.min_interval = normalize_min(value, self.max_interval)
        if self.min_interval != value:
            self._log_corrected("min_interval", value, self.min_interval)

    def set_max_interval(self, value: object) -> None:
        self.max_interval = normalize_max(value, self.min_interval)
        if self.max_interval != value:
            self._log_corrected("max_interval", value, self.max_interval)

    def set_bounds(self, min_value: object, max_value: object) -> None:
        previous = (self.min_interval, self.max_interval)
        self.min_interval, self.max_interval = normalize_bounds(min_value, max_value)
        if previous != (self.min_interval, self.max_interval):
            self._logger.info(
                "jitter_bounds_updated",
                extra={
                    "event": "jitter_bounds_updated",
                    "jitter": self.name,
                    "previous": {"min_interval": previous[0], "max_interval": previous[1]},
                    "current": {
                        "min_interval": self.min_interval,
                        "max_interval": self.max_interval,
                    },
                },
            )

    def set_callback(self, callback: object) -> None:
        if callable(callback):
            self.callback = callback

    def start(self) -> None:
        if self._running:
            self._logger.debug(
                "jitter_start_ignored",
                extra={"event": "jitter_start_ignored", "jitter": self.name},
            )
            return
        self._running = True
        pending = _PendingHandles()
        self._pending = pending
        self._logger.info(
            "jitter_started",
            extra={
                "event": "jitter_started",
                "jitter": self.name,
                "min_interval": self.min_interval,
                "max_interval": self.max_interval,
            },
        )
        if self._inflight is not None:
            # previous awaitable callback still running; draw once it settles
            pending.deferred = True
            return
        try:
            self._schedule_next(pending)
        except BaseException:
            # no event loop to schedule on
            self._running = False
            self._pending = None
            raise

    def stop(self) -> None:
        pending, self._pending = self._pending, None
        if pending is not None:
            pending.release()
        was_running = self._running
        self._running = False
        waiters, self._stop_waiters = self._stop_waiters, []
        for waiter in waiters:
            waiter.set()
        if was_running:
            self._logger.info(
                "jitter_stopped",
                extra={"event": "jitter_stopped", "jitter": self.name},
            )

    async def serve(self, duration_ms: Optional[float] = None) -> None:
        """Run until stopped, or for ``duration_ms`` when given; always stop on exit."""

        stopped = anyio.Event()
        self._stop_waiters.append(stopped)
        self.start()
        try:
            if duration_ms is None:
                await stopped.wait()
            else:
                with anyio.move_on_after(max(0.0, duration_ms) / 1000.0):
                    await stopped.wait()
        finally:
            self.stop()

    def _is_current(self, pending: _PendingHandles) -> bool:
        return self._running and pending is self._pending

    def _schedule_next(self, pending: _PendingHandles) -> None:
        if not self._is_current(pending):
            return
        delay = draw_interval(self.min_interval, self.max_interval, self._rng)
        self._last_interval = delay
        if self._metrics is not None:
            self._metrics.observe("jitter.delay_ms", float(delay), tags={"jitter": self.name})
        pending.delay = self._timer.call_later(delay, lambda: self._fire(pending))

    def _fire(self, pending: _PendingHandles) -> None:
        pending.delay = None
        try:
            result = self.callback(self)
        except Exception as exc:
            self._record_failure(exc)
            self._resume(pending)
            return
        if inspect.isawaitable(result):
            self._inflight = self._timer.spawn(
                result,
                lambda value, exc: self._complete(pending, value, exc),
            )
            return
        self._complete(pending, result, None)

    def _complete(
        self,
        pending: _PendingHandles,
        result: Any,
        exc: Optional[BaseException],
    ) -> None:
        self._inflight = None
        if isinstance(exc, asyncio.CancelledError):
            self._resume_deferred()
            return
        if exc is not None:
            self._record_failure(exc)
        else:
            self._notify_executed(result)
        self._resume(pending)
        self._resume_deferred()

    def _notify_executed(self, result: Any) -> None:
        if self._metrics is not None:
            self._metrics.increment("jitter.callbacks", tags={"jitter": self.name})
        hook = self.on_callback_executed
        if hook is None:
            return
        try:
            hook(result)
        except Exception as exc:
            self._record_failure(exc)

    def _resume(self, pending: _PendingHandles) -> None:
        if not self._is_current(pending):
            return
        pending.resume = self._timer.call_soon(lambda: self._schedule_next(pending))

    def _resume_deferred(self) -> None:
        current = self._pending
        if current is None or not current.deferred:
            return
        current.deferred = False
        self._resume(current)

    def _record_failure(self, exc: BaseException) -> None:
        self._logger.error(
            "jitter_callback_failed",
            exc_info=exc,
            extra={
                "event": "jitter_callback_failed",
                "jitter": self.name,
                "error": f"{exc.__class__.__name__}: {exc}",
            },
        )
        if self._metrics is not None:
            self._metrics.increment("jitter.callback_failures", tags={"jitter": self.name})
        self._timer.report_error(f"{self.name} callback failed", exc)

    def _log_corrected(self, bound: str, requested: object, applied: float) -> None:
        self._logger.debug(
            "jitter_bound_corrected",
            extra={
                "event": "jitter_bound_corrected",
                "jitter": self.name,
                "bound": bound,
                "requested": repr(requested),
                "applied": applied,
            },
        )


__all__ = ["IntervalJitter", "JitterCallback", "ExecutedHook", "MetricsRecorder"]
