from __future__ import annotations

from .bounds import (
    DEFAULT_MAX_INTERVAL,
    MAX_INTERVAL,
    draw_interval,
    normalize_bounds,
    normalize_max,
    normalize_min,
)
from .jitter import ExecutedHook, IntervalJitter, JitterCallback, MetricsRecorder
from .timers import AsyncioTimer, Timer, TimerHandle

__all__ = [
    "AsyncioTimer",
    "DEFAULT_MAX_INTERVAL",
    "ExecutedHook",
    "IntervalJitter",
    "JitterCallback",
    "MAX_INTERVAL",
    "MetricsRecorder",
    "Timer",
    "TimerHandle",
    "draw_interval",
    "normalize_bounds",
    "normalize_max",
    "normalize_min",
]
