from __future__ import annotations

import math
import random
from typing import Callable, Final, Optional, Tuple

# Largest delay a host timer accepts (signed 32-bit milliseconds).
MAX_INTERVAL: Final[int] = 2147483647
DEFAULT_MAX_INTERVAL: Final[int] = 1000


def _is_number(value: object) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return not math.isnan(value)


def normalize_min(value: object, current_max: Optional[float] = None) -> float:
    """Return ``value`` if it is a usable lower bound, otherwise ``0``.

    ``current_max`` is ``None`` while no upper bound has been set yet.
    """

    if not _is_number(value):
        return 0
    assert isinstance(value, (int, float))
    if value < 0 or value > MAX_INTERVAL:
        return 0
    if current_max is not None and value > current_max:
        return 0
    return value


def normalize_max(value: object, current_min: float = 0) -> float:
    """Return the upper bound ``value`` resolves to.

    Missing, negative or below ``current_min`` resets to the default;
    anything above ``MAX_INTERVAL`` is clamped to it.
    """

    if not _is_number(value):
        return DEFAULT_MAX_INTERVAL
    assert isinstance(value, (int, float))
    if value < 0 or value < current_min:
        return DEFAULT_MAX_INTERVAL
    if value > MAX_INTERVAL:
        return MAX_INTERVAL
    return value


def normalize_bounds(min_value: object, max_value: object) -> Tuple[float, float]:
    low = normalize_min(min_value)
    high = normalize_max(max_value, low)
    if low > high:
        # defaulted max landed under an explicit min
        low = 0
    return low, high


def draw_interval(
    min_interval: float,
    max_interval: float,
    rng: Callable[[], float] = random.random,
) -> float:
    """Uniform delay in ``[min_interval, max_interval]`` in whole-millisecond steps."""

    delay = min_interval + math.floor(rng() * (max_interval - min_interval + 1))
    return min(delay, max_interval)


__all__ = [
    "DEFAULT_MAX_INTERVAL",
    "MAX_INTERVAL",
    "draw_interval",
    "normalize_bounds",
    "normalize_max",
    "normalize_min",
]
