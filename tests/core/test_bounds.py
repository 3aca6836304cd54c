import math

import pytest

from interval_jitter.core.bounds import (
    DEFAULT_MAX_INTERVAL,
    MAX_INTERVAL,
    draw_interval,
    normalize_bounds,
    normalize_max,
    normalize_min,
)


@pytest.mark.parametrize("value", [0, 1, 250, 1000, 999.5])
def test_normalize_min_keeps_values_within_current_max(value):
    assert normalize_min(value, 1000) == value


@pytest.mark.parametrize(
    "value",
    [-5, -0.1, 1001, MAX_INTERVAL + 1, None, "100", True, math.nan, math.inf],
)
def test_normalize_min_clamps_invalid_to_zero(value):
    assert normalize_min(value, 1000) == 0


def test_normalize_min_without_current_max_only_checks_range():
    assert normalize_min(5000) == 5000
    assert normalize_min(MAX_INTERVAL) == MAX_INTERVAL
    assert normalize_min(MAX_INTERVAL + 1) == 0


@pytest.mark.parametrize("value", [100, 101, 5000, MAX_INTERVAL])
def test_normalize_max_keeps_values_above_current_min(value):
    assert normalize_max(value, 100) == value


@pytest.mark.parametrize("value", [MAX_INTERVAL + 1, 10**12, math.inf])
def test_normalize_max_clamps_to_max_interval(value):
    assert normalize_max(value, 0) == MAX_INTERVAL


@pytest.mark.parametrize("value", [50, -1, None, "2000", False, math.nan])
def test_normalize_max_resets_to_default(value):
    assert normalize_max(value, 100) == DEFAULT_MAX_INTERVAL


def test_normalize_max_accepts_zero_when_min_is_zero():
    assert normalize_max(0, 0) == 0


@pytest.mark.parametrize(
    ("requested", "expected"),
    [
        ((0, 1000), (0, 1000)),
        ((100, 100), (100, 100)),
        ((2000, 5000), (2000, 5000)),
        ((5, 3), (5, DEFAULT_MAX_INTERVAL)),
        ((-1, None), (0, DEFAULT_MAX_INTERVAL)),
        ((10, MAX_INTERVAL + 10), (10, MAX_INTERVAL)),
        ((2000, None), (0, DEFAULT_MAX_INTERVAL)),
    ],
)
def test_normalize_bounds(requested, expected):
    assert normalize_bounds(*requested) == expected


def test_draw_interval_covers_both_ends():
    assert draw_interval(10, 20, rng=lambda: 0.0) == 10
    assert draw_interval(10, 20, rng=lambda: 0.9999999) == 20
    assert draw_interval(7, 7, rng=lambda: 0.5) == 7


def test_draw_interval_never_exceeds_max_for_fractional_bounds():
    assert draw_interval(0.5, 1.7, rng=lambda: 0.9999999) == 1.7
