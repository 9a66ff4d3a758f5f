"""
Centered index-window estimators for chart curves.

Both estimators look W samples either side of the centre point. The window
shrinks at the ends of the series instead of reflecting, so the first and
last W points use a lopsided window.
"""

from __future__ import annotations

from typing import Optional, Sequence, Tuple

import numpy as np

from constants import (
    ESTIMATOR_WINDOW,
    MAX_PACE_SEC,
    MIN_MOVING_SPEED,
    MIN_RATE_TIME_SPAN_SEC,
    PACE_DISTANCE_M,
    SECONDS_PER_HOUR,
    STATIONARY_PACE,
    VERTICAL_RATE_LIMIT,
)


def _to_array(values: Sequence[Optional[float]]) -> np.ndarray:
    """Convert a stream to float64, absent entries become NaN."""
    return np.array([np.nan if v is None else float(v) for v in values], dtype=float)


def window_bounds(n: int, window: int) -> Tuple[np.ndarray, np.ndarray]:
    """Return (lo, hi) index arrays: max(0, i - W) and min(n - 1, i + W)."""
    if window < 0:
        raise ValueError(f"window must be non-negative, got {window}")
    idx = np.arange(n)
    lo = np.maximum(0, idx - window)
    hi = np.minimum(n - 1, idx + window)
    return lo, hi


def vertical_rates(
    elapsed_time: Sequence[float],
    altitude: Sequence[Optional[float]],
    window: int = ESTIMATOR_WINDOW,
    rate_limit: float = VERTICAL_RATE_LIMIT,
    min_time_span: float = MIN_RATE_TIME_SPAN_SEC,
) -> np.ndarray:
    """
    Secant estimate of vertical speed in meters per hour.

    For point i the rate is the altitude change between the window edges
    divided by the time between them. Spans of min_time_span seconds or
    less report 0, as do edges with a missing altitude. Results are clamped
    to +/- rate_limit.
    """
    times = _to_array(elapsed_time)
    alts = _to_array(altitude)
    if len(times) != len(alts):
        raise ValueError("elapsed_time and altitude must have the same length")

    n = len(times)
    if n == 0:
        return np.zeros(0, dtype=float)

    lo, hi = window_bounds(n, window)
    span = times[hi] - times[lo]
    rise = alts[hi] - alts[lo]

    usable = (span > min_time_span) & np.isfinite(rise) & np.isfinite(span)
    rates = np.zeros(n, dtype=float)
    np.divide(rise * SECONDS_PER_HOUR, span, out=rates, where=usable)
    return np.clip(rates, -rate_limit, rate_limit)


def moving_average_speeds(
    speed: Sequence[Optional[float]],
    window: int = ESTIMATOR_WINDOW,
) -> np.ndarray:
    """
    Centered arithmetic mean of the present speeds in each window.

    Absent speeds are skipped; a recorded 0 m/s counts as a value. A window
    with no present speed averages to 0.
    """
    values = _to_array(speed)
    n = len(values)
    if n == 0:
        return np.zeros(0, dtype=float)

    present = np.isfinite(values)
    sums = np.concatenate(([0.0], np.cumsum(np.where(present, values, 0.0))))
    counts = np.concatenate(([0], np.cumsum(present.astype(int))))

    lo, hi = window_bounds(n, window)
    window_sums = sums[hi + 1] - sums[lo]
    window_counts = counts[hi + 1] - counts[lo]

    means = np.zeros(n, dtype=float)
    np.divide(window_sums, window_counts, out=means, where=window_counts > 0)
    return means


def pace_from_speeds(
    avg_speed,
    pace_distance: float = PACE_DISTANCE_M,
    min_speed: float = MIN_MOVING_SPEED,
    max_pace: float = MAX_PACE_SEC,
) -> np.ndarray:
    """
    Seconds needed to cover pace_distance meters at each average speed.

    Speeds at or below min_speed give STATIONARY_PACE instead of a huge
    number; the rest are capped at max_pace.
    """
    speeds = np.atleast_1d(np.asarray(avg_speed, dtype=float))
    moving = np.isfinite(speeds) & (speeds > min_speed)

    result = np.full(speeds.shape, STATIONARY_PACE, dtype=float)
    np.divide(pace_distance, speeds, out=result, where=moving)
    np.minimum(result, max_pace, out=result, where=moving)
    return result


def paces(
    speed: Sequence[Optional[float]],
    window: int = ESTIMATOR_WINDOW,
    pace_distance: float = PACE_DISTANCE_M,
    min_speed: float = MIN_MOVING_SPEED,
    max_pace: float = MAX_PACE_SEC,
) -> np.ndarray:
    """Moving-average speed converted to pace, one value per sample."""
    averaged = moving_average_speeds(speed, window=window)
    return pace_from_speeds(averaged, pace_distance=pace_distance, min_speed=min_speed, max_pace=max_pace)


def is_stationary(pace: float) -> bool:
    return pace == STATIONARY_PACE
