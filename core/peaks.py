"""
Hill-summit detection on the altitude + heart-rate subset of a series.

A summit is accepted in a single greedy left-to-right pass when it

1. is at least as high as every sample within PEAK_WINDOW_SEC either side,
2. drops by MIN_PROMINENCE_M or more within PROMINENCE_WINDOW_SEC after it,
3. comes MIN_PEAK_SPACING_SEC or later after the previously accepted summit.

Equal-altitude plateaus all pass the first test; the spacing rule then keeps
the earliest accepted one. Accepted summits are never replaced.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional

from constants import (
    MIN_PEAK_SPACING_SEC,
    MIN_PROMINENCE_M,
    MIN_VALID_SAMPLES,
    PEAK_WINDOW_SEC,
    PROMINENCE_WINDOW_SEC,
)
from core.series import SampleSeries


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PeakSettings:
    min_samples: int = MIN_VALID_SAMPLES
    peak_window: float = PEAK_WINDOW_SEC
    prominence_window: float = PROMINENCE_WINDOW_SEC
    min_prominence: float = MIN_PROMINENCE_M
    min_spacing: float = MIN_PEAK_SPACING_SEC


@dataclass(frozen=True)
class PeakCandidate:
    """A detected summit. index points into the valid subset, not the raw series."""

    index: int
    elapsed_time: float
    altitude: float
    heart_rate: int
    distance: Optional[float]
    prominence: float


def _is_local_max(times: List[float], alts: List[float], i: int, window: float) -> bool:
    centre_time = times[i]
    centre_alt = alts[i]

    j = i - 1
    while j >= 0 and centre_time - times[j] <= window:
        if alts[j] > centre_alt:
            return False
        j -= 1

    j = i + 1
    n = len(times)
    while j < n and times[j] - centre_time <= window:
        if alts[j] > centre_alt:
            return False
        j += 1
    return True


def prominence_after(times: List[float], alts: List[float], i: int, window: float) -> float:
    """Drop from alts[i] to the lowest altitude within window seconds after it."""
    centre_time = times[i]
    lowest = alts[i]
    j = i + 1
    n = len(times)
    while j < n and times[j] - centre_time <= window:
        if alts[j] < lowest:
            lowest = alts[j]
        j += 1
    return alts[i] - lowest


def detect_hill_peaks(series: SampleSeries, settings: Optional[PeakSettings] = None) -> List[PeakCandidate]:
    """
    Find hill summits, ordered by elapsed time.

    Works on series.valid_subset(). Fewer than settings.min_samples valid
    samples is too sparse to judge and returns an empty list.
    """
    settings = settings or PeakSettings()
    valid = series.valid_subset()
    if len(valid) < settings.min_samples:
        logger.debug(
            "Skipping peak detection: %d valid samples (< %d)",
            len(valid), settings.min_samples,
        )
        return []

    times = valid.elapsed_times()
    alts = [float(a) for a in valid.field_values('altitude')]

    peaks: List[PeakCandidate] = []
    last_peak_time: Optional[float] = None

    for i in range(len(valid)):
        if not _is_local_max(times, alts, i, settings.peak_window):
            continue

        prominence = prominence_after(times, alts, i, settings.prominence_window)
        if prominence < settings.min_prominence:
            continue

        if last_peak_time is not None and times[i] - last_peak_time < settings.min_spacing:
            continue

        sample = valid[i]
        peaks.append(PeakCandidate(
            index=i,
            elapsed_time=sample.elapsed_time,
            altitude=float(sample.altitude),
            heart_rate=int(sample.heart_rate),
            distance=sample.distance,
            prominence=prominence,
        ))
        last_peak_time = times[i]

    logger.debug("Detected %d hill peaks in %d valid samples", len(peaks), len(valid))
    return peaks
