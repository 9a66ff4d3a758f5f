"""Activity-level summary figures derived from a sample series."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import pandas as pd

from core.series import SampleSeries, round_half_up


@dataclass(frozen=True)
class ActivitySummary:
    sample_count: int
    total_duration: float
    total_distance: float
    elevation_gain: float
    min_altitude: Optional[float]
    max_altitude: Optional[float]
    avg_hr: Optional[int]
    max_hr: Optional[int]


def _optional(value) -> Optional[float]:
    return None if pd.isna(value) else float(value)


def summarize_activity(series: SampleSeries) -> ActivitySummary:
    """
    Duration, distance, climbing and heart-rate totals for one activity.

    Elevation gain adds up every rise between consecutive recorded
    altitudes (samples without altitude are skipped, not treated as 0).
    Distance is the largest recorded cumulative distance.
    """
    if len(series) == 0:
        return ActivitySummary(0, 0.0, 0.0, 0.0, None, None, None, None)

    df = series.to_frame()

    altitude = df['altitude'].dropna()
    elevation_gain = float(altitude.diff().clip(lower=0).sum()) if len(altitude) > 1 else 0.0

    distance = df['distance'].dropna()
    total_distance = float(distance.max()) if len(distance) else 0.0

    heart_rate = df['heart_rate'].dropna()
    avg_hr = round_half_up(heart_rate.mean()) if len(heart_rate) else None
    max_hr = int(heart_rate.max()) if len(heart_rate) else None

    return ActivitySummary(
        sample_count=len(series),
        total_duration=series.duration,
        total_distance=total_distance,
        elevation_gain=elevation_gain,
        min_altitude=_optional(altitude.min()) if len(altitude) else None,
        max_altitude=_optional(altitude.max()) if len(altitude) else None,
        avg_hr=avg_hr,
        max_hr=max_hr,
    )
