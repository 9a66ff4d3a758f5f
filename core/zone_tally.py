"""Time-in-zone accumulation and per-zone heart-rate statistics."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

import pandas as pd

from core.series import SampleSeries, round_half_up
from hr_zones import HR_ZONE_NAMES, HR_ZONE_ORDER


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ZoneStats:
    zone: str
    name: str
    seconds: float
    percent: float
    count: int
    avg_hr: int
    min_hr: int
    max_hr: int

    @property
    def has_data(self) -> bool:
        return self.count > 0


def empty_tally() -> Dict[str, float]:
    return {zone: 0.0 for zone in HR_ZONE_ORDER}


def compute_zone_tally(series: SampleSeries, max_gap: Optional[float] = None) -> Dict[str, float]:
    """
    Seconds spent in each zone.

    The gap between samples i and i+1 is booked to sample i's zone; the last
    sample closes no interval. Unlabelled samples book nothing. With every
    sample labelled and no max_gap, the values sum to the series duration.

    max_gap caps each interval (e.g. 10 s to keep auto-pause gaps out of the
    zones), at the cost of that conservation.
    """
    tally = empty_tally()
    if len(series) < 2:
        return tally

    samples = series.samples
    skipped = 0.0
    for current, following in zip(samples, samples[1:]):
        delta = following.elapsed_time - current.elapsed_time
        if max_gap is not None:
            delta = min(delta, max_gap)
        if current.zone is None:
            skipped += delta
            continue
        tally[current.zone] += delta

    if skipped:
        logger.debug("%.1fs of unlabelled samples left out of the zone tally", skipped)
    return tally


def compute_zone_stats(
    series: SampleSeries,
    tally: Optional[Dict[str, float]] = None,
) -> List[ZoneStats]:
    """
    One ZoneStats per zone, in zone order.

    Percent is relative to the tallied total, so the five add up to 100 even
    when max_gap or unlabelled samples leave time out. Heart-rate figures only use
    samples that carry both a zone label and a heart rate.
    """
    tally = tally if tally is not None else compute_zone_tally(series)
    tallied = sum(tally.values())

    df = series.to_frame()
    df = df[df['zone'].notna() & df['heart_rate'].notna()]
    grouped = (
        df.groupby('zone', observed=False)['heart_rate']
        .agg(['count', 'mean', 'min', 'max'])
        .reindex(list(HR_ZONE_ORDER))
    )

    stats = []
    for zone in HR_ZONE_ORDER:
        row = grouped.loc[zone]
        count = 0 if pd.isna(row['count']) else int(row['count'])
        seconds = float(tally.get(zone, 0.0))
        stats.append(ZoneStats(
            zone=zone,
            name=HR_ZONE_NAMES[zone],
            seconds=seconds,
            percent=(seconds / tallied * 100.0) if tallied > 0 else 0.0,
            count=count,
            avg_hr=round_half_up(row['mean']) if count else 0,
            min_hr=int(row['min']) if count else 0,
            max_hr=int(row['max']) if count else 0,
        ))
    return stats
