"""
Chart-ready point sequences handed to the rendering layer.

Every builder filters to the samples its chart can plot, downsamples them,
and (for the elevation and pace charts) runs the windowed estimators over
the downsampled points. Values stay in SI units; the renderer converts.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence

from constants import (
    ELEVATION_CHART_POINTS,
    ESTIMATOR_WINDOW,
    HR_TIMELINE_POINTS,
    MAX_PACE_SEC,
    MIN_MOVING_SPEED,
    MIN_RATE_TIME_SPAN_SEC,
    PACE_CHART_POINTS,
    PACE_DISTANCE_M,
    PEAK_PROFILE_POINTS,
    VERTICAL_RATE_LIMIT,
)
from core.downsample import downsample
from core.estimators import moving_average_speeds, pace_from_speeds, vertical_rates
from core.series import SampleSeries


@dataclass(frozen=True)
class ChartSettings:
    elevation_points: int = ELEVATION_CHART_POINTS
    pace_points: int = PACE_CHART_POINTS
    profile_points: int = PEAK_PROFILE_POINTS
    timeline_points: int = HR_TIMELINE_POINTS
    window: int = ESTIMATOR_WINDOW
    rate_limit: float = VERTICAL_RATE_LIMIT
    min_time_span: float = MIN_RATE_TIME_SPAN_SEC
    pace_distance: float = PACE_DISTANCE_M
    min_speed: float = MIN_MOVING_SPEED
    max_pace: float = MAX_PACE_SEC


@dataclass(frozen=True)
class ElevationPoint:
    elapsed_time: float
    distance: float
    altitude: float
    vertical_rate: float  # m/h


@dataclass(frozen=True)
class PacePoint:
    elapsed_time: float
    distance: float
    heart_rate: int
    pace: float  # seconds per pace_distance, STATIONARY_PACE when stopped
    speed: float  # window-averaged m/s


@dataclass(frozen=True)
class ProfilePoint:
    distance: float
    altitude: float


@dataclass(frozen=True)
class TimelinePoint:
    index: int
    elapsed_time: float
    heart_rate: Optional[int]
    zone: Optional[str]


@dataclass
class ZoneSegment:
    zone: Optional[str]
    points: List[TimelinePoint]


def build_elevation_chart(series: SampleSeries, settings: Optional[ChartSettings] = None) -> List[ElevationPoint]:
    """Altitude and vertical speed against distance."""
    settings = settings or ChartSettings()
    sampled = downsample(series.with_present('distance', 'altitude'), settings.elevation_points)
    if len(sampled) == 0:
        return []

    rates = vertical_rates(
        sampled.elapsed_times(),
        sampled.field_values('altitude'),
        window=settings.window,
        rate_limit=settings.rate_limit,
        min_time_span=settings.min_time_span,
    )
    return [
        ElevationPoint(
            elapsed_time=s.elapsed_time,
            distance=float(s.distance),
            altitude=float(s.altitude),
            vertical_rate=float(rate),
        )
        for s, rate in zip(sampled, rates)
    ]


def build_pace_chart(series: SampleSeries, settings: Optional[ChartSettings] = None) -> List[PacePoint]:
    """Smoothed pace and heart rate against distance."""
    settings = settings or ChartSettings()
    sampled = downsample(series.with_present('distance', 'heart_rate', 'speed'), settings.pace_points)
    if len(sampled) == 0:
        return []

    avg_speeds = moving_average_speeds(sampled.field_values('speed'), window=settings.window)
    chart_paces = pace_from_speeds(
        avg_speeds,
        pace_distance=settings.pace_distance,
        min_speed=settings.min_speed,
        max_pace=settings.max_pace,
    )
    return [
        PacePoint(
            elapsed_time=s.elapsed_time,
            distance=float(s.distance),
            heart_rate=int(s.heart_rate),
            pace=float(pace),
            speed=float(speed),
        )
        for s, pace, speed in zip(sampled, chart_paces, avg_speeds)
    ]


def build_peak_profile(series: SampleSeries, max_points: int = PEAK_PROFILE_POINTS) -> List[ProfilePoint]:
    """Coarse elevation profile the renderer draws summit markers on."""
    sampled = downsample(series.with_present('distance', 'altitude'), max_points)
    return [ProfilePoint(distance=float(s.distance), altitude=float(s.altitude)) for s in sampled]


def build_hr_timeline(series: SampleSeries, max_points: int = HR_TIMELINE_POINTS) -> List[TimelinePoint]:
    """Heart rate over time, with each point's zone label."""
    sampled = downsample(series, max_points)
    return [
        TimelinePoint(index=i, elapsed_time=s.elapsed_time, heart_rate=s.heart_rate, zone=s.zone)
        for i, s in enumerate(sampled)
    ]


def group_zone_segments(points: Sequence[TimelinePoint]) -> List[ZoneSegment]:
    """
    Split timeline points into runs of the same zone.

    The point where the zone changes ends the old run and starts the new
    one, so adjacent segments share an endpoint and the line stays joined.
    """
    if not points:
        return []

    segments: List[ZoneSegment] = []
    current = ZoneSegment(zone=points[0].zone, points=[points[0]])
    for point in points[1:]:
        current.points.append(point)
        if point.zone != current.zone:
            segments.append(current)
            current = ZoneSegment(zone=point.zone, points=[point])
    segments.append(current)
    return segments
