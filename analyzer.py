"""
Ultra State Analytics - Activity Analysis Engine

Runs every analysis component on one activity's sample series and packages
the results for the rendering layer. Nothing here touches files, storage or
unit conversion: input and output are SI.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field, fields, replace
from typing import Any, Dict, Iterable, List, Mapping, Optional

from constants import ANALYSIS_PAYLOAD_VERSION
from core.chart_data import (
    ChartSettings,
    ElevationPoint,
    PacePoint,
    ProfilePoint,
    TimelinePoint,
    ZoneSegment,
    build_elevation_chart,
    build_hr_timeline,
    build_pace_chart,
    build_peak_profile,
    group_zone_segments,
)
from core.peaks import PeakCandidate, PeakSettings, detect_hill_peaks
from core.recovery import RecoveryRecord, RecoverySettings, analyze_recovery, classify_recovery
from core.series import SeriesLike, as_series
from core.summary import ActivitySummary, summarize_activity
from core.zone_tally import ZoneStats, compute_zone_stats, compute_zone_tally
from hr_zones import HR_ZONE_ORDER


logger = logging.getLogger(__name__)


def _coerce_setting(default, value):
    """Cast a raw setting (often a string from storage) to the default's type."""
    if value is None or isinstance(default, bool):
        return value
    if isinstance(default, int):
        return int(float(value))
    if isinstance(default, float):
        return float(value)
    return value


@dataclass(frozen=True)
class AnalysisSettings:
    """Parameters for one analysis run. Frozen, so it can key a cache."""

    peaks: PeakSettings = field(default_factory=PeakSettings)
    recovery: RecoverySettings = field(default_factory=RecoverySettings)
    charts: ChartSettings = field(default_factory=ChartSettings)
    zone_max_gap: Optional[float] = None

    @classmethod
    def from_mapping(cls, values: Optional[Mapping[str, Any]]) -> 'AnalysisSettings':
        """
        Build settings from a flat mapping, e.g. rows of a settings table.

        Keys are the field names of PeakSettings, RecoverySettings and
        ChartSettings, optionally prefixed with their group ("peaks.",
        "recovery.", "charts."), plus "zone_max_gap". Unknown keys are
        logged and ignored.
        """
        settings = cls()
        if not values:
            return settings

        groups = {
            'peaks': {f.name for f in fields(PeakSettings)},
            'recovery': {f.name for f in fields(RecoverySettings)},
            'charts': {f.name for f in fields(ChartSettings)},
        }
        updates: Dict[str, Dict[str, Any]] = {name: {} for name in groups}
        zone_max_gap = settings.zone_max_gap

        for raw_key, value in values.items():
            key = str(raw_key)
            if key == 'zone_max_gap':
                zone_max_gap = None if value is None else float(value)
                continue

            group, _, name = key.rpartition('.')
            targets = [group] if group else [g for g, names in groups.items() if name in names]
            targets = [g for g in targets if g in groups and name in groups[g]]
            if not targets:
                logger.warning("Ignoring unknown analysis setting %r", key)
                continue
            for target in targets:
                default = getattr(getattr(settings, target), name)
                updates[target][name] = _coerce_setting(default, value)

        return cls(
            peaks=replace(settings.peaks, **updates['peaks']),
            recovery=replace(settings.recovery, **updates['recovery']),
            charts=replace(settings.charts, **updates['charts']),
            zone_max_gap=zone_max_gap,
        )


@dataclass(frozen=True)
class ActivityAnalysis:
    summary: ActivitySummary
    zone_tally: Dict[str, float]
    zone_stats: List[ZoneStats]
    elevation_chart: List[ElevationPoint]
    pace_chart: List[PacePoint]
    peaks: List[PeakCandidate]
    recoveries: List[RecoveryRecord]
    peak_profile: List[ProfilePoint] = field(default_factory=list)
    hr_timeline: List[TimelinePoint] = field(default_factory=list)
    zone_segments: List[ZoneSegment] = field(default_factory=list)

    def to_payload(self) -> Dict[str, Any]:
        """
        JSON-ready dict for the renderer.

        {
          'v': ANALYSIS_PAYLOAD_VERSION,
          'summary': {...},
          'zones': {'Zone 1': seconds, ...},
          'zone_stats': [{...}, ...],
          'elevation_chart': [{...}, ...],
          'pace_chart': [{...}, ...],
          'recoveries': [{'peak': {...}, 'recovery_at_60s': int|None, ..., 'quality_60s': str|None, ...}],
          'peak_profile': [{'distance': m, 'altitude': m}, ...],
          'hr_timeline': [{...}, ...],
          'zone_segments': [{'zone': str|None, 'points': [{...}, ...]}, ...],
        }
        """
        recoveries = []
        for record in self.recoveries:
            entry = asdict(record)
            for offset, value in record.recoveries().items():
                entry[f'quality_{offset}s'] = classify_recovery(value)
            recoveries.append(entry)

        zone_stats = []
        for stats in self.zone_stats:
            entry = asdict(stats)
            entry['has_data'] = stats.has_data
            zone_stats.append(entry)

        return {
            'v': ANALYSIS_PAYLOAD_VERSION,
            'summary': asdict(self.summary),
            'zones': {zone: self.zone_tally.get(zone, 0.0) for zone in HR_ZONE_ORDER},
            'zone_stats': zone_stats,
            'elevation_chart': [asdict(p) for p in self.elevation_chart],
            'pace_chart': [asdict(p) for p in self.pace_chart],
            'recoveries': recoveries,
            'peak_profile': [asdict(p) for p in self.peak_profile],
            'hr_timeline': [asdict(p) for p in self.hr_timeline],
            'zone_segments': [asdict(s) for s in self.zone_segments],
        }


class ActivityAnalyzer:
    """Derives training features from one activity's samples."""

    def __init__(self, settings: Optional[AnalysisSettings] = None, progress_callback=None):
        """
        Initialize analyzer.

        Args:
            settings: Thresholds and chart sizes; defaults from constants.py
            progress_callback: Optional function(done, total) for analyze_many
        """
        self.settings = settings or AnalysisSettings()
        self.progress_callback = progress_callback

    def analyze(self, data: SeriesLike) -> ActivityAnalysis:
        """
        Analyze a single activity.

        Args:
            data: SampleSeries, Sample objects, or importer record dicts

        Returns:
            ActivityAnalysis; sparse or empty input yields empty sections
            rather than an error.
        """
        series = as_series(data)
        settings = self.settings

        zone_tally = compute_zone_tally(series, max_gap=settings.zone_max_gap)
        peaks = detect_hill_peaks(series, settings.peaks)
        hr_timeline = build_hr_timeline(series, settings.charts.timeline_points)
        analysis = ActivityAnalysis(
            summary=summarize_activity(series),
            zone_tally=zone_tally,
            zone_stats=compute_zone_stats(series, zone_tally),
            elevation_chart=build_elevation_chart(series, settings.charts),
            pace_chart=build_pace_chart(series, settings.charts),
            peaks=peaks,
            recoveries=analyze_recovery(series, peaks, settings.recovery),
            peak_profile=build_peak_profile(series, settings.charts.profile_points),
            hr_timeline=hr_timeline,
            zone_segments=group_zone_segments(hr_timeline),
        )

        logger.debug(
            "Analyzed %d samples: %d peaks, %d recovery records",
            len(series), len(peaks), len(analysis.recoveries),
        )
        return analysis

    def analyze_many(self, activities: Iterable[SeriesLike]) -> List[ActivityAnalysis]:
        """Analyze several independent activities in order."""
        items = list(activities)
        total = len(items)
        results = []
        for i, data in enumerate(items):
            results.append(self.analyze(data))
            if self.progress_callback:
                self.progress_callback(i + 1, total)
        return results


def analyze_activity(data: SeriesLike, settings: Optional[AnalysisSettings] = None) -> ActivityAnalysis:
    """Public wrapper: analyze one activity with the given (or default) settings."""
    return ActivityAnalyzer(settings).analyze(data)
