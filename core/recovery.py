"""Heart-rate recovery at fixed offsets after each detected hill summit."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from constants import (
    RECOVERY_GOOD_BPM,
    RECOVERY_MODERATE_BPM,
    RECOVERY_OFFSETS_SEC,
    RECOVERY_TOLERANCE_SEC,
)
from core.peaks import PeakCandidate, PeakSettings, detect_hill_peaks
from core.series import Sample, SampleSeries


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RecoverySettings:
    tolerance: float = RECOVERY_TOLERANCE_SEC


@dataclass(frozen=True)
class RecoveryRecord:
    """
    HR drop after one summit. A recovery value is peak HR minus the matched
    HR (positive = heart rate fell), or None when no sample was close enough.
    """

    peak: PeakCandidate
    recovery_at_60s: Optional[int]
    recovery_at_120s: Optional[int]
    recovery_at_300s: Optional[int]
    hr_at_60s: Optional[int] = None
    hr_at_120s: Optional[int] = None
    hr_at_300s: Optional[int] = None

    @property
    def has_data(self) -> bool:
        return any(v is not None for v in (self.recovery_at_60s, self.recovery_at_120s, self.recovery_at_300s))

    def recoveries(self) -> Dict[int, Optional[int]]:
        return {
            60: self.recovery_at_60s,
            120: self.recovery_at_120s,
            300: self.recovery_at_300s,
        }


def find_sample_near(
    valid: SampleSeries,
    start_index: int,
    target_time: float,
    tolerance: float = RECOVERY_TOLERANCE_SEC,
) -> Optional[Sample]:
    """
    Closest sample to target_time, scanning forward from start_index only.

    The scan stops once it is past the target and moving away from it. The
    match is discarded when it is more than tolerance seconds off.
    """
    closest: Optional[Sample] = None
    closest_diff = float('inf')

    for i in range(start_index, len(valid)):
        sample = valid[i]
        diff = abs(sample.elapsed_time - target_time)
        if diff < closest_diff:
            closest_diff = diff
            closest = sample
        if sample.elapsed_time > target_time and diff > closest_diff:
            break

    if closest is None or closest_diff > tolerance or closest.heart_rate is None:
        return None
    return closest


def analyze_recovery(
    series: SampleSeries,
    peaks: Sequence[PeakCandidate],
    settings: Optional[RecoverySettings] = None,
) -> List[RecoveryRecord]:
    """
    Build recovery records for the given peaks.

    peaks must come from detect_hill_peaks on the same series so their
    indices line up with its valid subset. Peaks with no match at any offset
    are dropped.
    """
    settings = settings or RecoverySettings()
    if not peaks:
        return []

    valid = series.valid_subset()
    records = []
    for peak in peaks:
        peak_hr = int(peak.heart_rate)
        matched: Dict[int, Optional[int]] = {}
        for offset in RECOVERY_OFFSETS_SEC:
            sample = find_sample_near(valid, peak.index, peak.elapsed_time + offset, settings.tolerance)
            matched[offset] = int(sample.heart_rate) if sample is not None else None

        def _drop(offset: int) -> Optional[int]:
            hr = matched[offset]
            return peak_hr - hr if hr is not None else None

        record = RecoveryRecord(
            peak=peak,
            recovery_at_60s=_drop(60),
            recovery_at_120s=_drop(120),
            recovery_at_300s=_drop(300),
            hr_at_60s=matched[60],
            hr_at_120s=matched[120],
            hr_at_300s=matched[300],
        )
        if record.has_data:
            records.append(record)

    dropped = len(peaks) - len(records)
    if dropped:
        logger.debug("Dropped %d peaks with no recovery samples in range", dropped)
    return records


def hill_recovery(
    series: SampleSeries,
    peak_settings: Optional[PeakSettings] = None,
    recovery_settings: Optional[RecoverySettings] = None,
) -> List[RecoveryRecord]:
    """Detect hill peaks and compute recovery for each in one call."""
    peaks = detect_hill_peaks(series, peak_settings)
    return analyze_recovery(series, peaks, recovery_settings)


def classify_recovery(value: Optional[int]) -> Optional[str]:
    """Bucket a recovery value: good (>= 20 bpm), moderate (>= 10), poor."""
    if value is None:
        return None
    if value >= RECOVERY_GOOD_BPM:
        return 'good'
    if value >= RECOVERY_MODERATE_BPM:
        return 'moderate'
    return 'poor'
