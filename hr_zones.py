"""Shared heart-rate zone labels, thresholds, and the default zone classifier."""

from __future__ import annotations

from typing import Callable, Dict, Iterable, List, Mapping, Optional, Tuple

DEFAULT_MAX_HR = 185.0

HR_ZONE_ORDER: Tuple[str, ...] = (
    'Zone 1',
    'Zone 2',
    'Zone 3',
    'Zone 4',
    'Zone 5',
)

HR_ZONE_NAMES: Dict[str, str] = {
    'Zone 1': 'Recovery',
    'Zone 2': 'Aerobic',
    'Zone 3': 'Tempo',
    'Zone 4': 'Threshold',
    'Zone 5': 'VO2max',
}

# Inclusive upper bounds in bpm for Zones 1-4; anything above is Zone 5.
DEFAULT_ZONE_THRESHOLDS: Dict[str, float] = {
    'Zone 1': 116.0,
    'Zone 2': 136.0,
    'Zone 3': 155.0,
    'Zone 4': 175.0,
}

ZoneClassifier = Callable[[Optional[float], Mapping[str, float]], Optional[str]]


def is_zone_label(value) -> bool:
    """Return True when value is one of the five zone labels."""
    return value in HR_ZONE_ORDER


def normalize_max_hr(max_hr, default: float = DEFAULT_MAX_HR) -> float:
    """Return a valid max-HR value."""
    try:
        value = float(max_hr or 0)
    except (TypeError, ValueError):
        value = 0.0
    if value <= 0:
        return float(default)
    return value


def get_zone_thresholds(max_hr) -> Dict[str, float]:
    """Return inclusive upper bounds for Zones 1-4 as a share of max HR."""
    max_hr_value = normalize_max_hr(max_hr)
    return {
        'Zone 1': max_hr_value * 0.60,
        'Zone 2': max_hr_value * 0.70,
        'Zone 3': max_hr_value * 0.80,
        'Zone 4': max_hr_value * 0.90,
    }


def classify_hr_zone(hr_value, thresholds: Optional[Mapping[str, float]] = None) -> Optional[str]:
    """
    Classify a heart-rate value into one of 5 zones.

    Missing or non-positive readings get no zone at all, so the zone tally
    does not book their time anywhere.
    """
    if hr_value is None:
        return None
    try:
        hr = float(hr_value)
    except (TypeError, ValueError):
        return None
    if hr <= 0:
        return None

    bounds = thresholds if thresholds is not None else DEFAULT_ZONE_THRESHOLDS
    for zone in HR_ZONE_ORDER[:-1]:
        if hr <= float(bounds[zone]):
            return zone
    return HR_ZONE_ORDER[-1]


def assign_zones(
    heart_rates: Iterable,
    thresholds: Optional[Mapping[str, float]] = None,
    classifier: Optional[ZoneClassifier] = None,
) -> List[Optional[str]]:
    """Label every heart-rate reading with the given classifier."""
    classify = classifier or classify_hr_zone
    bounds = thresholds if thresholds is not None else DEFAULT_ZONE_THRESHOLDS
    return [classify(hr, bounds) for hr in heart_rates]
