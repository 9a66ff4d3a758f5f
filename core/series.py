"""Sample and SampleSeries: the immutable input shared by every analysis component."""

from __future__ import annotations

import logging
import math
from collections import abc
from dataclasses import dataclass, fields, replace
from typing import Any, Callable, Dict, Iterable, Iterator, List, Mapping, Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd

from hr_zones import HR_ZONE_ORDER, ZoneClassifier, assign_zones, is_zone_label


logger = logging.getLogger(__name__)


class SeriesValidationError(ValueError):
    """Raised when a sample sequence breaks the input contract."""

    def __init__(self, message: str, index: Optional[int] = None):
        super().__init__(message)
        self.index = index


@dataclass(frozen=True)
class Sample:
    """One recorded instant. Optional fields use None for "absent", never 0."""

    elapsed_time: float
    heart_rate: Optional[int] = None
    altitude: Optional[float] = None
    speed: Optional[float] = None
    distance: Optional[float] = None
    temperature: Optional[float] = None
    position: Optional[Tuple[float, float]] = None
    zone: Optional[str] = None

    @property
    def has_altitude_and_hr(self) -> bool:
        return self.altitude is not None and self.heart_rate is not None


SAMPLE_FIELDS: Tuple[str, ...] = tuple(f.name for f in fields(Sample))

# Importer payloads arrive in either snake_case or camelCase.
_RECORD_ALIASES: Dict[str, Tuple[str, ...]] = {
    'elapsed_time': ('elapsed_time', 'elapsedTime'),
    'heart_rate': ('heart_rate', 'heartRate', 'hr'),
    'altitude': ('altitude', 'enhanced_altitude'),
    'speed': ('speed', 'enhanced_speed'),
    'distance': ('distance',),
    'temperature': ('temperature',),
    'zone': ('zone',),
}


def _as_float(value) -> Optional[float]:
    if value is None:
        return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(result):
        return None
    return result


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves upwards (round() would go to even)."""
    return int(math.floor(value + 0.5))


def _as_hr(value) -> Optional[int]:
    result = _as_float(value)
    if result is None:
        return None
    return round_half_up(result)


def _as_zone(value) -> Optional[str]:
    if value is None or value == '':
        return None
    if isinstance(value, float) and math.isnan(value):
        return None
    return value


def _as_position(value) -> Optional[Tuple[float, float]]:
    """(lat, lon) pair, or None unless both coordinates are usable numbers."""
    if value is None or isinstance(value, str):
        return None
    try:
        lat, lon = value
    except (TypeError, ValueError):
        return None
    lat, lon = _as_float(lat), _as_float(lon)
    if lat is None or lon is None:
        return None
    return (lat, lon)


def _pick(record: Mapping[str, Any], key: str):
    for alias in _RECORD_ALIASES[key]:
        if alias in record:
            return record[alias]
    return None


def _position_from_record(record: Mapping[str, Any]) -> Optional[Tuple[float, float]]:
    position = record.get('position')
    if isinstance(position, (list, tuple)) and len(position) == 2:
        return _as_position(position)
    return _as_position((
        record.get('position_lat', record.get('positionLat')),
        record.get('position_long', record.get('positionLong')),
    ))


class SampleSeries(abc.Sequence):
    """
    Ordered, immutable sequence of samples from one activity.

    elapsed_time must be non-decreasing; ties are allowed (sub-second
    duplicate records). The check runs once at construction; pass
    validate=False for input that has already been checked, e.g. a
    sub-sequence of another series.
    """

    __slots__ = ('_samples',)

    def __init__(self, samples: Iterable[Sample] = (), validate: bool = True):
        self._samples: Tuple[Sample, ...] = tuple(samples)
        if validate:
            self._validate()

    # ── construction ─────────────────────────────────────────────────────────

    @classmethod
    def from_records(cls, records: Iterable[Mapping[str, Any]], validate: bool = True) -> 'SampleSeries':
        """Build a series from importer dicts (snake_case or camelCase keys)."""
        samples = []
        for i, record in enumerate(records):
            elapsed = _as_float(_pick(record, 'elapsed_time'))
            if elapsed is None:
                raise SeriesValidationError(f"Record {i} has no usable elapsed time", index=i)
            samples.append(Sample(
                elapsed_time=elapsed,
                heart_rate=_as_hr(_pick(record, 'heart_rate')),
                altitude=_as_float(_pick(record, 'altitude')),
                speed=_as_float(_pick(record, 'speed')),
                distance=_as_float(_pick(record, 'distance')),
                temperature=_as_float(_pick(record, 'temperature')),
                position=_position_from_record(record),
                zone=_as_zone(_pick(record, 'zone')),
            ))
        logger.debug("Built series of %d samples from importer records", len(samples))
        return cls(samples, validate=validate)

    @classmethod
    def from_streams(
        cls,
        elapsed_time: Sequence[float],
        heart_rate: Optional[Sequence] = None,
        altitude: Optional[Sequence] = None,
        speed: Optional[Sequence] = None,
        distance: Optional[Sequence] = None,
        temperature: Optional[Sequence] = None,
        positions: Optional[Sequence] = None,
        zones: Optional[Sequence] = None,
        zone_classifier: Optional[ZoneClassifier] = None,
        zone_thresholds: Optional[Mapping[str, float]] = None,
        validate: bool = True,
    ) -> 'SampleSeries':
        """
        Build a series from aligned per-field streams.

        Streams shorter than elapsed_time are padded with absent values.
        When zones is omitted and a zone_classifier is given, each sample is
        labelled by calling it with the sample's heart rate and the thresholds.
        """
        elapsed_values = list(elapsed_time)
        n = len(elapsed_values)

        def _stream(values):
            # numpy arrays and pandas Series have no single truth value
            values = [] if values is None else list(values)
            return values[:n] + [None] * max(0, n - len(values))

        hr_values = [_as_hr(v) for v in _stream(heart_rate)]
        if zones is None and zone_classifier is not None:
            zone_values = assign_zones(hr_values, zone_thresholds, zone_classifier)
        else:
            zone_values = _stream(zones)

        altitude_values = _stream(altitude)
        speed_values = _stream(speed)
        distance_values = _stream(distance)
        temperature_values = _stream(temperature)
        position_values = _stream(positions)

        samples = []
        for i in range(n):
            elapsed = _as_float(elapsed_values[i])
            if elapsed is None:
                raise SeriesValidationError(f"Sample {i} has no usable elapsed time", index=i)
            samples.append(Sample(
                elapsed_time=elapsed,
                heart_rate=hr_values[i],
                altitude=_as_float(altitude_values[i]),
                speed=_as_float(speed_values[i]),
                distance=_as_float(distance_values[i]),
                temperature=_as_float(temperature_values[i]),
                position=_as_position(position_values[i]),
                zone=_as_zone(zone_values[i]),
            ))
        return cls(samples, validate=validate)

    def _validate(self) -> None:
        previous = None
        for i, sample in enumerate(self._samples):
            t = sample.elapsed_time
            if t is None or not math.isfinite(t):
                raise SeriesValidationError(f"Sample {i} has a non-finite elapsed time", index=i)
            if previous is not None and t < previous:
                raise SeriesValidationError(
                    f"elapsed_time decreases at sample {i} ({t} < {previous})",
                    index=i,
                )
            if sample.zone is not None and not is_zone_label(sample.zone):
                raise SeriesValidationError(
                    f"Sample {i} has unknown zone label {sample.zone!r}",
                    index=i,
                )
            previous = t

    # ── sequence protocol ────────────────────────────────────────────────────

    def __len__(self) -> int:
        return len(self._samples)

    def __iter__(self) -> Iterator[Sample]:
        return iter(self._samples)

    def __getitem__(self, index: Union[int, slice]):
        if isinstance(index, slice):
            return SampleSeries(self._samples[index], validate=False)
        return self._samples[index]

    def __eq__(self, other) -> bool:
        if isinstance(other, SampleSeries):
            return self._samples == other._samples
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._samples)

    def __repr__(self) -> str:
        return f"SampleSeries(n={len(self._samples)}, duration={self.duration:.1f}s)"

    # ── views ────────────────────────────────────────────────────────────────

    @property
    def samples(self) -> Tuple[Sample, ...]:
        return self._samples

    @property
    def duration(self) -> float:
        if len(self._samples) < 2:
            return 0.0
        return self._samples[-1].elapsed_time - self._samples[0].elapsed_time

    def elapsed_times(self) -> List[float]:
        return [s.elapsed_time for s in self._samples]

    def field_values(self, name: str) -> List[Any]:
        if name not in SAMPLE_FIELDS:
            raise KeyError(f"Unknown sample field: {name}")
        return [getattr(s, name) for s in self._samples]

    def filter(self, predicate: Callable[[Sample], bool]) -> 'SampleSeries':
        return SampleSeries((s for s in self._samples if predicate(s)), validate=False)

    def take(self, indices: Iterable[int]) -> 'SampleSeries':
        return SampleSeries((self._samples[i] for i in indices), validate=False)

    def with_present(self, *names: str) -> 'SampleSeries':
        """Samples where every named field is present."""
        for name in names:
            if name not in SAMPLE_FIELDS:
                raise KeyError(f"Unknown sample field: {name}")
        return self.filter(lambda s: all(getattr(s, name) is not None for name in names))

    def valid_subset(self) -> 'SampleSeries':
        """Samples with both altitude and heart rate, re-indexed from 0."""
        return self.filter(lambda s: s.has_altitude_and_hr)

    def relabel_zones(
        self,
        classifier: ZoneClassifier,
        thresholds: Optional[Mapping[str, float]] = None,
    ) -> 'SampleSeries':
        """Return a copy whose zone labels come from the given classifier."""
        labels = assign_zones((s.heart_rate for s in self._samples), thresholds, classifier)
        return SampleSeries(
            (replace(s, zone=label) for s, label in zip(self._samples, labels)),
            validate=True,
        )

    def to_frame(self) -> pd.DataFrame:
        """One row per sample; absent values become NaN (or None for labels)."""
        def _numeric(values) -> np.ndarray:
            return np.array([np.nan if v is None else float(v) for v in values], dtype=float)

        positions = [s.position if s.position is not None else (None, None) for s in self._samples]
        df = pd.DataFrame({
            'elapsed_time': _numeric(self.elapsed_times()),
            'heart_rate': _numeric(self.field_values('heart_rate')),
            'altitude': _numeric(self.field_values('altitude')),
            'speed': _numeric(self.field_values('speed')),
            'distance': _numeric(self.field_values('distance')),
            'temperature': _numeric(self.field_values('temperature')),
            'position_lat': _numeric(p[0] for p in positions),
            'position_long': _numeric(p[1] for p in positions),
        })
        df['zone'] = pd.Categorical(
            self.field_values('zone'),
            categories=list(HR_ZONE_ORDER),
            ordered=True,
        )
        return df


SeriesLike = Union[SampleSeries, Sequence[Sample], Sequence[Mapping[str, Any]]]


def as_series(data: SeriesLike) -> SampleSeries:
    """Coerce samples or importer records into a validated SampleSeries."""
    if isinstance(data, SampleSeries):
        return data
    items = list(data or [])
    if not items:
        return SampleSeries()
    if all(isinstance(item, Sample) for item in items):
        return SampleSeries(items)
    if all(isinstance(item, Mapping) for item in items):
        return SampleSeries.from_records(items)
    raise TypeError("Expected a SampleSeries, Sample objects, or record mappings")
