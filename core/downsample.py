"""Fixed-stride reduction of sample sequences for display-scale chart output."""

from __future__ import annotations

import logging
import math
from typing import List, Sequence, TypeVar

from core.series import SampleSeries


logger = logging.getLogger(__name__)

T = TypeVar('T')


def downsample_stride(sample_count: int, max_points: int) -> int:
    """Return the stride ceil(n / M), never below 1."""
    if max_points < 1:
        raise ValueError(f"max_points must be at least 1, got {max_points}")
    if sample_count <= 0:
        return 1
    return max(1, int(math.ceil(sample_count / max_points)))


def downsample_indices(sample_count: int, max_points: int) -> range:
    """Indices 0, s, 2s, ... kept by downsample()."""
    stride = downsample_stride(sample_count, max_points)
    return range(0, max(0, sample_count), stride)


def downsample(items: Sequence[T], max_points: int):
    """
    Keep every s-th item, s = ceil(n / max_points), starting with the first.

    Values are copied through unchanged (no averaging), so extremes between
    kept indices are lost. Treat the result as a visualization aid only.
    A SampleSeries comes back as a SampleSeries; other sequences as lists.
    """
    n = len(items)
    stride = downsample_stride(n, max_points)
    if stride == 1:
        return items if isinstance(items, SampleSeries) else list(items)

    logger.debug("Downsampling %d points to <= %d with stride %d", n, max_points, stride)
    if isinstance(items, SampleSeries):
        return items.take(range(0, n, stride))
    kept: List[T] = [items[i] for i in range(0, n, stride)]
    return kept
