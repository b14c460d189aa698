"""
Statistical detectors for a single value against its history.

Implements explainable methods:
- Z-score detection
- Median Absolute Deviation (modified z-score)
- Interquartile range fences
- GESD outlier listing (batch, not part of the ensemble vote)

All functions are pure. Degenerate dispersion and non-finite input produce a
non-anomaly outcome with score 0 instead of raising.
"""

from __future__ import annotations

from math import isfinite, sqrt
from typing import Sequence, Set, Tuple

from .schema import DetectorOutcome

# Consistency constant relating MAD to the standard deviation of a normal distribution.
MAD_SCALE = 0.6745


def all_finite(value: float, data: Sequence[float]) -> bool:
    return isfinite(value) and all(isfinite(x) for x in data)


def clamp_score(score: float) -> float:
    if not isfinite(score):
        return 0.0
    return min(max(score, 0.0), 1.0)


def mean_std(data: Sequence[float]) -> Tuple[float, float]:
    """
    Return the mean and population standard deviation of data.
    """

    n = len(data)
    if n == 0:
        return 0.0, 0.0
    mean = sum(data) / n
    # Products saturate to inf on overflow where ** would raise.
    variance = sum((x - mean) * (x - mean) for x in data) / n
    return mean, sqrt(variance)


def median(values: Sequence[float]) -> float:
    ordered = sorted(values)
    mid = len(ordered) // 2
    if len(ordered) % 2 == 0:
        return (ordered[mid - 1] + ordered[mid]) / 2
    return ordered[mid]


def percentile(ordered: Sequence[float], p: float) -> float:
    """
    Linear-interpolated percentile of an already sorted sequence.

    Args:
        ordered: ascending values
        p: percentile in [0, 100]
    """

    index = (p / 100) * (len(ordered) - 1)
    lower = int(index)
    upper = min(lower + 1, len(ordered) - 1)
    weight = index - lower
    return ordered[lower] * (1 - weight) + ordered[upper] * weight


def zscore(value: float, data: Sequence[float], threshold: float = 3.0) -> DetectorOutcome:
    """
    Z-score detector using the population standard deviation.

    score = min(z / threshold, 1); deviation = z.
    """

    if len(data) < 2 or not all_finite(value, data):
        return DetectorOutcome()

    mean, std = mean_std(data)
    if std == 0 or not isfinite(std):
        return DetectorOutcome()

    z = abs(value - mean) / std
    if not isfinite(z):
        return DetectorOutcome()
    return DetectorOutcome(
        is_anomaly=z > threshold,
        score=clamp_score(z / threshold),
        deviation=z,
    )


def mad(value: float, data: Sequence[float], threshold: float = 3.5) -> DetectorOutcome:
    """
    Median Absolute Deviation detector (modified z-score).

    More robust than the z-score when the history itself contains outliers.
    """

    if len(data) < 2 or not all_finite(value, data):
        return DetectorOutcome()

    center = median(data)
    spread = median([abs(x - center) for x in data])
    if spread == 0:
        return DetectorOutcome()

    modified_z = MAD_SCALE * abs(value - center) / spread
    if not isfinite(modified_z):
        return DetectorOutcome()
    return DetectorOutcome(
        is_anomaly=modified_z > threshold,
        score=clamp_score(modified_z / threshold),
        deviation=modified_z,
    )


def iqr(value: float, data: Sequence[float], multiplier: float = 1.5) -> DetectorOutcome:
    """
    Interquartile range fence detector.

    Requires at least four points. The fences are returned as expected_range;
    score is the distance past the nearest fence in IQR units, capped at 1.
    """

    if len(data) < 4 or not all_finite(value, data):
        return DetectorOutcome(expected_range=(0.0, 0.0))

    ordered = sorted(data)
    q1 = percentile(ordered, 25)
    q3 = percentile(ordered, 75)
    spread = q3 - q1

    lower = q1 - multiplier * spread
    upper = q3 + multiplier * spread
    if spread == 0:
        return DetectorOutcome(expected_range=(lower, upper))

    if value < lower:
        distance = (lower - value) / spread
    elif value > upper:
        distance = (value - upper) / spread
    else:
        distance = 0.0

    return DetectorOutcome(
        is_anomaly=value < lower or value > upper,
        score=clamp_score(distance),
        deviation=distance,
        expected_range=(lower, upper),
    )


def gesd(data: Sequence[float], max_outliers: int = 10, critical_value: float = 3.0) -> Set[float]:
    """
    Generalized Extreme Studentized Deviate outlier listing.

    Repeatedly removes the point furthest from the mean (in standard deviations)
    while that distance exceeds critical_value, stopping after max_outliers
    removals, when fewer than three points remain, or when the spread is zero
    or too large to represent.

    Note: critical_value is a fixed constant, not the t-distribution critical
    value of the textbook test.

    Returns:
        The set of removed values.
    """

    working = [x for x in data if isfinite(x)]
    outliers: Set[float] = set()
    removed = 0

    while removed < max_outliers and len(working) >= 3:
        mean, std = mean_std(working)
        if std == 0 or not isfinite(std):
            break

        max_index = max(range(len(working)), key=lambda i: abs(working[i] - mean))
        max_deviation = abs(working[max_index] - mean) / std
        if max_deviation <= critical_value:
            break

        outliers.add(working.pop(max_index))
        removed += 1

    return outliers
