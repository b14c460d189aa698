"""
Seasonal-trend decomposition (STL-lite).

A lightweight decomposition used to describe seasonal structure in the
history. It is not a point detector and does not vote in the ensemble.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence

FLAT_TOLERANCE = 1e-9


@dataclass(frozen=True)
class Decomposition:
    """
    Result of stl_decompose.

    seasonal holds one entry per phase of the period; residual is aligned with
    the input values.
    """

    period: int
    trend: List[float]
    seasonal: List[float]
    residual: List[float]

    @property
    def amplitude(self) -> float:
        return max(self.seasonal) - min(self.seasonal) if self.seasonal else 0.0

    @property
    def peak_phase(self) -> int:
        return max(range(len(self.seasonal)), key=lambda i: self.seasonal[i])


def moving_average(values: Sequence[float], window: int) -> List[float]:
    """
    Centered moving average; shrinks the window at the edges.
    """

    result: List[float] = []
    half_before = window // 2
    half_after = window - half_before
    for i in range(len(values)):
        start = max(0, i - half_before)
        end = min(len(values), i + half_after)
        chunk = values[start:end]
        result.append(sum(chunk) / len(chunk))
    return result


def stl_decompose(values: Sequence[float], period: int = 24) -> Decomposition:
    """
    Split values into trend, per-phase seasonal profile, and residual.

    - trend: centered moving average with window = period
    - seasonal: mean of the detrended values at each phase (i % period)
    - residual: value - trend - seasonal[phase]
    """

    if period < 2:
        raise ValueError("period must be >= 2")

    trend = moving_average(values, period)
    detrended = [v - t for v, t in zip(values, trend)]

    sums = [0.0] * period
    counts = [0] * period
    for i, d in enumerate(detrended):
        sums[i % period] += d
        counts[i % period] += 1
    seasonal = [s / c if c else 0.0 for s, c in zip(sums, counts)]

    residual = [v - t - seasonal[i % period] for i, (v, t) in enumerate(zip(values, trend))]
    return Decomposition(period=period, trend=trend, seasonal=seasonal, residual=residual)


def describe_seasonality(values: Sequence[float], periods: Sequence[int]) -> Optional[str]:
    """
    Summarize the first period that has at least two full cycles of history.

    Returns None when no period fits or the seasonal profile is flat.
    """

    for period in periods:
        if period < 2 or len(values) < 2 * period:
            continue
        decomposition = stl_decompose(values, period)
        if decomposition.amplitude <= FLAT_TOLERANCE:
            return None
        return (
            f"Seasonal period {period}: amplitude {decomposition.amplitude:.2f}, "
            f"peak at phase {decomposition.peak_phase}"
        )
    return None
