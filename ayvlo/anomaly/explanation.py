"""
Explanation generation for ensemble verdicts.

Derives the expected range, deviation and a templated reason from the same
history the detectors saw. Output is a pure function of the inputs: no
randomness, no I/O, identical text for identical inputs.
"""

from __future__ import annotations

from math import isfinite
from typing import Sequence

from .schema import Explanation
from .statistical import mean_std
from .timeseries import describe_seasonality


def build_reason(value: float, mean: float, deviation: float, is_anomaly: bool) -> str:
    if not is_anomaly:
        return f"Value {value:.2f} is within normal range."

    reason = f"Value {value:.2f} is significantly different from historical patterns."
    if value > mean:
        reason += f" It is {abs(deviation):.1f} standard deviations above the mean."
    else:
        reason += f" It is {abs(deviation):.1f} standard deviations below the mean."
    return reason


def build_historical_context(data: Sequence[float], mean: float, std: float) -> str:
    if not data:
        return "No finite historical data points."
    return (
        f"Based on {len(data)} historical data points. "
        f"Mean: {mean:.2f}, StdDev: {std:.2f}, "
        f"Range: [{min(data):.2f}, {max(data):.2f}]"
    )


def generate_explanation(
    value: float,
    historical: Sequence[float],
    is_anomaly: bool,
    score: float,
    seasonality_periods: Sequence[int] = (),
) -> Explanation:
    """
    Build the Explanation for a verdict.

    Args:
        value: scored value
        historical: history the detectors saw
        is_anomaly: ensemble verdict
        score: ensemble score (kept for callers that template on it)
        seasonality_periods: candidate periods for the seasonal summary

    Notes:
        - Statistics use the population standard deviation.
        - expected_range is [mean - 2 std, mean + 2 std], or the observed
          [min, max] when that band is too wide to represent.
        - Non-finite history values are ignored; a non-finite value has deviation 0.
    """

    data = [x for x in historical if isfinite(x)]
    mean, std = mean_std(data)

    deviation = (value - mean) / std if std > 0 and isfinite(value) else 0.0
    if not isfinite(deviation):
        deviation = 0.0

    expected_range = (mean - 2 * std, mean + 2 * std)
    if not (isfinite(expected_range[0]) and isfinite(expected_range[1])):
        expected_range = (min(data), max(data))

    return Explanation(
        reason=build_reason(value, mean, deviation, is_anomaly),
        expected_range=expected_range,
        actual_value=value,
        historical_context=build_historical_context(data, mean, std),
        seasonal_pattern=describe_seasonality(data, seasonality_periods),
        deviation=abs(deviation),
    )
