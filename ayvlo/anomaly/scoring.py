"""
Ensemble scoring: weights, voting, confidence and severity.

The formulas are fixed heuristics. They are reproduced exactly so verdicts stay
comparable across releases; thresholds come from DetectorThresholds.
"""

from __future__ import annotations

from dataclasses import dataclass
from math import isfinite
from typing import Callable, List, Mapping, Optional, Sequence, Union

from ayvlo.core.config import DetectorThresholds

from .schema import AlgorithmResult, Severity

# Maps an algorithm name to its historical F1 score, or None when unknown.
PerformanceLookup = Union[Mapping[str, float], Callable[[str], Optional[float]]]

CONFIDENCE_WEIGHT_FLOOR = 0.1


def lookup_performance(performance: Optional[PerformanceLookup], name: str) -> float:
    """
    Return the weight for name from an external performance source, defaulting to 1.
    """

    if performance is None:
        return 1.0
    if isinstance(performance, Mapping):
        value = performance.get(name)
    else:
        value = performance(name)
    if value is None:
        return 1.0
    value = float(value)
    if not isfinite(value) or value < 0:
        return 1.0
    return value


def algorithm_weights(
    results: Sequence[AlgorithmResult],
    strategy: str,
    performance: Optional[PerformanceLookup] = None,
) -> List[float]:
    """
    Compute one weight per result.

    - performance: historical F1 per algorithm (1 when unknown)
    - confidence: score + 0.1
    - anything else: equal weights
    """

    if strategy == "performance":
        return [lookup_performance(performance, r.name) for r in results]
    if strategy == "confidence":
        return [r.score + CONFIDENCE_WEIGHT_FLOOR for r in results]
    return [1.0 for _ in results]


def weighted_score(results: Sequence[AlgorithmResult], weights: Sequence[float]) -> float:
    """
    Weight-normalized mean score, clamped to [0, 1]. Zero when nothing ran.
    """

    total_weight = sum(weights)
    if not results or total_weight <= 0:
        return 0.0
    score = sum(r.score * w for r, w in zip(results, weights)) / total_weight
    return min(max(score, 0.0), 1.0)


def agreement(results: Sequence[AlgorithmResult]) -> float:
    if not results:
        return 0.0
    return sum(1 for r in results if r.is_anomaly) / len(results)


def confidence_for(is_anomaly: bool, agreement_ratio: float, score: float) -> float:
    """
    Confidence of a verdict.

    Anomalies: agreement * score. Non-anomalies: (1 - agreement) * (1 - score).
    """

    if is_anomaly:
        value = agreement_ratio * score
    else:
        value = (1 - agreement_ratio) * (1 - score)
    return min(max(value, 0.0), 1.0)


def contributions(results: Sequence[AlgorithmResult], weights: Sequence[float]) -> List[float]:
    """
    Share of each result in the un-normalized weighted score sum.

    All shares are 0 when that sum is 0.
    """

    raw = [r.score * w for r, w in zip(results, weights)]
    total = sum(raw)
    if total <= 0:
        return [0.0 for _ in raw]
    return [part / total for part in raw]


@dataclass
class SeverityMapper:
    """
    Maps ensemble scores to thresholds and severity levels.
    """

    thresholds: DetectorThresholds

    def ensemble_threshold(self, sensitivity: str) -> float:
        return self.thresholds.ensemble[sensitivity]

    def zscore_threshold(self, sensitivity: str) -> float:
        return self.thresholds.zscore[sensitivity]

    def severity(self, score: float, confidence: float) -> Severity:
        combined = score * confidence
        if combined > self.thresholds.severity_critical:
            return Severity.CRITICAL
        if combined > self.thresholds.severity_warning:
            return Severity.WARNING
        return Severity.INFO
