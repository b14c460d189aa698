"""
Ensemble anomaly detection engine.

Scores one DataPoint against its history with every enabled detector, weights
and aggregates the detector scores into a single verdict, and attaches an
explanation. The engine keeps no state between calls beyond its immutable
configuration, so a single instance can serve concurrent callers.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from numbers import Real
from time import perf_counter
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from ayvlo.core.config import DetectorConfig, config as settings
from ayvlo.core.exceptions import ConfigurationError, DataValidationError

from .explanation import generate_explanation
from .ml import isolation_score, lof_score
from .schema import (
    AlgorithmResult,
    AnomalyResult,
    DataPoint,
    DetectorOutcome,
    Explanation,
    ResultMetadata,
    Severity,
)
from .scoring import (
    PerformanceLookup,
    SeverityMapper,
    agreement,
    algorithm_weights,
    confidence_for,
    contributions,
    weighted_score,
)
from .statistical import gesd, iqr, mad, zscore

logger = logging.getLogger(__name__)

MODEL_VERSION = "1.0.0"
ENSEMBLE = "ensemble"
INSUFFICIENT_DATA_REASON = "Insufficient historical data"

# Point detectors in the order "ensemble" runs them.
POINT_DETECTORS: Tuple[str, ...] = ("zscore", "mad", "iqr", "isolation-forest", "lof")
# Recognized names that do not score a single point.
BATCH_ALGORITHMS: Tuple[str, ...] = ("gesd", "stl")
KNOWN_ALGORITHMS = frozenset(POINT_DETECTORS + BATCH_ALGORITHMS + (ENSEMBLE,))

HistoricalSeries = Iterable[Union[float, int, DataPoint]]
Runner = Callable[[float, Sequence[float], random.Random], DetectorOutcome]


def resolve_algorithms(names: Sequence[str]) -> Tuple[str, ...]:
    """
    Resolve configured names into the point detectors to run, in run order.

    "ensemble" expands to every point detector. Otherwise the named detectors
    run in declaration order, duplicates dropped.

    Raises:
        ConfigurationError: if a name is not a known algorithm
    """

    unknown = [name for name in names if name not in KNOWN_ALGORITHMS]
    if unknown:
        raise ConfigurationError(
            f"Unknown algorithm(s) {unknown}. Known algorithms: {sorted(KNOWN_ALGORITHMS)}"
        )

    if ENSEMBLE in names:
        return POINT_DETECTORS

    resolved: List[str] = []
    for name in names:
        if name in BATCH_ALGORITHMS:
            logger.debug("Algorithm %s does not score single points; skipping", name)
            continue
        if name not in resolved:
            resolved.append(name)
    return tuple(resolved)


def extract_values(historical: HistoricalSeries) -> List[float]:
    """
    Coerce a historical series of numbers or DataPoints into floats.

    Raises:
        DataValidationError: if an entry is neither a DataPoint nor a real number
            (strings and booleans are rejected)
    """

    if historical is None:
        raise DataValidationError("Historical series is required")

    values: List[float] = []
    for index, item in enumerate(historical):
        if isinstance(item, DataPoint):
            values.append(item.value)
            continue
        if isinstance(item, bool) or not isinstance(item, Real):
            raise DataValidationError(f"Historical entry {index} is not numeric: {item!r}")
        values.append(float(item))
    return values


def _coerce_data_point(data_point: Union[DataPoint, Mapping[str, Any]]) -> DataPoint:
    if isinstance(data_point, DataPoint):
        return data_point
    if isinstance(data_point, Mapping):
        return DataPoint.model_validate(data_point)
    raise DataValidationError(f"Expected a DataPoint, got {type(data_point).__name__}")


@dataclass
class AnomalyEngine:
    """
    Multi-algorithm ensemble detector.

    Notes:
    - config is read-only; build a new engine to change it.
    - performance supplies historical F1 scores for "performance" weighting.
    - Only the isolation detector is random; pin it with config.random_seed
      or by passing rng to detect().
    """

    config: DetectorConfig = field(default_factory=lambda: settings.detector)
    performance: Optional[PerformanceLookup] = None

    def __post_init__(self) -> None:
        if self.config.num_trees > self.config.max_trees:
            raise ConfigurationError(
                f"num_trees={self.config.num_trees} exceeds max_trees={self.config.max_trees}"
            )
        self._algorithms = resolve_algorithms(self.config.algorithms)
        self._severity_mapper = SeverityMapper(self.config.thresholds)
        self._runners: Dict[str, Runner] = {
            "zscore": self._run_zscore,
            "mad": self._run_mad,
            "iqr": self._run_iqr,
            "isolation-forest": self._run_isolation,
            "lof": self._run_lof,
        }

    @property
    def algorithms(self) -> Tuple[str, ...]:
        return self._algorithms

    def detect(
        self,
        data_point: Union[DataPoint, Mapping[str, Any]],
        historical: HistoricalSeries,
        rng: Optional[random.Random] = None,
    ) -> AnomalyResult:
        """
        Score data_point against historical and return the ensemble verdict.

        Short histories return a non-anomaly result without running detectors.

        Raises:
            DataValidationError: on non-numeric history or history above max_history_points
        """

        started = perf_counter()
        point = _coerce_data_point(data_point)
        values = extract_values(historical)

        if len(values) > self.config.max_history_points:
            raise DataValidationError(
                f"Historical series has {len(values)} points; "
                f"limit is {self.config.max_history_points}"
            )

        if len(values) < self.config.min_data_points:
            logger.debug(
                "Short-circuit for %s: %d points, %d required",
                point.metric,
                len(values),
                self.config.min_data_points,
            )
            return self._insufficient_data_result(point, started)

        rng = rng or random.Random(self.config.random_seed)
        results = [self._run(name, point.value, values, rng) for name in self._algorithms]

        weights = algorithm_weights(results, self.config.ensemble_weighting, self.performance)
        score = weighted_score(results, weights)
        threshold = self._severity_mapper.ensemble_threshold(self.config.sensitivity)
        is_anomaly = bool(results) and score > threshold

        confidence = confidence_for(is_anomaly, agreement(results), score) if results else 0.0
        severity = self._severity_mapper.severity(score, confidence)

        shares = contributions(results, weights)
        algorithms = [
            result.model_copy(update={"contribution": share})
            for result, share in zip(results, shares)
        ]

        explanation = generate_explanation(
            point.value,
            values,
            is_anomaly,
            score,
            seasonality_periods=self.config.seasonality_periods,
        )

        if is_anomaly:
            logger.info(
                "Anomaly on %s: value=%s score=%.3f confidence=%.3f severity=%s",
                point.metric,
                point.value,
                score,
                confidence,
                severity.value,
            )
        else:
            logger.debug("No anomaly on %s: score=%.3f", point.metric, score)

        return AnomalyResult(
            is_anomaly=is_anomaly,
            confidence=confidence,
            severity=severity,
            score=score,
            algorithms=algorithms,
            explanation=explanation,
            metadata=ResultMetadata(
                processing_time_ms=(perf_counter() - started) * 1000,
                data_points_analyzed=len(values),
                algorithm=ENSEMBLE,
                model_version=MODEL_VERSION,
            ),
        )

    def find_outliers(self, historical: HistoricalSeries) -> List[float]:
        """
        Batch outlier listing over a whole series using GESD.

        Returns:
            Removed values, ascending.
        """

        values = extract_values(historical)
        if len(values) > self.config.max_history_points:
            raise DataValidationError(
                f"Historical series has {len(values)} points; "
                f"limit is {self.config.max_history_points}"
            )
        outliers = gesd(
            values,
            max_outliers=self.config.max_outliers,
            critical_value=self.config.thresholds.gesd_critical,
        )
        return sorted(outliers)

    def _run(self, name: str, value: float, values: Sequence[float], rng: random.Random) -> AlgorithmResult:
        started = perf_counter()
        outcome = self._runners[name](value, values, rng)
        return AlgorithmResult(
            name=name,
            score=outcome.score,
            is_anomaly=outcome.is_anomaly,
            execution_time_ms=(perf_counter() - started) * 1000,
        )

    def _run_zscore(self, value: float, values: Sequence[float], rng: random.Random) -> DetectorOutcome:
        threshold = self._severity_mapper.zscore_threshold(self.config.sensitivity)
        return zscore(value, values, threshold=threshold)

    def _run_mad(self, value: float, values: Sequence[float], rng: random.Random) -> DetectorOutcome:
        return mad(value, values, threshold=self.config.thresholds.mad)

    def _run_iqr(self, value: float, values: Sequence[float], rng: random.Random) -> DetectorOutcome:
        return iqr(value, values, multiplier=self.config.thresholds.iqr_multiplier)

    def _run_isolation(self, value: float, values: Sequence[float], rng: random.Random) -> DetectorOutcome:
        return isolation_score(
            value,
            values,
            num_trees=self.config.num_trees,
            threshold=self.config.thresholds.isolation,
            rng=rng,
        )

    def _run_lof(self, value: float, values: Sequence[float], rng: random.Random) -> DetectorOutcome:
        return lof_score(
            value,
            values,
            k=self.config.lof_neighbors,
            threshold=self.config.thresholds.lof,
            epsilon=self.config.thresholds.lof_epsilon,
        )

    def _insufficient_data_result(self, point: DataPoint, started: float) -> AnomalyResult:
        return AnomalyResult(
            is_anomaly=False,
            confidence=0.0,
            severity=Severity.INFO,
            score=0.0,
            algorithms=[],
            explanation=Explanation(
                reason=INSUFFICIENT_DATA_REASON,
                expected_range=(0.0, 0.0),
                actual_value=point.value,
                historical_context=INSUFFICIENT_DATA_REASON,
                deviation=0.0,
            ),
            metadata=ResultMetadata(
                processing_time_ms=(perf_counter() - started) * 1000,
                data_points_analyzed=0,
                algorithm="none",
                model_version=MODEL_VERSION,
            ),
        )


def detect(
    data_point: Union[DataPoint, Mapping[str, Any]],
    historical: HistoricalSeries,
    config: Optional[DetectorConfig] = None,
    *,
    performance: Optional[PerformanceLookup] = None,
    rng: Optional[random.Random] = None,
) -> AnomalyResult:
    """
    One-shot detection with an explicit configuration.

    Equivalent to AnomalyEngine(config, performance).detect(data_point, historical, rng).
    """

    engine = AnomalyEngine(config=config or settings.detector, performance=performance)
    return engine.detect(data_point, historical, rng=rng)
