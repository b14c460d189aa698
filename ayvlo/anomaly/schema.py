"""
Schema definitions for ensemble anomaly detection.

All results are deterministic (apart from the isolation sub-score) and
explainable. Field names are snake_case in Python and camelCase on the wire:
use AnomalyResult.to_payload() for the external representation.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class Severity(str, Enum):
    """Severity levels for ensemble verdicts."""

    INFO = "info"
    WARNING = "warning"
    CRITICAL = "critical"


class _ResultModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class DataPoint(BaseModel):
    """
    A single ingested metric reading.

    Fields:
    - timestamp: when the reading was taken
    - value: the reading
    - metric: metric name
    - dimensions: optional free-form labels
    """

    model_config = ConfigDict(frozen=True)

    timestamp: datetime
    value: float
    metric: str = Field(..., min_length=1, max_length=256)
    dimensions: Optional[Dict[str, Any]] = None


class DetectorOutcome(BaseModel):
    """
    Raw output of a single detector function.

    Fields:
    - is_anomaly: detector-local verdict
    - score: normalized score in [0, 1]
    - deviation: detector-specific magnitude (z, modified z, raw LOF ratio...)
    - expected_range: bounds reported by range-based detectors (IQR)
    """

    is_anomaly: bool = False
    score: float = Field(0.0, ge=0.0, le=1.0)
    deviation: float = 0.0
    expected_range: Optional[Tuple[float, float]] = None


class AlgorithmResult(_ResultModel):
    """
    Per-detector entry in an ensemble verdict.

    contribution is 0 until the ensemble has aggregated the results.
    """

    name: str
    score: float = Field(ge=0.0, le=1.0)
    is_anomaly: bool
    contribution: float = 0.0
    execution_time_ms: float = Field(0.0, ge=0.0)


class Explanation(_ResultModel):
    """
    Human-interpretable context for a verdict.

    Fields:
    - reason: templated sentence
    - expected_range: [mean - 2 std, mean + 2 std] of the history
    - actual_value: the scored value
    - historical_context: count, mean, std, min, max summary
    - seasonal_pattern: dominant seasonal profile summary, if one was found
    - deviation: absolute standard deviations from the mean
    """

    reason: str
    expected_range: Tuple[float, float]
    actual_value: float
    historical_context: str
    seasonal_pattern: Optional[str] = None
    deviation: float = Field(0.0, ge=0.0)


class ResultMetadata(_ResultModel):
    processing_time_ms: float = Field(ge=0.0)
    data_points_analyzed: int = Field(ge=0)
    algorithm: str
    model_version: str


class AnomalyResult(_ResultModel):
    """
    Ensemble verdict for one data point.

    Fields:
    - is_anomaly: weighted score above the sensitivity threshold
    - confidence: agreement-adjusted certainty in [0, 1]
    - severity: info / warning / critical
    - score: weighted ensemble score in [0, 1]
    - algorithms: detector results in resolved algorithm order
    - explanation: see Explanation
    - metadata: timing and provenance
    """

    is_anomaly: bool
    confidence: float = Field(ge=0.0, le=1.0)
    severity: Severity
    score: float = Field(ge=0.0, le=1.0)
    algorithms: List[AlgorithmResult] = Field(default_factory=list)
    explanation: Explanation
    metadata: ResultMetadata

    def to_payload(self) -> Dict[str, Any]:
        """Return the camelCase JSON-compatible representation."""

        return self.model_dump(mode="json", by_alias=True)
