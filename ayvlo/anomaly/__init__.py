"""
Anomaly module: multi-algorithm ensemble detection.

Implements statistical and approximate ML detectors, weighted ensemble voting,
and explanation of verdicts.
"""

from .engine import AnomalyEngine, detect, resolve_algorithms
from .explanation import generate_explanation
from .ml import expected_isolation_depth, isolation_score, lof_score
from .schema import (
    AlgorithmResult,
    AnomalyResult,
    DataPoint,
    DetectorOutcome,
    Explanation,
    ResultMetadata,
    Severity,
)
from .scoring import PerformanceLookup, SeverityMapper
from .statistical import gesd, iqr, mad, zscore
from .timeseries import Decomposition, stl_decompose

__all__ = [
    "AnomalyEngine",
    "detect",
    "resolve_algorithms",
    "generate_explanation",
    "AlgorithmResult",
    "AnomalyResult",
    "DataPoint",
    "DetectorOutcome",
    "Explanation",
    "ResultMetadata",
    "Severity",
    "PerformanceLookup",
    "SeverityMapper",
    "zscore",
    "mad",
    "iqr",
    "gesd",
    "isolation_score",
    "lof_score",
    "expected_isolation_depth",
    "Decomposition",
    "stl_decompose",
]
