"""
Ayvlo detection core: streaming multi-algorithm anomaly detection.
"""

from .anomaly import AnomalyEngine, AnomalyResult, DataPoint, detect
from .core import Config, DetectorConfig

__all__ = [
    "AnomalyEngine",
    "AnomalyResult",
    "Config",
    "DataPoint",
    "DetectorConfig",
    "detect",
]

__version__ = "1.0.0"
