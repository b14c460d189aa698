"""
Core module: Configuration, logging, and exception handling.
"""

from .config import Config, DetectorConfig, DetectorThresholds, config
from .exceptions import (
    AnomalyDetectionError,
    ConfigurationError,
    DataValidationError,
)
from .logging_config import logger, setup_logging

__all__ = [
    "Config",
    "DetectorConfig",
    "DetectorThresholds",
    "config",
    "AnomalyDetectionError",
    "ConfigurationError",
    "DataValidationError",
    "logger",
    "setup_logging",
]
