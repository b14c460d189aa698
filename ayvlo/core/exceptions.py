"""
Custom exceptions for the detection core.

Data conditions (short history, flat series, NaN values) never raise; they
degrade to a non-anomaly verdict. Only programming and schema mistakes surface
through these exceptions.
"""


class AnomalyDetectionError(Exception):
    """Base exception for anomaly detection failures."""
    pass


class DataValidationError(AnomalyDetectionError):
    """Raised when input data has the wrong type or exceeds configured bounds."""
    pass


class ConfigurationError(AnomalyDetectionError):
    """Raised when configuration is invalid, e.g. an unknown algorithm is requested."""
    pass
