"""
Unit tests for configuration and logging setup.
"""

import logging

import pytest
from pydantic import ValidationError

from ayvlo.core.config import Config, DetectorConfig, DetectorThresholds
from ayvlo.core.logging_config import setup_logging


def test_detector_config_defaults():
    cfg = DetectorConfig()
    assert cfg.algorithms == ("ensemble",)
    assert cfg.sensitivity == "medium"
    assert cfg.context_window == 168
    assert cfg.seasonality_periods == (24, 168)
    assert cfg.ensemble_weighting == "adaptive"
    assert cfg.min_data_points == 30
    assert cfg.num_trees == 100
    assert cfg.random_seed is None


def test_default_thresholds_match_shipped_heuristics():
    thresholds = DetectorThresholds()
    assert thresholds.mad == 3.5
    assert thresholds.iqr_multiplier == 1.5
    assert thresholds.isolation == 0.6
    assert thresholds.lof == 1.5
    assert thresholds.gesd_critical == 3.0
    assert thresholds.ensemble == {"low": 0.7, "medium": 0.6, "high": 0.5, "adaptive": 0.6}


def test_detector_config_is_frozen():
    cfg = DetectorConfig()
    with pytest.raises(ValidationError):
        cfg.min_data_points = 5


def test_single_algorithm_string_is_accepted():
    assert DetectorConfig(algorithms="LOF").algorithms == ("lof",)


def test_invalid_values_are_rejected():
    with pytest.raises(ValidationError):
        DetectorConfig(sensitivity="extreme")
    with pytest.raises(ValidationError):
        DetectorConfig(ensemble_weighting="random")
    with pytest.raises(ValidationError):
        DetectorConfig(min_data_points=0)
    with pytest.raises(ValidationError):
        DetectorConfig(seasonality_periods=(1,))


def test_missing_sensitivity_threshold_is_rejected():
    thresholds = DetectorThresholds(ensemble={"medium": 0.6})
    with pytest.raises(ValidationError):
        DetectorConfig(sensitivity="high", thresholds=thresholds)


@pytest.mark.parametrize(
    "overrides",
    [
        {"zscore": {"medium": 0.0}},
        {"zscore": {"medium": -3.0}},
        {"ensemble": {"medium": 0.0}},
        {"ensemble": {"medium": 1.5}},
    ],
)
def test_non_positive_sensitivity_thresholds_are_rejected(overrides):
    with pytest.raises(ValidationError):
        DetectorThresholds(**overrides)


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("AYVLO_LOG_LEVEL", "DEBUG")
    monkeypatch.setenv("AYVLO_DETECTOR__MIN_DATA_POINTS", "12")

    settings = Config()
    assert settings.log_level == "DEBUG"
    assert settings.detector.min_data_points == 12


def test_setup_logging_console_only():
    logger = setup_logging("ayvlo.test.console", settings=Config(log_level="WARNING"))
    assert logger.level == logging.WARNING
    assert len(logger.handlers) == 1

    # Second call keeps the existing handlers
    assert setup_logging("ayvlo.test.console") is logger
    assert len(logger.handlers) == 1


def test_setup_logging_with_file(tmp_path):
    settings = Config(log_level="INFO", logs_dir=tmp_path / "logs")
    logger = setup_logging("ayvlo.test.file", settings=settings)

    logger.info("hello")
    for handler in logger.handlers:
        handler.flush()

    assert (tmp_path / "logs" / "ayvlo.test.file.log").exists()
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)


def test_package_logger_is_configured_on_import():
    from ayvlo.core import logger

    assert logger is logging.getLogger("ayvlo")
    assert logger.handlers
