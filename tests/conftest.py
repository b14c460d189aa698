"""
Pytest configuration and shared fixtures.

Provides detector configurations and sample metric histories for unit and
integration tests.
"""

import random
from datetime import datetime, timedelta, timezone
from typing import List

import pandas as pd
import pytest

from ayvlo.anomaly.schema import DataPoint
from ayvlo.core.config import DetectorConfig


@pytest.fixture
def seeded_config() -> DetectorConfig:
    """
    Fixture providing the default ensemble with a pinned isolation detector.
    """
    return DetectorConfig(random_seed=7)


@pytest.fixture
def statistical_config() -> DetectorConfig:
    """
    Fixture providing a deterministic configuration without random detectors.
    """
    return DetectorConfig(algorithms=("zscore", "mad", "iqr"))


@pytest.fixture
def noisy_history() -> List[float]:
    """
    30 points around 100 with +/-2 noise (mean 100, population std sqrt(2)).
    """
    return [100.0, 102.0, 98.0, 101.0, 99.0] * 6


@pytest.fixture
def tight_history() -> List[float]:
    """
    30 points around 50 (values 48..52).
    """
    return [49.0, 51.0, 50.0, 50.0, 48.0, 52.0] * 5


@pytest.fixture
def constant_history() -> List[float]:
    return [100.0] * 30


@pytest.fixture
def gaussian_history() -> List[float]:
    """
    200 reproducible samples from N(10, 1).
    """
    rng = random.Random(1234)
    return [rng.gauss(10.0, 1.0) for _ in range(200)]


@pytest.fixture
def hourly_frame(gaussian_history) -> pd.DataFrame:
    """
    Fixture providing the gaussian history as an hourly pandas DataFrame.

    Mirrors how callers usually hold metric windows before scoring.
    """
    start = datetime(2025, 2, 1, tzinfo=timezone.utc)
    index = pd.date_range(start=start, periods=len(gaussian_history), freq=pd.offsets.Hour())
    return pd.DataFrame({"value": gaussian_history}, index=index)


@pytest.fixture
def history_points(noisy_history) -> List[DataPoint]:
    start = datetime(2025, 2, 6, 10, 0, tzinfo=timezone.utc)
    return [
        DataPoint(timestamp=start + timedelta(hours=i), value=v, metric="checkout.latency_ms")
        for i, v in enumerate(noisy_history)
    ]


def pytest_configure(config):
    """
    Pytest hook for custom configuration.

    Registers custom markers used throughout tests.
    """
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test"
    )
    config.addinivalue_line(
        "markers", "slow: mark test as slow running (deferred CI)"
    )
