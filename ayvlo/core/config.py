"""
Application configuration for the detection core.

Provides environment-aware settings with conservative defaults. All detector
thresholds are configurable to avoid hard-coded "magic numbers"; the defaults
reproduce the heuristics the ensemble has always shipped with.
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

SensitivityLevel = Literal["low", "medium", "high", "adaptive"]
WeightingStrategy = Literal["performance", "confidence", "adaptive"]


class DetectorThresholds(BaseModel):
    """
    Thresholds for the individual detectors and the ensemble vote.

    Rationale:
    - Z-score thresholds scale with sensitivity; a higher sensitivity flags smaller deviations.
    - Ensemble thresholds apply to the weighted score in [0, 1].
    - Severity cut-offs apply to score * confidence.
    """

    model_config = ConfigDict(frozen=True)

    zscore: Dict[str, float] = Field(
        default_factory=lambda: {"low": 4.0, "medium": 3.0, "high": 2.0, "adaptive": 3.0},
        description="Z-score threshold per sensitivity level",
    )
    mad: float = Field(3.5, gt=0.0, description="Modified z-score threshold")
    iqr_multiplier: float = Field(1.5, gt=0.0, description="Fence width in IQR units")
    isolation: float = Field(0.6, ge=0.0, le=1.0, description="Isolation score cut-off")
    lof: float = Field(1.5, gt=0.0, description="Raw LOF ratio cut-off")
    lof_epsilon: float = Field(1e-4, gt=0.0, description="Guard for a zero k-th distance")
    gesd_critical: float = Field(
        3.0,
        gt=0.0,
        description="Fixed GESD critical value (not derived from the t-distribution)",
    )

    ensemble: Dict[str, float] = Field(
        default_factory=lambda: {"low": 0.7, "medium": 0.6, "high": 0.5, "adaptive": 0.6},
        description="Weighted-score threshold per sensitivity level",
    )
    severity_critical: float = Field(0.8, ge=0.0, le=1.0)
    severity_warning: float = Field(0.6, ge=0.0, le=1.0)

    @field_validator("zscore")
    @classmethod
    def _positive_zscore_thresholds(cls, value: Dict[str, float]) -> Dict[str, float]:
        for level, threshold in value.items():
            if not threshold > 0:
                raise ValueError(f"Z-score threshold for '{level}' must be > 0, got {threshold}")
        return value

    @field_validator("ensemble")
    @classmethod
    def _unit_ensemble_thresholds(cls, value: Dict[str, float]) -> Dict[str, float]:
        for level, threshold in value.items():
            if not 0 < threshold <= 1:
                raise ValueError(f"Ensemble threshold for '{level}' must be in (0, 1], got {threshold}")
        return value


class DetectorConfig(BaseModel):
    """
    Detection configuration, constructed once by the caller and read-only afterwards.

    Notes:
    - algorithms: names to run; "ensemble" runs every point detector.
    - context_window: hours of history the caller is expected to supply.
    - min_data_points: shorter histories short-circuit to a non-anomaly result.
    - random_seed: pins the isolation detector when set.
    - max_history_points / max_trees: bounds against pathological input sizes.
    """

    model_config = ConfigDict(frozen=True)

    algorithms: Tuple[str, ...] = ("ensemble",)
    sensitivity: SensitivityLevel = "medium"
    context_window: int = Field(168, gt=0)
    seasonality_periods: Tuple[int, ...] = (24, 168)
    ensemble_weighting: WeightingStrategy = "adaptive"
    min_data_points: int = Field(30, ge=1)

    num_trees: int = Field(100, ge=1)
    lof_neighbors: int = Field(5, ge=1)
    max_outliers: int = Field(10, ge=1)
    random_seed: Optional[int] = None

    max_history_points: int = Field(100_000, ge=1)
    max_trees: int = Field(10_000, ge=1)

    thresholds: DetectorThresholds = DetectorThresholds()

    @field_validator("algorithms", mode="before")
    @classmethod
    def _normalize_algorithms(cls, value):
        if isinstance(value, str):
            value = (value,)
        return tuple(str(name).strip().lower().replace("_", "-") for name in value)

    @field_validator("seasonality_periods")
    @classmethod
    def _positive_periods(cls, value: Tuple[int, ...]) -> Tuple[int, ...]:
        if any(period < 2 for period in value):
            raise ValueError("Seasonality periods must be >= 2")
        return value

    @model_validator(mode="after")
    def _check_sensitivity_tables(self) -> "DetectorConfig":
        for table in ("zscore", "ensemble"):
            if self.sensitivity not in getattr(self.thresholds, table):
                raise ValueError(f"No {table} threshold for sensitivity '{self.sensitivity}'")
        return self


class Config(BaseSettings):
    """
    Global configuration with environment overrides.
    """

    model_config = SettingsConfigDict(
        env_prefix="AYVLO_",
        env_file=".env",
        env_nested_delimiter="__",
        extra="ignore",
    )

    log_level: str = Field("INFO", description="Default logging level")
    logs_dir: Optional[Path] = Field(None, description="Directory for log files; console only when unset")
    detector: DetectorConfig = DetectorConfig()


config = Config()
