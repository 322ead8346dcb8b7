"""
Engine Config Models — Immutable, validated scoring configuration.

Built once from Settings at startup and shared read-only by every recompute.
Any validation failure surfaces as InvalidConfigurationError so the service
refuses to start instead of misclassifying students.
"""

from __future__ import annotations

import math

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from dropout_risk.config import Settings
from dropout_risk.core.errors import InvalidConfigurationError
from dropout_risk.models.risk_models import ALL_FACTORS, FactorName
from dropout_risk.models.signal_models import IncomeTier

WEIGHT_SUM_TOLERANCE = 1e-6

UNKNOWN_INCOME_KEY = "unknown"


class WeightConfig(BaseModel):
    """Factor weights: every factor present, non-negative, summing to 1.0."""

    weights: dict[FactorName, float]

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def _check_weights(self) -> WeightConfig:
        missing = [f.value for f in ALL_FACTORS if f not in self.weights]
        if missing:
            raise ValueError(f"weights missing for factors: {', '.join(missing)}")
        negative = [f.value for f, w in self.weights.items() if w < 0 or not math.isfinite(w)]
        if negative:
            raise ValueError(f"weights must be finite and non-negative: {', '.join(negative)}")
        total = sum(self.weights.values())
        if abs(total - 1.0) > WEIGHT_SUM_TOLERANCE:
            raise ValueError(f"weights must sum to 1.0, got {total:.6f}")
        return self

    def __getitem__(self, factor: FactorName) -> float:
        return self.weights[factor]


class ThresholdConfig(BaseModel):
    """Non-decreasing tier boundaries partitioning [0, 100]."""

    low: int = Field(..., ge=0, le=100)
    medium: int = Field(..., ge=0, le=100)
    high: int = Field(..., ge=0, le=100)

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def _check_order(self) -> ThresholdConfig:
        if not (self.low <= self.medium <= self.high):
            raise ValueError(
                f"thresholds must be non-decreasing, got {self.low}/{self.medium}/{self.high}"
            )
        return self


class DistanceBand(BaseModel):
    """Distances up to and including upper_km map to score."""

    upper_km: float = Field(..., gt=0)
    score: int = Field(..., ge=0, le=100)

    model_config = {"frozen": True}


class NormalizerConfig(BaseModel):
    """Constants and bands used by the factor normalizers."""

    health_flag_score: int = Field(default=70, ge=0, le=100)
    behavioral_flag_score: int = Field(default=70, ge=0, le=100)
    family_flag_score: int = Field(default=70, ge=0, le=100)
    economic_flag_score: int = Field(default=70, ge=0, le=100)
    distance_bands: tuple[DistanceBand, ...] = (
        DistanceBand(upper_km=2.0, score=10),
        DistanceBand(upper_km=5.0, score=30),
        DistanceBand(upper_km=10.0, score=50),
    )
    distance_beyond_score: int = Field(default=80, ge=0, le=100)
    income_tier_scores: dict[str, int] = Field(
        default_factory=lambda: {
            IncomeTier.BELOW_POVERTY_LINE.value: 80,
            IncomeTier.LOW.value: 50,
            IncomeTier.MIDDLE.value: 20,
            IncomeTier.HIGH.value: 0,
            UNKNOWN_INCOME_KEY: 0,
        }
    )

    model_config = {"frozen": True}

    @field_validator("income_tier_scores")
    @classmethod
    def _check_income_scores(cls, value: dict[str, int]) -> dict[str, int]:
        expected = {t.value for t in IncomeTier} | {UNKNOWN_INCOME_KEY}
        missing = sorted(expected - value.keys())
        unknown = sorted(value.keys() - expected)
        if missing:
            raise ValueError(f"income tier scores missing: {', '.join(missing)}")
        if unknown:
            raise ValueError(f"unknown income tiers: {', '.join(unknown)}")
        out_of_range = [k for k, v in value.items() if not 0 <= v <= 100]
        if out_of_range:
            raise ValueError(f"income tier scores out of range: {', '.join(out_of_range)}")
        ordered = [value[t.value] for t in IncomeTier]
        if any(a < b for a, b in zip(ordered, ordered[1:])):
            raise ValueError("income tier scores must not increase with income")
        return value

    @model_validator(mode="after")
    def _check_distance_bands(self) -> NormalizerConfig:
        if not self.distance_bands:
            raise ValueError("at least one distance band is required")
        previous_km = 0.0
        previous_score = 0
        for band in self.distance_bands:
            if band.upper_km <= previous_km:
                raise ValueError("distance bands must have strictly ascending upper_km")
            if band.score < previous_score:
                raise ValueError("distance band scores must be non-decreasing")
            previous_km, previous_score = band.upper_km, band.score
        if self.distance_beyond_score < previous_score:
            raise ValueError("distance_beyond_score must not be below the last band")
        return self


class EngineConfig(BaseModel):
    """Everything the scoring pipeline reads, validated together."""

    weights: WeightConfig
    thresholds: ThresholdConfig
    normalizer: NormalizerConfig = Field(default_factory=NormalizerConfig)

    model_config = {"frozen": True}


def load_engine_config(source: Settings) -> EngineConfig:
    """
    Build and validate the EngineConfig from settings.

    Raises:
        InvalidConfigurationError: if any weight, threshold or band is invalid.
    """
    try:
        return EngineConfig(
            weights=WeightConfig(weights=source.risk_weights),
            thresholds=ThresholdConfig(
                low=source.risk_threshold_low,
                medium=source.risk_threshold_medium,
                high=source.risk_threshold_high,
            ),
            normalizer=NormalizerConfig(
                health_flag_score=source.health_flag_score,
                behavioral_flag_score=source.behavioral_flag_score,
                family_flag_score=source.family_flag_score,
                economic_flag_score=source.economic_flag_score,
                distance_bands=tuple(
                    DistanceBand(upper_km=km, score=score) for km, score in source.distance_bands
                ),
                distance_beyond_score=source.distance_beyond_score,
                income_tier_scores=source.income_tier_scores,
            ),
        )
    except ValidationError as e:
        raise InvalidConfigurationError(f"Invalid risk engine configuration: {e}") from e
