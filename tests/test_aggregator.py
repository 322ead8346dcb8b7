"""
Tests for Weighted Aggregator and Risk Classifier.
"""

import random

import pytest

from dropout_risk.core.aggregator import aggregate, effective_weights
from dropout_risk.core.classifier import classify
from dropout_risk.core.errors import InsufficientSignalsError
from dropout_risk.models.config_models import ThresholdConfig, WeightConfig
from dropout_risk.models.risk_models import ALL_FACTORS, FactorName, RiskLevel, severity

WORKED_FACTORS = {
    FactorName.ATTENDANCE: 50,
    FactorName.ACADEMIC: 60,
    FactorName.FINANCIAL: 0,
    FactorName.BEHAVIORAL: 0,
    FactorName.HEALTH: 0,
    FactorName.DISTANCE: 30,
    FactorName.FAMILY: 20,
}

THRESHOLDS = ThresholdConfig(low=30, medium=60, high=80)


@pytest.fixture
def weights(engine_config):
    return engine_config.weights


# --- Aggregator Tests ---


def test_worked_example_composite(weights):
    # 0.25×50 + 0.25×60 + 0.10×30 + 0.05×20 = 31.5 → 32
    score = aggregate(WORKED_FACTORS, weights)
    assert score == 32
    assert classify(score, THRESHOLDS) == RiskLevel.MEDIUM


def test_composite_bounded_for_any_valid_weights():
    rng = random.Random(304)
    for _ in range(200):
        raw = [rng.random() for _ in ALL_FACTORS]
        total = sum(raw)
        config = WeightConfig(weights={f: w / total for f, w in zip(ALL_FACTORS, raw)})
        factors = {f: rng.randint(0, 100) for f in ALL_FACTORS}
        assert 0 <= aggregate(factors, config) <= 100


def test_extremes(weights):
    assert aggregate({f: 0 for f in ALL_FACTORS}, weights) == 0
    assert aggregate({f: 100 for f in ALL_FACTORS}, weights) == 100


def test_excluded_factor_renormalizes_remaining(weights):
    # (0.25×60 + 0.10×30 + 0.05×20) / 0.75 = 25.33 → 25
    score = aggregate(WORKED_FACTORS, weights, excluded=[FactorName.ATTENDANCE])
    assert score == 25


def test_excluded_profile_factors(weights):
    excluded = [
        FactorName.FINANCIAL,
        FactorName.BEHAVIORAL,
        FactorName.HEALTH,
        FactorName.DISTANCE,
        FactorName.FAMILY,
    ]
    # (0.25×50 + 0.25×60) / 0.5 = 55
    assert aggregate(WORKED_FACTORS, weights, excluded=excluded) == 55


def test_effective_weights_sum_to_one(weights):
    renormalized = effective_weights(weights, ALL_FACTORS, excluded=[FactorName.ACADEMIC])
    assert FactorName.ACADEMIC not in renormalized
    assert sum(renormalized.values()) == pytest.approx(1.0)


def test_everything_excluded_fails(weights):
    with pytest.raises(InsufficientSignalsError):
        aggregate(WORKED_FACTORS, weights, excluded=ALL_FACTORS)


def test_only_zero_weight_factors_left_fails():
    config = WeightConfig(weights={f: (1.0 if f == FactorName.ATTENDANCE else 0.0) for f in ALL_FACTORS})
    with pytest.raises(InsufficientSignalsError):
        aggregate(WORKED_FACTORS, config, excluded=[FactorName.ATTENDANCE])


# --- Classifier Tests ---


@pytest.mark.parametrize(
    "score,level",
    [
        (0, RiskLevel.LOW),
        (29, RiskLevel.LOW),
        (30, RiskLevel.MEDIUM),
        (59, RiskLevel.MEDIUM),
        (60, RiskLevel.HIGH),
        (79, RiskLevel.HIGH),
        (80, RiskLevel.CRITICAL),
        (100, RiskLevel.CRITICAL),
    ],
)
def test_classify_boundaries_favor_higher_tier(score, level):
    assert classify(score, THRESHOLDS) == level


def test_classify_is_monotonic():
    levels = [classify(score, THRESHOLDS) for score in range(0, 101)]
    for lower, higher in zip(levels, levels[1:]):
        assert severity(lower) <= severity(higher)


def test_classify_with_collapsed_thresholds():
    collapsed = ThresholdConfig(low=50, medium=50, high=50)
    assert classify(49, collapsed) == RiskLevel.LOW
    assert classify(50, collapsed) == RiskLevel.CRITICAL


def test_severity_order():
    assert [severity(level) for level in RiskLevel] == [0, 1, 2, 3]
    assert severity("Critical") == 3
