"""
Risk Scoring Engine — Turns a collected SignalSet into a RiskAssessment.

    subscores = normalize(signals)
    score     = Σ weight[f] × subscore[f] over non-defaulted factors (renormalized)
    level     = classify(score)

Pure: the same signals and config always give the same score, level and
factors. Only computed_at depends on the clock.
"""

from __future__ import annotations

from datetime import datetime, timezone

from dropout_risk.core.aggregator import aggregate
from dropout_risk.core.classifier import classify
from dropout_risk.core.normalizer import normalize_signals
from dropout_risk.models.config_models import EngineConfig
from dropout_risk.models.risk_models import ALL_FACTORS, RiskAssessment
from dropout_risk.models.signal_models import SignalSet


def compute_risk_assessment(
    signals: SignalSet,
    config: EngineConfig,
    computed_at: datetime | None = None,
) -> RiskAssessment:
    """
    Score one student's signals.

    Args:
        signals: Output of SignalCollector.collect()
        config: Validated engine configuration
        computed_at: Timestamp to stamp on the result (defaults to now, UTC)

    Raises:
        InsufficientSignalsError: if every weighted factor was defaulted.
    """
    factors = normalize_signals(signals, config.normalizer)
    defaulted = signals.defaulted_factors
    score = aggregate(factors, config.weights, excluded=defaulted)

    return RiskAssessment(
        score=score,
        level=classify(score, config.thresholds),
        factors=factors,
        computed_at=computed_at or datetime.now(timezone.utc),
        defaulted_factors=[f for f in ALL_FACTORS if f in defaulted],
    )
