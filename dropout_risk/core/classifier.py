"""
Risk Classifier — Maps a composite score onto a tier.

Boundaries are inclusive toward the higher tier:
    score < low → Low, < medium → Medium, < high → High, otherwise Critical.
"""

from __future__ import annotations

from dropout_risk.models.config_models import ThresholdConfig
from dropout_risk.models.risk_models import RiskLevel


def classify(score: int, thresholds: ThresholdConfig) -> RiskLevel:
    if score < thresholds.low:
        return RiskLevel.LOW
    if score < thresholds.medium:
        return RiskLevel.MEDIUM
    if score < thresholds.high:
        return RiskLevel.HIGH
    return RiskLevel.CRITICAL
