"""
Factor Normalizer — Converts raw signals into 0-100 distress subscores.

Every function is pure, total over its input domain (including the collector's
neutral defaults) and monotonic in the risk direction: more absence, lower
grades, more flags, longer distance and lower income never lower a subscore.
"""

from __future__ import annotations

import math

from dropout_risk.models.config_models import UNKNOWN_INCOME_KEY, NormalizerConfig
from dropout_risk.models.risk_models import FactorName
from dropout_risk.models.signal_models import IncomeTier, SignalSet


def clamp_score(value: float) -> int:
    """Round half-up and clamp into [0, 100]."""
    return min(100, max(0, math.floor(value + 0.5)))


def normalize_attendance(percentage: float) -> int:
    """Attendance distress = 100 − attendance percentage."""
    return clamp_score(100.0 - percentage)


def normalize_academic(average_percentage: float) -> int:
    """Academic distress = 100 − academic average percentage."""
    return clamp_score(100.0 - average_percentage)


def normalize_flag(flag: bool, flag_score: int) -> int:
    return flag_score if flag else 0


def normalize_distance(distance_km: float, config: NormalizerConfig) -> int:
    """Banded km mapping; bands are upper-inclusive."""
    distance_km = max(0.0, distance_km)
    for band in config.distance_bands:
        if distance_km <= band.upper_km:
            return band.score
    return config.distance_beyond_score


def normalize_income_tier(tier: IncomeTier | None, config: NormalizerConfig) -> int:
    key = tier.value if tier is not None else UNKNOWN_INCOME_KEY
    return config.income_tier_scores[key]


def normalize_family(
    family_problem: bool, tier: IncomeTier | None, config: NormalizerConfig
) -> int:
    """Family distress is the worse of the family-problem flag and the income band."""
    return max(
        normalize_flag(family_problem, config.family_flag_score),
        normalize_income_tier(tier, config),
    )


def normalize_signals(signals: SignalSet, config: NormalizerConfig) -> dict[FactorName, int]:
    """
    Compute every factor subscore for a collected SignalSet.

    Defaulted sources are normalized from their neutral defaults too, so the
    breakdown is always complete; the aggregator decides what to exclude.
    """
    profile = signals.profile
    academic_average = signals.academic.average_percentage
    if academic_average is None:
        academic_average = 100.0

    return {
        FactorName.ATTENDANCE: normalize_attendance(signals.attendance.percentage),
        FactorName.ACADEMIC: normalize_academic(academic_average),
        FactorName.FINANCIAL: normalize_flag(profile.economic_distress, config.economic_flag_score),
        FactorName.BEHAVIORAL: normalize_flag(profile.behavioral_issue, config.behavioral_flag_score),
        FactorName.HEALTH: normalize_flag(profile.health_issue, config.health_flag_score),
        FactorName.DISTANCE: normalize_distance(profile.distance_km, config),
        FactorName.FAMILY: normalize_family(profile.family_problem, profile.income_tier, config),
    }
