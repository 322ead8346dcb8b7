"""
Weighted Aggregator — Combines factor subscores into one composite score.

composite = Σ weight[f] × subscore[f] / Σ weight[f]   over included factors

Factors whose source was defaulted are excluded and the remaining weights are
renormalized, so an unreachable collaborator neither inflates nor dilutes risk.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from dropout_risk.core.errors import InsufficientSignalsError
from dropout_risk.core.normalizer import clamp_score
from dropout_risk.models.config_models import WeightConfig
from dropout_risk.models.risk_models import FactorName


def effective_weights(
    weights: WeightConfig,
    present: Iterable[FactorName],
    excluded: Iterable[FactorName] = (),
) -> dict[FactorName, float]:
    """
    Weights of the included factors, renormalized to sum to 1.

    Raises:
        InsufficientSignalsError: if no included factor carries positive weight.
    """
    skip = set(excluded)
    included = {f: weights[f] for f in present if f not in skip}
    total = sum(included.values())
    if total <= 0:
        raise InsufficientSignalsError(
            f"No weighted factor left to score (excluded: {sorted(f.value for f in skip)})"
        )
    return {f: w / total for f, w in included.items()}


def aggregate(
    factor_scores: Mapping[FactorName, int],
    weights: WeightConfig,
    excluded: Iterable[FactorName] = (),
) -> int:
    """Weighted composite of the included subscores, rounded half-up into [0, 100]."""
    renormalized = effective_weights(weights, factor_scores.keys(), excluded)
    raw = sum(w * factor_scores[f] for f, w in renormalized.items())
    # Float noise must not move a .5 composite across the rounding boundary
    return clamp_score(round(raw, 9))
