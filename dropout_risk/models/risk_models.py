"""
Risk Data Models — Factors, tiers, and the assessment written onto a student.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Annotated

from pydantic import BaseModel, Field


class FactorName(str, Enum):
    ATTENDANCE = "attendance"
    ACADEMIC = "academic"
    FINANCIAL = "financial"
    BEHAVIORAL = "behavioral"
    HEALTH = "health"
    DISTANCE = "distance"
    FAMILY = "family"


ALL_FACTORS: tuple[FactorName, ...] = tuple(FactorName)

Subscore = Annotated[int, Field(ge=0, le=100)]


class RiskLevel(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    CRITICAL = "Critical"


# Ordinal order of tiers, lowest first
LEVEL_ORDER: tuple[RiskLevel, ...] = (
    RiskLevel.LOW,
    RiskLevel.MEDIUM,
    RiskLevel.HIGH,
    RiskLevel.CRITICAL,
)


def severity(level: RiskLevel | str) -> int:
    """Ordinal severity of a tier: Low=0 … Critical=3."""
    return LEVEL_ORDER.index(RiskLevel(level))


class RiskAssessment(BaseModel):
    """A freshly computed risk result for one student."""

    score: int = Field(..., ge=0, le=100, description="Composite risk score 0-100")
    level: RiskLevel
    factors: dict[FactorName, Subscore] = Field(
        default_factory=dict, description="Per-factor distress subscores 0-100"
    )
    computed_at: datetime
    defaulted_factors: list[FactorName] = Field(
        default_factory=list,
        description="Factors whose source was unreachable and were excluded from the score",
    )

    def same_result(self, other: RiskAssessment) -> bool:
        """True when score, level and factors match, ignoring computed_at."""
        return (
            self.score == other.score
            and self.level == other.level
            and self.factors == other.factors
        )


class StudentRiskProfile(RiskAssessment):
    """The risk subset of the student aggregate, as persisted by the writer."""

    @classmethod
    def from_assessment(cls, assessment: RiskAssessment) -> StudentRiskProfile:
        return cls(**assessment.model_dump())
