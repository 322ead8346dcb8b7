"""
Risk Insights — Recommendations, dropout outlook and score trend.

Derived views over a stored profile; nothing here feeds back into scoring.
"""

from __future__ import annotations

from enum import Enum
from typing import Literal

from pydantic import BaseModel

from dropout_risk.models.risk_models import FactorName, RiskAssessment, RiskLevel

TREND_BAND = 5


class RiskTrend(str, Enum):
    WORSENING = "Worsening"
    IMPROVING = "Improving"
    STABLE = "Stable"
    UNKNOWN = "Unknown"


class Recommendation(BaseModel):
    priority: Literal["High", "Medium", "Low"]
    category: str
    action: str
    description: str


class DropoutOutlook(BaseModel):
    timeline: str
    probability: str
    urgency: RiskLevel


def risk_trend(previous_score: int | None, new_score: int) -> RiskTrend:
    """Compare two consecutive scores; moves within ±5 points are Stable."""
    if previous_score is None:
        return RiskTrend.UNKNOWN
    change = new_score - previous_score
    if change > TREND_BAND:
        return RiskTrend.WORSENING
    if change < -TREND_BAND:
        return RiskTrend.IMPROVING
    return RiskTrend.STABLE


def dropout_outlook(score: int) -> DropoutOutlook:
    if score >= 80:
        return DropoutOutlook(timeline="1-3 months", probability="85-95%", urgency=RiskLevel.CRITICAL)
    if score >= 60:
        return DropoutOutlook(timeline="3-6 months", probability="60-75%", urgency=RiskLevel.HIGH)
    if score >= 40:
        return DropoutOutlook(timeline="6-12 months", probability="30-50%", urgency=RiskLevel.MEDIUM)
    return DropoutOutlook(timeline="Low risk", probability="<20%", urgency=RiskLevel.LOW)


def build_recommendations(assessment: RiskAssessment) -> list[Recommendation]:
    """Suggested interventions for the factors that are elevated."""
    factors = assessment.factors
    recs: list[Recommendation] = []

    attendance = factors.get(FactorName.ATTENDANCE, 0)
    if attendance > 50:
        recs.append(Recommendation(
            priority="High",
            category="Attendance",
            action="Immediate Parent Meeting",
            description="Schedule urgent meeting with parents to discuss attendance issues",
        ))
        recs.append(Recommendation(
            priority="High",
            category="Attendance",
            action="Daily Attendance Monitoring",
            description="Implement daily check-ins and follow-ups for absences",
        ))
    elif attendance > 30:
        recs.append(Recommendation(
            priority="Medium",
            category="Attendance",
            action="Parent Communication",
            description="Send weekly attendance reports to parents",
        ))

    if factors.get(FactorName.ACADEMIC, 0) > 50:
        recs.append(Recommendation(
            priority="High",
            category="Academic",
            action="Remedial Classes",
            description="Enroll student in after-school remedial classes",
        ))
        recs.append(Recommendation(
            priority="High",
            category="Academic",
            action="Peer Tutoring",
            description="Assign peer tutor for struggling subjects",
        ))

    if factors.get(FactorName.FINANCIAL, 0) > 50:
        recs.append(Recommendation(
            priority="High",
            category="Financial",
            action="Financial Aid Assessment",
            description="Evaluate eligibility for scholarships and financial assistance",
        ))

    if factors.get(FactorName.BEHAVIORAL, 0) > 40:
        recs.append(Recommendation(
            priority="High",
            category="Behavioral",
            action="Counseling Sessions",
            description="Schedule regular counseling sessions to address behavioral issues",
        ))

    if factors.get(FactorName.HEALTH, 0) > 40:
        recs.append(Recommendation(
            priority="Medium",
            category="Health",
            action="Health Assessment",
            description="Refer to school health services for medical evaluation",
        ))

    return recs
