"""
Signal Data Models — Raw per-student inputs read from collaborators.

Signals are ephemeral: they are collected fresh on every recompute and never
cached across recomputes.
"""

from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from typing import Annotated

from pydantic import BaseModel, Field

from dropout_risk.models.risk_models import FactorName


class IncomeTier(str, Enum):
    BELOW_POVERTY_LINE = "below_poverty_line"
    LOW = "low"
    MIDDLE = "middle"
    HIGH = "high"

    @classmethod
    def _missing_(cls, value):
        # Accept the school records' labels ("Middle Income", "Below Poverty Line", "Middle")
        if isinstance(value, str):
            key = value.strip().lower().replace(" income", "").replace(" ", "_")
            for member in cls:
                if member.value == key:
                    return member
        return None


class AttendanceStatus(str, Enum):
    PRESENT = "Present"
    ABSENT = "Absent"
    LATE = "Late"
    HALF_DAY = "Half Day"
    EXCUSED = "Excused"

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str):
            key = value.strip().lower()
            for member in cls:
                if member.value.lower() == key:
                    return member
        return None


class SignalSource(str, Enum):
    ATTENDANCE = "attendance"
    ACADEMIC = "academic"
    PROFILE = "profile"


# Factors fed by each collaborator; all of them are defaulted together
SOURCE_FACTORS: dict[SignalSource, tuple[FactorName, ...]] = {
    SignalSource.ATTENDANCE: (FactorName.ATTENDANCE,),
    SignalSource.ACADEMIC: (FactorName.ACADEMIC,),
    SignalSource.PROFILE: (
        FactorName.FINANCIAL,
        FactorName.BEHAVIORAL,
        FactorName.HEALTH,
        FactorName.DISTANCE,
        FactorName.FAMILY,
    ),
}


class SignalWindow(BaseModel):
    """Inclusive date range that attendance and academic summaries cover."""

    start: date
    end: date


# NaN and infinity are rejected where signals enter the engine
FiniteFloat = Annotated[float, Field(allow_inf_nan=False)]


class AttendanceSummary(BaseModel):
    percentage: FiniteFloat = Field(default=100.0, description="Share of days present, 0-100")
    present_days: int = 0
    absent_days: int = 0
    late_days: int = 0


class AcademicSummary(BaseModel):
    average_percentage: FiniteFloat | None = Field(
        default=None, description="Average over recent assessments; None when nothing was graded"
    )
    assessments: int = 0


class ProfileFlags(BaseModel):
    health_issue: bool = False
    behavioral_issue: bool = False
    family_problem: bool = False
    economic_distress: bool = False
    distance_km: FiniteFloat = 0.0
    income_tier: IncomeTier | None = None


# Neutral stand-ins used when a source cannot be read
DEFAULT_ATTENDANCE = AttendanceSummary(percentage=100.0)
DEFAULT_ACADEMIC = AcademicSummary(average_percentage=100.0)
DEFAULT_PROFILE = ProfileFlags()


class SignalSet(BaseModel):
    """Everything the normalizers need for one student, plus provenance."""

    student_id: str
    window: SignalWindow
    attendance: AttendanceSummary
    academic: AcademicSummary
    profile: ProfileFlags
    defaulted_sources: dict[SignalSource, str] = Field(
        default_factory=dict,
        description="Sources substituted by their default, mapped to the reason",
    )
    collected_at: datetime

    @property
    def defaulted_factors(self) -> set[FactorName]:
        factors: set[FactorName] = set()
        for source in self.defaulted_sources:
            factors.update(SOURCE_FACTORS[source])
        return factors
