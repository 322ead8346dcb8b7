"""
API Request/Response Models — Public contract of the HTTP surface.
"""

from __future__ import annotations

import datetime as dt

from pydantic import BaseModel, Field

from dropout_risk.core.insights import DropoutOutlook, Recommendation
from dropout_risk.models.risk_models import StudentRiskProfile
from dropout_risk.models.signal_models import AttendanceStatus
from dropout_risk.models.sweep_models import SweepReport


class AttendanceRecordInput(BaseModel):
    """One student's status in a committed attendance mark."""

    student_id: str
    status: AttendanceStatus

    @property
    def is_absent(self) -> bool:
        return self.status == AttendanceStatus.ABSENT


class AttendanceMarkedRequest(BaseModel):
    """Body for /attendance/marked, sent after the attendance write commits."""

    class_id: str
    date: dt.date
    records: list[AttendanceRecordInput] = Field(default_factory=list)


class AttendanceMarkedResult(BaseModel):
    class_id: str
    date: dt.date
    absent_count: int
    high_absence_alert: bool = False
    recompute: SweepReport


class StudentRiskResponse(BaseModel):
    """Stored risk profile with derived recommendations and outlook."""

    student_id: str
    profile: StudentRiskProfile | None = None
    recommendations: list[Recommendation] = Field(default_factory=list)
    outlook: DropoutOutlook | None = None


class RecentSweepsResponse(BaseModel):
    sweeps: list[SweepReport] = Field(default_factory=list)
