"""
Collaborator Protocols — The engine's only view of the outside world.

Stores own attendance, grades and profiles; the engine reads them, writes the
risk subset of the student aggregate, and publishes events. Implementations
raise StudentNotFoundError for unknown students and anything else when
unreachable.
"""

from __future__ import annotations

from typing import Any, Protocol

from dropout_risk.models.risk_models import StudentRiskProfile
from dropout_risk.models.signal_models import (
    AcademicSummary,
    AttendanceSummary,
    ProfileFlags,
    SignalWindow,
)


class AttendanceSource(Protocol):
    async def get_attendance_summary(
        self, student_id: str, window: SignalWindow
    ) -> AttendanceSummary:
        ...


class AcademicSource(Protocol):
    async def get_academic_summary(
        self, student_id: str, window: SignalWindow
    ) -> AcademicSummary:
        ...


class ProfileSource(Protocol):
    async def get_student_profile_flags(self, student_id: str) -> ProfileFlags:
        ...


class StudentDirectory(Protocol):
    async def list_active_student_ids(self) -> list[str]:
        ...


class RiskProfileStore(Protocol):
    async def get_risk_profile(self, student_id: str) -> StudentRiskProfile | None:
        ...

    async def update_risk_profile(
        self, student_id: str, profile: StudentRiskProfile
    ) -> StudentRiskProfile | None:
        """
        Replace only the risk fields of the student, atomically.

        Returns:
            The profile that was replaced, or None if the student had none.
        """
        ...


class EventPublisher(Protocol):
    async def publish(self, event_name: str, payload: dict[str, Any]) -> None:
        ...
