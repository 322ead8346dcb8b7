"""
In-Memory Collaborators — Reference student store and event publisher.

InMemoryStudentStore implements every read API the collector needs, the
student directory, and the field-level risk profile update. Each mutation
touches only its own fields under one lock, so a profile edit racing a risk
write never loses either. Upgradeable to a document store by swapping the
storage backend.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any

from dropout_risk.core.errors import StudentNotFoundError
from dropout_risk.models.risk_models import StudentRiskProfile
from dropout_risk.models.signal_models import (
    AcademicSummary,
    AttendanceStatus,
    AttendanceSummary,
    ProfileFlags,
    SignalWindow,
)

logger = logging.getLogger("dropout_risk.collaborators.memory")


# Statuses that count as attending the day
ATTENDED = frozenset({AttendanceStatus.PRESENT, AttendanceStatus.LATE})


@dataclass
class StudentRecord:
    """The student aggregate as the reference store keeps it."""

    student_id: str
    full_name: str = ""
    class_id: str = ""
    active: bool = True
    flags: ProfileFlags = field(default_factory=ProfileFlags)
    attendance: dict[date, AttendanceStatus] = field(default_factory=dict)
    grades: list[tuple[date, float]] = field(default_factory=list)
    risk_profile: StudentRiskProfile | None = None


class InMemoryStudentStore:
    """Async student store backed by a dict."""

    def __init__(self) -> None:
        self._students: dict[str, StudentRecord] = {}
        self._lock = asyncio.Lock()

    def _get(self, student_id: str) -> StudentRecord:
        record = self._students.get(student_id)
        if record is None:
            raise StudentNotFoundError(student_id)
        return record

    # ── Student CRUD (owned by the rest of the application) ──

    def add_student(self, record: StudentRecord) -> StudentRecord:
        self._students[record.student_id] = record
        return record

    def get_student(self, student_id: str) -> StudentRecord:
        return self._get(student_id)

    async def update_profile_flags(self, student_id: str, **changes: Any) -> ProfileFlags:
        """Edit risk-input profile fields without touching the risk profile."""
        async with self._lock:
            record = self._get(student_id)
            record.flags = record.flags.model_copy(update=changes)
            return record.flags

    async def mark_attendance(
        self, student_id: str, day: date, status: AttendanceStatus | str
    ) -> None:
        async with self._lock:
            self._get(student_id).attendance[day] = AttendanceStatus(status)

    async def record_grade(self, student_id: str, day: date, percentage: float) -> None:
        async with self._lock:
            self._get(student_id).grades.append((day, percentage))

    # ── Signal reads ──

    async def get_attendance_summary(
        self, student_id: str, window: SignalWindow
    ) -> AttendanceSummary:
        record = self._get(student_id)
        statuses = [s for d, s in record.attendance.items() if window.start <= d <= window.end]
        total = len(statuses)
        attended = sum(1 for s in statuses if s in ATTENDED)
        return AttendanceSummary(
            percentage=round(attended / total * 100, 2) if total else 100.0,
            present_days=sum(1 for s in statuses if s == AttendanceStatus.PRESENT),
            absent_days=sum(1 for s in statuses if s == AttendanceStatus.ABSENT),
            late_days=sum(1 for s in statuses if s == AttendanceStatus.LATE),
        )

    async def get_academic_summary(
        self, student_id: str, window: SignalWindow
    ) -> AcademicSummary:
        record = self._get(student_id)
        marks = [p for d, p in record.grades if window.start <= d <= window.end]
        if not marks:
            return AcademicSummary(average_percentage=None, assessments=0)
        return AcademicSummary(
            average_percentage=round(sum(marks) / len(marks), 2),
            assessments=len(marks),
        )

    async def get_student_profile_flags(self, student_id: str) -> ProfileFlags:
        return self._get(student_id).flags

    async def list_active_student_ids(self) -> list[str]:
        return [sid for sid, record in self._students.items() if record.active]

    # ── Risk profile ──

    async def get_risk_profile(self, student_id: str) -> StudentRiskProfile | None:
        return self._get(student_id).risk_profile

    async def update_risk_profile(
        self, student_id: str, profile: StudentRiskProfile
    ) -> StudentRiskProfile | None:
        async with self._lock:
            record = self._get(student_id)
            previous = record.risk_profile
            record.risk_profile = profile
            return previous


class InMemoryEventPublisher:
    """Keeps every published event in order and logs it."""

    def __init__(self) -> None:
        self.events: list[tuple[str, dict[str, Any]]] = []

    async def publish(self, event_name: str, payload: dict[str, Any]) -> None:
        self.events.append((event_name, payload))
        logger.info(f"Event published: {event_name} {payload}")

    def named(self, event_name: str) -> list[dict[str, Any]]:
        return [payload for name, payload in self.events if name == event_name]

    def clear(self) -> None:
        self.events.clear()
