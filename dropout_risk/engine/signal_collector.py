"""
Signal Collector — Reads one student's raw signals from the owning stores.

Each source is read concurrently under its own timeout. A source that fails
or times out is replaced by its neutral default and recorded as defaulted,
so the scorer can exclude its factors. Only when every source fails is the
collection aborted. A student unknown to a store is a hard failure, not an
outage.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from datetime import date, datetime, timezone
from typing import TypeVar

from dropout_risk.collaborators.protocols import AcademicSource, AttendanceSource, ProfileSource
from dropout_risk.config import settings
from dropout_risk.core.errors import (
    AllSignalsUnavailableError,
    SignalUnavailableError,
    StudentNotFoundError,
)
from dropout_risk.models.signal_models import (
    DEFAULT_ACADEMIC,
    DEFAULT_ATTENDANCE,
    DEFAULT_PROFILE,
    SignalSet,
    SignalSource,
    SignalWindow,
)

logger = logging.getLogger("dropout_risk.engine.collector")

T = TypeVar("T")


def academic_year_window(today: date, start_month: int) -> SignalWindow:
    """Trailing window from the start of the current academic year to today."""
    year = today.year if today.month >= start_month else today.year - 1
    return SignalWindow(start=date(year, start_month, 1), end=today)


class SignalCollector:
    """Read-only, side-effect-free signal reader."""

    def __init__(
        self,
        attendance: AttendanceSource,
        academic: AcademicSource,
        profile: ProfileSource,
        source_timeout: float | None = None,
        academic_year_start_month: int | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.attendance = attendance
        self.academic = academic
        self.profile = profile
        self.source_timeout = (
            source_timeout if source_timeout is not None else settings.source_timeout_seconds
        )
        self.academic_year_start_month = (
            academic_year_start_month or settings.academic_year_start_month
        )
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    async def collect(self, student_id: str) -> SignalSet:
        """
        Collect the freshest signals for a student.

        Raises:
            StudentNotFoundError: if a store has no such student.
            AllSignalsUnavailableError: if no source could be read.
        """
        now = self.clock()
        window = academic_year_window(now.date(), self.academic_year_start_month)

        results = await asyncio.gather(
            self._read(
                SignalSource.ATTENDANCE,
                lambda: self.attendance.get_attendance_summary(student_id, window),
            ),
            self._read(
                SignalSource.ACADEMIC,
                lambda: self.academic.get_academic_summary(student_id, window),
            ),
            self._read(
                SignalSource.PROFILE,
                lambda: self.profile.get_student_profile_flags(student_id),
            ),
            return_exceptions=True,
        )
        # Only StudentNotFoundError escapes _read; let every read settle first
        for result in results:
            if isinstance(result, BaseException):
                raise result
        attendance, academic, profile = results

        defaulted: dict[SignalSource, str] = {}
        for source, (_, error) in (
            (SignalSource.ATTENDANCE, attendance),
            (SignalSource.ACADEMIC, academic),
            (SignalSource.PROFILE, profile),
        ):
            if error is not None:
                defaulted[source] = error.reason

        if len(defaulted) == len(SignalSource):
            raise AllSignalsUnavailableError(
                student_id, {source.value: reason for source, reason in defaulted.items()}
            )

        academic_summary = academic[0] or DEFAULT_ACADEMIC
        if academic[0] is not None and academic_summary.average_percentage is None:
            # Reachable but nothing graded yet: no academic signal to score
            defaulted[SignalSource.ACADEMIC] = "no assessments in window"
            academic_summary = DEFAULT_ACADEMIC

        for source, reason in defaulted.items():
            logger.warning(f"[{student_id}] Using default {source.value} signals: {reason}")

        return SignalSet(
            student_id=student_id,
            window=window,
            attendance=attendance[0] or DEFAULT_ATTENDANCE,
            academic=academic_summary,
            profile=profile[0] or DEFAULT_PROFILE,
            defaulted_sources=defaulted,
            collected_at=now,
        )

    async def _read(
        self, source: SignalSource, fetch: Callable[[], Awaitable[T]]
    ) -> tuple[T | None, SignalUnavailableError | None]:
        """Run one read under the source timeout; convert outages into a recorded error."""
        try:
            return await asyncio.wait_for(fetch(), timeout=self.source_timeout), None
        except StudentNotFoundError:
            raise
        except asyncio.TimeoutError:
            return None, SignalUnavailableError(
                source.value, f"timed out after {self.source_timeout}s"
            )
        except Exception as e:
            return None, SignalUnavailableError(source.value, f"{type(e).__name__}: {e}")
