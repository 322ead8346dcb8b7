"""
Recompute Worker — Orchestrates the risk pipeline per trigger.

Pipeline for one student:
1. Collect signals (defaults for unreachable sources)
2. Normalize every factor into a 0-100 subscore
3. Aggregate the non-defaulted subscores with renormalized weights
4. Classify the composite score into a tier
5. Write the risk profile (field-level, atomic, bounded retry)
6. Notify on escalation (never fails the recompute)

Sweeps run the same pipeline over many students on a bounded worker pool,
isolating each student's failure into the SweepReport.
"""

from __future__ import annotations

import asyncio
import logging
import time
import uuid
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import date, datetime, timezone

from dropout_risk.audit.logger import AuditLogger
from dropout_risk.collaborators.protocols import StudentDirectory
from dropout_risk.config import settings
from dropout_risk.core.errors import RecomputeFailedError
from dropout_risk.core.insights import risk_trend
from dropout_risk.core.risk_scorer import compute_risk_assessment
from dropout_risk.engine.notifier import HighAbsenceMonitor, TransitionNotifier
from dropout_risk.engine.signal_collector import SignalCollector
from dropout_risk.engine.state_writer import RiskProfileWriter
from dropout_risk.models.api_models import AttendanceMarkedResult, AttendanceRecordInput
from dropout_risk.models.config_models import EngineConfig
from dropout_risk.models.risk_models import RiskAssessment, StudentRiskProfile
from dropout_risk.models.sweep_models import RecomputeFailure, SweepReport

logger = logging.getLogger("dropout_risk.worker")


@dataclass
class RecomputeOutcome:
    """What one successful pipeline run changed."""

    assessment: RiskAssessment
    previous: StudentRiskProfile | None
    escalated: bool

    @property
    def level_changed(self) -> bool:
        return self.previous is not None and self.previous.level != self.assessment.level


class RiskEngine:
    """Single entry point for every risk recompute in the service."""

    def __init__(
        self,
        collector: SignalCollector,
        writer: RiskProfileWriter,
        notifier: TransitionNotifier,
        directory: StudentDirectory,
        config: EngineConfig,
        high_absence: HighAbsenceMonitor | None = None,
        audit_logger: AuditLogger | None = None,
        sweep_concurrency: int | None = None,
        student_timeout: float | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.collector = collector
        self.writer = writer
        self.notifier = notifier
        self.directory = directory
        self.config = config
        self.high_absence = high_absence
        self.audit_logger = audit_logger
        self.sweep_concurrency = sweep_concurrency or settings.sweep_concurrency
        self.student_timeout = student_timeout or settings.student_timeout_seconds
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    # ── Single student ──

    async def recompute_one(self, student_id: str) -> RiskAssessment:
        """
        Recompute and persist one student's risk.

        Call this after the signal-affecting mutation has committed; a
        failure here never rolls that mutation back.

        Raises:
            RecomputeFailedError: on any collection, scoring or persistence
                failure. The stored profile is unchanged in that case.
        """
        outcome = await self._recompute(student_id)
        return outcome.assessment

    async def _recompute(self, student_id: str) -> RecomputeOutcome:
        try:
            signals = await self.collector.collect(student_id)
            assessment = compute_risk_assessment(signals, self.config, self.clock())
            previous = await self.writer.write(student_id, assessment)
        except Exception as e:
            logger.error(f"[{student_id}] Risk recompute failed: {type(e).__name__}: {e}")
            raise RecomputeFailedError(student_id, e) from e

        previous_level = previous.level if previous else None
        previous_score = previous.score if previous else None
        escalated = await self.notifier.notify(
            student_id, previous_level, assessment, previous_score=previous_score
        )
        outcome = RecomputeOutcome(assessment=assessment, previous=previous, escalated=escalated)
        self._log_outcome(student_id, outcome)
        return outcome

    def _log_outcome(self, student_id: str, outcome: RecomputeOutcome) -> None:
        new = outcome.assessment
        previous = outcome.previous
        logger.info(
            f"[{student_id}] Risk score {new.score}/100 ({new.level.value})"
            + (f", defaulted: {[f.value for f in new.defaulted_factors]}" if new.defaulted_factors else "")
        )
        if previous is None:
            return
        if outcome.level_changed:
            logger.info(
                f"[{student_id}] Risk level changed {previous.level.value} → {new.level.value} "
                f"({risk_trend(previous.score, new.score).value})"
            )
        if abs(new.score - previous.score) > settings.significant_score_change:
            logger.info(
                f"[{student_id}] Significant risk score change: {previous.score} → {new.score}"
            )

    # ── Many students ──

    async def recompute_all(self, cancel_event: asyncio.Event | None = None) -> SweepReport:
        """
        Recompute every active student.

        Never aborts on a student failure. Cancellation is checked before each
        student starts; students never started are counted as skipped.
        """
        student_ids = await self.directory.list_active_student_ids()
        logger.info(f"Starting risk sweep over {len(student_ids)} active students")
        report = await self._sweep(student_ids, cancel_event)
        if self.audit_logger is not None:
            self.audit_logger.log(report)
        return report

    async def recompute_many(
        self,
        student_ids: Iterable[str],
        cancel_event: asyncio.Event | None = None,
    ) -> SweepReport:
        """Recompute an explicit set of students with the same isolation as a sweep."""
        return await self._sweep(list(student_ids), cancel_event)

    async def _sweep(
        self, student_ids: list[str], cancel_event: asyncio.Event | None
    ) -> SweepReport:
        sweep_id = str(uuid.uuid4())[:8]
        start_time = time.monotonic()
        cancel = cancel_event or asyncio.Event()
        report = SweepReport(sweep_id=sweep_id, started_at=self.clock())

        queue: asyncio.Queue[str] = asyncio.Queue()
        for student_id in dict.fromkeys(student_ids):
            queue.put_nowait(student_id)

        async def worker() -> None:
            while not cancel.is_set():
                try:
                    student_id = queue.get_nowait()
                except asyncio.QueueEmpty:
                    return
                report.attempted += 1
                try:
                    outcome = await asyncio.wait_for(
                        self._recompute(student_id), timeout=self.student_timeout
                    )
                except RecomputeFailedError as e:
                    report.failed.append(
                        RecomputeFailure(
                            student_id=student_id, cause=str(e.cause), error_type=e.error_type
                        )
                    )
                    continue
                except asyncio.TimeoutError:
                    cause = f"recompute timed out after {self.student_timeout}s"
                    logger.error(f"[{student_id}] Risk recompute failed: {cause}")
                    report.failed.append(
                        RecomputeFailure(student_id=student_id, cause=cause, error_type="TimeoutError")
                    )
                    continue
                report.succeeded += 1
                if outcome.level_changed:
                    report.level_changes += 1
                if outcome.escalated:
                    report.escalations += 1

        pool_size = max(1, min(self.sweep_concurrency, queue.qsize()))
        await asyncio.gather(*(worker() for _ in range(pool_size)))

        report.skipped = queue.qsize()
        report.cancelled = cancel.is_set()
        report.finished_at = self.clock()
        report.duration_ms = round((time.monotonic() - start_time) * 1000, 2)

        logger.info(
            f"[{sweep_id}] Risk sweep complete in {report.duration_ms:.0f}ms — "
            f"attempted={report.attempted}, succeeded={report.succeeded}, "
            f"failed={len(report.failed)}, skipped={report.skipped}, "
            f"level_changes={report.level_changes}, escalations={report.escalations}"
        )
        return report

    # ── Mutation hooks ──

    async def on_attendance_marked(
        self,
        class_id: str,
        day: date,
        records: list[AttendanceRecordInput],
    ) -> AttendanceMarkedResult:
        """
        React to a committed attendance mark for one class and day.

        Recomputes every student in the batch and raises the high-absence
        alert when the day's absent count reaches the threshold.
        """
        student_ids = [r.student_id for r in records]
        absent_ids = [r.student_id for r in records if r.is_absent]

        report = await self.recompute_many(student_ids)

        high_absence = False
        if self.high_absence is not None:
            high_absence = await self.high_absence.check(class_id, day, absent_ids)

        return AttendanceMarkedResult(
            class_id=class_id,
            date=day,
            absent_count=len(absent_ids),
            high_absence_alert=high_absence,
            recompute=report,
        )
