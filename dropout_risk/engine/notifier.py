"""
Transition Notifier — Publishes risk escalations and high-absence alerts.

Publishing is fire-and-forget from the engine's point of view: failures are
retried a bounded number of times, logged, and swallowed. A notification can
never fail or undo the recompute that produced it.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any

from dropout_risk.collaborators.protocols import EventPublisher
from dropout_risk.config import settings
from dropout_risk.models.risk_models import RiskAssessment, RiskLevel, severity

logger = logging.getLogger("dropout_risk.engine.notifier")

RISK_ESCALATED = "risk:escalated"
HIGH_ABSENCE = "attendance:highAbsence"


async def publish_safely(
    publisher: EventPublisher,
    event_name: str,
    payload: dict[str, Any],
    max_attempts: int,
) -> bool:
    """Publish with bounded retry. Returns False instead of raising."""
    for attempt in range(max_attempts):
        try:
            await publisher.publish(event_name, payload)
            return True
        except Exception as e:
            logger.warning(f"Publish {event_name} attempt {attempt + 1}/{max_attempts} failed: {e}")
    logger.error(f"Dropping {event_name} event after {max_attempts} attempts")
    return False


class TransitionNotifier:
    """Compares consecutive tiers and announces escalations."""

    def __init__(self, publisher: EventPublisher, max_attempts: int | None = None) -> None:
        self.publisher = publisher
        self.max_attempts = max_attempts or settings.publish_max_attempts

    @staticmethod
    def is_escalation(previous_level: RiskLevel | None, new_level: RiskLevel) -> bool:
        # Students start at Low before their first recompute
        return severity(new_level) > severity(previous_level or RiskLevel.LOW)

    async def notify(
        self,
        student_id: str,
        previous_level: RiskLevel | None,
        assessment: RiskAssessment,
        previous_score: int | None = None,
    ) -> bool:
        """
        Publish risk:escalated if the tier strictly increased.

        Returns:
            True if this transition was an escalation (whether or not the
            publish succeeded).
        """
        if not self.is_escalation(previous_level, assessment.level):
            return False

        payload = {
            "studentId": student_id,
            "previousLevel": (previous_level or RiskLevel.LOW).value,
            "newLevel": assessment.level.value,
            "score": assessment.score,
            "previousScore": previous_score,
            "factors": {f.value: s for f, s in assessment.factors.items()},
            "computedAt": assessment.computed_at.isoformat(),
        }
        logger.info(
            f"[{student_id}] Risk escalated "
            f"{payload['previousLevel']} → {payload['newLevel']} (score={assessment.score})"
        )
        await publish_safely(self.publisher, RISK_ESCALATED, payload, self.max_attempts)
        return True


class HighAbsenceMonitor:
    """Alerts when too many students of one class are absent on one day."""

    def __init__(
        self,
        publisher: EventPublisher,
        threshold: int | None = None,
        max_attempts: int | None = None,
    ) -> None:
        self.publisher = publisher
        self.threshold = threshold or settings.high_absence_threshold
        self.max_attempts = max_attempts or settings.publish_max_attempts

    async def check(
        self, class_id: str, day: date, absent_student_ids: list[str]
    ) -> bool:
        """Publish attendance:highAbsence when the absent count reaches the threshold."""
        absent_count = len(absent_student_ids)
        if absent_count < self.threshold:
            return False

        logger.info(f"High absence in class {class_id} on {day}: {absent_count} absent")
        await publish_safely(
            self.publisher,
            HIGH_ABSENCE,
            {
                "classId": class_id,
                "date": day.isoformat(),
                "absentCount": absent_count,
                "absentStudentIds": list(absent_student_ids),
                "threshold": self.threshold,
            },
            self.max_attempts,
        )
        return True
