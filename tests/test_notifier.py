"""
Tests for Transition Notifier and high-absence alerts.
"""

from datetime import date
from itertools import product

import pytest

from dropout_risk.engine.notifier import (
    HIGH_ABSENCE,
    RISK_ESCALATED,
    HighAbsenceMonitor,
    TransitionNotifier,
)
from dropout_risk.models.risk_models import FactorName, RiskAssessment, RiskLevel, severity


class BrokenPublisher:
    def __init__(self) -> None:
        self.attempts = 0

    async def publish(self, event_name, payload):
        self.attempts += 1
        raise ConnectionError("event bus down")


def _assessment(now, level: RiskLevel, score: int = 50) -> RiskAssessment:
    return RiskAssessment(
        score=score,
        level=level,
        factors={f: score for f in FactorName},
        computed_at=now,
    )


@pytest.mark.asyncio
@pytest.mark.parametrize("previous,new", list(product(RiskLevel, RiskLevel)))
async def test_only_strict_increases_publish(publisher, now, previous, new):
    notifier = TransitionNotifier(publisher, max_attempts=2)
    escalated = await notifier.notify("stu-001", previous, _assessment(now, new))

    expected = severity(new) > severity(previous)
    assert escalated is expected
    assert len(publisher.named(RISK_ESCALATED)) == (1 if expected else 0)


@pytest.mark.asyncio
async def test_first_assessment_compares_against_low(publisher, now):
    notifier = TransitionNotifier(publisher, max_attempts=2)

    assert await notifier.notify("stu-001", None, _assessment(now, RiskLevel.LOW)) is False
    assert await notifier.notify("stu-002", None, _assessment(now, RiskLevel.MEDIUM)) is True

    payload = publisher.named(RISK_ESCALATED)[0]
    assert payload["previousLevel"] == "Low"
    assert payload["newLevel"] == "Medium"


@pytest.mark.asyncio
async def test_escalation_payload(publisher, now):
    notifier = TransitionNotifier(publisher, max_attempts=2)
    await notifier.notify(
        "stu-001", RiskLevel.MEDIUM, _assessment(now, RiskLevel.HIGH, score=64), previous_score=32
    )

    payload = publisher.named(RISK_ESCALATED)[0]
    assert payload["studentId"] == "stu-001"
    assert payload["previousLevel"] == "Medium"
    assert payload["newLevel"] == "High"
    assert payload["score"] == 64
    assert payload["previousScore"] == 32
    assert payload["factors"]["attendance"] == 64
    assert payload["computedAt"] == now.isoformat()


@pytest.mark.asyncio
async def test_publish_failure_is_swallowed(now):
    broken = BrokenPublisher()
    notifier = TransitionNotifier(broken, max_attempts=3)

    escalated = await notifier.notify("stu-001", RiskLevel.LOW, _assessment(now, RiskLevel.CRITICAL))

    assert escalated is True
    assert broken.attempts == 3


@pytest.mark.asyncio
async def test_high_absence_below_threshold(publisher):
    monitor = HighAbsenceMonitor(publisher, threshold=5, max_attempts=2)
    alerted = await monitor.check("8-A", date(2026, 10, 19), ["a", "b", "c", "d"])

    assert alerted is False
    assert publisher.named(HIGH_ABSENCE) == []


@pytest.mark.asyncio
async def test_high_absence_at_threshold(publisher):
    monitor = HighAbsenceMonitor(publisher, threshold=5, max_attempts=2)
    absent = ["a", "b", "c", "d", "e"]
    alerted = await monitor.check("8-A", date(2026, 10, 19), absent)

    assert alerted is True
    payload = publisher.named(HIGH_ABSENCE)[0]
    assert payload["classId"] == "8-A"
    assert payload["date"] == "2026-10-19"
    assert payload["absentCount"] == 5
    assert payload["absentStudentIds"] == absent
    assert payload["threshold"] == 5


@pytest.mark.asyncio
async def test_high_absence_publish_failure_is_swallowed():
    broken = BrokenPublisher()
    monitor = HighAbsenceMonitor(broken, threshold=1, max_attempts=2)

    assert await monitor.check("8-A", date(2026, 10, 19), ["a"]) is True
    assert broken.attempts == 2
