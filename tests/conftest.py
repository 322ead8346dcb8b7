"""
Test fixtures shared across all risk engine tests.
"""

import asyncio
from datetime import date, datetime, timedelta, timezone

import pytest

from dropout_risk.collaborators.memory import (
    AttendanceStatus,
    InMemoryEventPublisher,
    InMemoryStudentStore,
    StudentRecord,
)
from dropout_risk.engine.notifier import HighAbsenceMonitor, TransitionNotifier
from dropout_risk.engine.signal_collector import SignalCollector
from dropout_risk.engine.state_writer import RiskProfileWriter
from dropout_risk.models.config_models import EngineConfig, ThresholdConfig, WeightConfig
from dropout_risk.models.risk_models import FactorName
from dropout_risk.models.signal_models import IncomeTier, ProfileFlags
from dropout_risk.workers.recompute_worker import RiskEngine

NOW = datetime(2026, 10, 19, 9, 0, tzinfo=timezone.utc)
TERM_START = date(2026, 9, 1)

DEFAULT_WEIGHTS = {
    FactorName.ATTENDANCE: 0.25,
    FactorName.ACADEMIC: 0.25,
    FactorName.FINANCIAL: 0.15,
    FactorName.BEHAVIORAL: 0.10,
    FactorName.HEALTH: 0.10,
    FactorName.DISTANCE: 0.10,
    FactorName.FAMILY: 0.05,
}


class FlakySources:
    """
    Wraps a student store and injects outages or latency per source/student.

    Sources: "attendance", "academic", "profile". A student_id of None
    applies to every student.
    """

    def __init__(self, store: InMemoryStudentStore) -> None:
        self.store = store
        self.failures: dict[tuple[str, str | None], Exception] = {}
        self.delays: dict[tuple[str, str | None], float] = {}
        self.calls: dict[str, int] = {"attendance": 0, "academic": 0, "profile": 0}

    def fail(self, source: str, student_id: str | None = None, exc: Exception | None = None):
        self.failures[(source, student_id)] = exc or ConnectionError(f"{source} store unreachable")

    def delay(self, source: str, seconds: float, student_id: str | None = None):
        self.delays[(source, student_id)] = seconds

    def heal(self) -> None:
        self.failures.clear()
        self.delays.clear()

    async def _guard(self, source: str, student_id: str) -> None:
        self.calls[source] += 1
        delay = self.delays.get((source, student_id), self.delays.get((source, None)))
        if delay:
            await asyncio.sleep(delay)
        exc = self.failures.get((source, student_id)) or self.failures.get((source, None))
        if exc is not None:
            raise exc

    async def get_attendance_summary(self, student_id, window):
        await self._guard("attendance", student_id)
        return await self.store.get_attendance_summary(student_id, window)

    async def get_academic_summary(self, student_id, window):
        await self._guard("academic", student_id)
        return await self.store.get_academic_summary(student_id, window)

    async def get_student_profile_flags(self, student_id):
        await self._guard("profile", student_id)
        return await self.store.get_student_profile_flags(student_id)


class FlakyProfileStore:
    """Fails the first `failures` risk profile writes, then delegates to the store."""

    def __init__(self, store, failures: int, exc: Exception | None = None) -> None:
        self.store = store
        self.failures = failures
        self.exc = exc or ConnectionError("write conflict")
        self.attempts = 0

    async def get_risk_profile(self, student_id):
        return await self.store.get_risk_profile(student_id)

    async def update_risk_profile(self, student_id, profile):
        self.attempts += 1
        if self.attempts <= self.failures:
            raise self.exc
        return await self.store.update_risk_profile(student_id, profile)


def seed_student(
    store: InMemoryStudentStore,
    student_id: str,
    present: int = 5,
    absent: int = 5,
    grades: tuple[float, ...] = (40.0,),
    class_id: str = "8-A",
    active: bool = True,
    **flags,
) -> StudentRecord:
    """
    Add a student whose signals default to the worked example:
    50 % attendance, 40 % academic average, 3 km, middle income, no flags.
    """
    profile = {"distance_km": 3.0, "income_tier": IncomeTier.MIDDLE, **flags}
    record = StudentRecord(
        student_id=student_id,
        full_name=f"Student {student_id}",
        class_id=class_id,
        active=active,
        flags=ProfileFlags(**profile),
    )
    for i in range(present + absent):
        status = AttendanceStatus.PRESENT if i < present else AttendanceStatus.ABSENT
        record.attendance[TERM_START + timedelta(days=i)] = status
    for i, mark in enumerate(grades):
        record.grades.append((TERM_START + timedelta(days=i), mark))
    return store.add_student(record)


@pytest.fixture
def engine_config():
    """Worked-example weights with the canonical 30/60/80 thresholds."""
    return EngineConfig(
        weights=WeightConfig(weights=DEFAULT_WEIGHTS),
        thresholds=ThresholdConfig(low=30, medium=60, high=80),
    )


@pytest.fixture
def store():
    return InMemoryStudentStore()


@pytest.fixture
def publisher():
    return InMemoryEventPublisher()


@pytest.fixture
def sources(store):
    return FlakySources(store)


@pytest.fixture
def make_engine(store, sources, publisher, engine_config):
    """Factory for a RiskEngine over the in-memory store with a fixed clock."""

    def _make(
        profile_store=None,
        source_timeout: float = 1.0,
        sweep_concurrency: int = 4,
        student_timeout: float = 5.0,
        writer_attempts: int = 3,
        audit_logger=None,
        config: EngineConfig | None = None,
        attendance=None,
    ) -> RiskEngine:
        collector = SignalCollector(
            attendance=attendance or sources,
            academic=sources,
            profile=sources,
            source_timeout=source_timeout,
            academic_year_start_month=4,
            clock=lambda: NOW,
        )
        return RiskEngine(
            collector=collector,
            writer=RiskProfileWriter(
                profile_store or store, max_attempts=writer_attempts, backoff_seconds=0
            ),
            notifier=TransitionNotifier(publisher, max_attempts=2),
            directory=store,
            config=config or engine_config,
            high_absence=HighAbsenceMonitor(publisher, threshold=5, max_attempts=2),
            audit_logger=audit_logger,
            sweep_concurrency=sweep_concurrency,
            student_timeout=student_timeout,
            clock=lambda: NOW,
        )

    return _make


@pytest.fixture
def example_student(store):
    return seed_student(store, "stu-001")


@pytest.fixture
def seed(store):
    """seed(student_id, **overrides) adds a student to the shared store."""

    def _seed(student_id: str, **kwargs) -> StudentRecord:
        return seed_student(store, student_id, **kwargs)

    return _seed


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def flaky_profiles(store):
    """flaky_profiles(failures) wraps the shared store with failing profile writes."""

    def _make(failures: int, exc: Exception | None = None) -> FlakyProfileStore:
        return FlakyProfileStore(store, failures, exc)

    return _make
