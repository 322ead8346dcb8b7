"""
FastAPI Dependencies — Shared singletons injected via Depends().
"""

from __future__ import annotations

from functools import lru_cache

from dropout_risk.audit.logger import AuditLogger
from dropout_risk.collaborators.memory import InMemoryEventPublisher, InMemoryStudentStore
from dropout_risk.config import settings
from dropout_risk.engine.notifier import HighAbsenceMonitor, TransitionNotifier
from dropout_risk.engine.signal_collector import SignalCollector
from dropout_risk.engine.state_writer import RiskProfileWriter
from dropout_risk.models.config_models import EngineConfig, load_engine_config
from dropout_risk.workers.recompute_worker import RiskEngine


@lru_cache
def get_engine_config() -> EngineConfig:
    """Validated scoring config. Raises InvalidConfigurationError on bad settings."""
    return load_engine_config(settings)


@lru_cache
def get_student_store() -> InMemoryStudentStore:
    """Shared student store singleton."""
    return InMemoryStudentStore()


@lru_cache
def get_event_publisher() -> InMemoryEventPublisher:
    """Shared event publisher singleton."""
    return InMemoryEventPublisher()


@lru_cache
def get_audit_logger() -> AuditLogger:
    """Shared sweep audit logger singleton."""
    return AuditLogger()


@lru_cache
def get_risk_engine() -> RiskEngine:
    """Shared risk engine singleton."""
    store = get_student_store()
    publisher = get_event_publisher()
    return RiskEngine(
        collector=SignalCollector(attendance=store, academic=store, profile=store),
        writer=RiskProfileWriter(store),
        notifier=TransitionNotifier(publisher),
        directory=store,
        config=get_engine_config(),
        high_absence=HighAbsenceMonitor(publisher),
        audit_logger=get_audit_logger(),
    )
