"""
Risk Engine Errors — Typed failures raised across the recompute pipeline.
"""

from __future__ import annotations


class RiskEngineError(Exception):
    """Base class for every risk engine failure."""


class InvalidConfigurationError(RiskEngineError):
    """Weights, thresholds or bands failed validation. Fatal at startup."""


class StudentNotFoundError(RiskEngineError):
    """A collaborator has no record of the student."""

    def __init__(self, student_id: str) -> None:
        super().__init__(f"Student not found: {student_id}")
        self.student_id = student_id


class SignalUnavailableError(RiskEngineError):
    """One collaborator could not be read. Recovered by the collector."""

    def __init__(self, source: str, reason: str) -> None:
        super().__init__(f"{source} signals unavailable: {reason}")
        self.source = source
        self.reason = reason


class AllSignalsUnavailableError(RiskEngineError):
    """No collaborator could be read for the student."""

    def __init__(self, student_id: str, reasons: dict[str, str]) -> None:
        detail = "; ".join(f"{source}: {reason}" for source, reason in reasons.items())
        super().__init__(f"All signal sources unavailable for {student_id} ({detail})")
        self.student_id = student_id
        self.reasons = reasons


class InsufficientSignalsError(RiskEngineError):
    """Every factor with a positive weight was excluded."""


class PersistenceFailureError(RiskEngineError):
    """The risk profile could not be committed after bounded retry."""


class RecomputeFailedError(RiskEngineError):
    """A recompute for one student was aborted; the stored profile is unchanged."""

    def __init__(self, student_id: str, cause: BaseException | str) -> None:
        self.student_id = student_id
        self.cause = cause
        self.error_type = type(cause).__name__ if isinstance(cause, BaseException) else "Error"
        super().__init__(f"Risk recompute failed for {student_id}: {cause}")
