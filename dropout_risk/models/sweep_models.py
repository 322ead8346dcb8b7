"""
Sweep Data Models — Outcome of a multi-student recompute run.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class RecomputeFailure(BaseModel):
    """One student whose recompute was aborted."""

    student_id: str
    cause: str = Field(..., description="Human-readable failure cause")
    error_type: str = Field(default="Error", description="Exception class behind the failure")


class SweepReport(BaseModel):
    """Produced once per sweep; returned to the caller and written to the audit log."""

    sweep_id: str
    attempted: int = 0
    succeeded: int = 0
    failed: list[RecomputeFailure] = Field(default_factory=list)
    skipped: int = Field(default=0, description="Students never started because the sweep was cancelled")
    cancelled: bool = False
    level_changes: int = 0
    escalations: int = 0
    started_at: datetime
    finished_at: datetime | None = None
    duration_ms: float = 0.0
