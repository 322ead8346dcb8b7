"""
Denormalized State Writer — The single owner of a student's risk fields.

Every risk profile write in the service goes through RiskProfileWriter. The
store performs a field-level replace of the risk subset, so concurrent
unrelated edits survive and concurrent recomputes resolve last-write-wins
without ever mixing fields from two assessments.
"""

from __future__ import annotations

import asyncio
import logging

from dropout_risk.collaborators.protocols import RiskProfileStore
from dropout_risk.config import settings
from dropout_risk.core.errors import PersistenceFailureError, StudentNotFoundError
from dropout_risk.models.risk_models import RiskAssessment, StudentRiskProfile

logger = logging.getLogger("dropout_risk.engine.writer")


class RiskProfileWriter:
    """Store wrapper with bounded retry and exponential backoff."""

    def __init__(
        self,
        store: RiskProfileStore,
        max_attempts: int | None = None,
        backoff_seconds: float | None = None,
    ) -> None:
        self.store = store
        self.max_attempts = max_attempts or settings.writer_max_attempts
        self.backoff_seconds = (
            backoff_seconds if backoff_seconds is not None else settings.writer_backoff_seconds
        )

    async def write(
        self, student_id: str, assessment: RiskAssessment
    ) -> StudentRiskProfile | None:
        """
        Replace the student's risk profile with a fresh assessment.

        Returns:
            The profile that was replaced, or None on the first write.

        Raises:
            StudentNotFoundError: if the store has no such student.
            PersistenceFailureError: if every attempt failed.
        """
        profile = StudentRiskProfile.from_assessment(assessment)
        last_error: Exception | None = None

        for attempt in range(self.max_attempts):
            try:
                return await self.store.update_risk_profile(student_id, profile)
            except StudentNotFoundError:
                raise
            except Exception as e:
                last_error = e
                logger.warning(
                    f"[{student_id}] Risk profile write {attempt + 1}/{self.max_attempts} failed: {e}"
                )
                if attempt < self.max_attempts - 1:
                    await asyncio.sleep(self.backoff_seconds * (2 ** attempt))

        raise PersistenceFailureError(
            f"Could not persist risk profile for {student_id} after "
            f"{self.max_attempts} attempts: {last_error}"
        ) from last_error
