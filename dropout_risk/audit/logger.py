"""
Audit Logger — Structured JSON-lines trail of risk sweeps.

Records every sweep with: timestamp, sweep_id, attempted/succeeded counts,
per-student failures, level changes, escalations, and duration.
"""

from __future__ import annotations

import json
import logging
import time
from pathlib import Path

from pydantic import ValidationError

from dropout_risk.config import settings
from dropout_risk.models.sweep_models import SweepReport

logger = logging.getLogger("dropout_risk.audit")


class AuditLogger:
    """Writes sweep reports to a JSON-lines file."""

    def __init__(self, log_path: str | None = None) -> None:
        self.log_path = Path(log_path or settings.audit_log_path)

    def log(self, report: SweepReport) -> None:
        """Append a sweep report to the log file."""
        record = {
            "timestamp": time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime()),
            **report.model_dump(mode="json"),
        }

        try:
            with open(self.log_path, "a") as f:
                f.write(json.dumps(record) + "\n")
        except OSError as e:
            logger.error(f"Failed to write sweep audit log: {e}")

    def read_recent(self, count: int = 50) -> list[SweepReport]:
        """
        Most recent N sweep reports, oldest first.

        Lines that are not valid JSON or no longer match the SweepReport
        shape are skipped with a warning.
        """
        if not self.log_path.exists():
            return []

        try:
            lines = self.log_path.read_text().splitlines()
        except OSError as e:
            logger.error(f"Failed to read sweep audit log: {e}")
            return []

        reports: list[SweepReport] = []
        for number, line in enumerate(lines, start=1):
            if not line.strip():
                continue
            try:
                reports.append(SweepReport.model_validate_json(line))
            except ValidationError as e:
                logger.warning(f"Skipping malformed audit entry on line {number}: {e.error_count()} errors")

        return reports[-count:]
