"""
Attendance Hook — POST /attendance/marked

Called by the attendance service after a class's attendance for a day has
been committed. Recomputes the affected students and checks for high absence.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from dropout_risk.api.dependencies import get_risk_engine
from dropout_risk.models.api_models import AttendanceMarkedRequest, AttendanceMarkedResult
from dropout_risk.workers.recompute_worker import RiskEngine

router = APIRouter(prefix="/attendance", tags=["attendance"])


@router.post("/marked", response_model=AttendanceMarkedResult)
async def attendance_marked(
    req: AttendanceMarkedRequest,
    engine: RiskEngine = Depends(get_risk_engine),
):
    return await engine.on_attendance_marked(req.class_id, req.date, req.records)
