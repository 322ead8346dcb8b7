"""
Risk Routes — Engine operations exposed to the rest of the application.

  GET  /risk/students/{student_id}            → stored profile + insights
  POST /risk/students/{student_id}/recompute  → recompute_one
  POST /risk/sweep                            → recompute_all
  GET  /risk/sweeps/recent                    → sweep audit trail
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query

from dropout_risk.api.dependencies import get_audit_logger, get_risk_engine, get_student_store
from dropout_risk.audit.logger import AuditLogger
from dropout_risk.collaborators.memory import InMemoryStudentStore
from dropout_risk.core.errors import RecomputeFailedError, StudentNotFoundError
from dropout_risk.core.insights import build_recommendations, dropout_outlook
from dropout_risk.models.api_models import RecentSweepsResponse, StudentRiskResponse
from dropout_risk.models.risk_models import RiskAssessment
from dropout_risk.models.sweep_models import SweepReport
from dropout_risk.workers.recompute_worker import RiskEngine

logger = logging.getLogger("dropout_risk.api.risk")
router = APIRouter(prefix="/risk", tags=["risk"])


@router.get("/students/{student_id}", response_model=StudentRiskResponse)
async def get_student_risk(
    student_id: str,
    store: InMemoryStudentStore = Depends(get_student_store),
):
    """Current risk profile with recommendations and dropout outlook."""
    try:
        profile = await store.get_risk_profile(student_id)
    except StudentNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    if profile is None:
        return StudentRiskResponse(student_id=student_id)

    return StudentRiskResponse(
        student_id=student_id,
        profile=profile,
        recommendations=build_recommendations(profile),
        outlook=dropout_outlook(profile.score),
    )


@router.post("/students/{student_id}/recompute", response_model=RiskAssessment)
async def recompute_student(
    student_id: str,
    engine: RiskEngine = Depends(get_risk_engine),
):
    """Recompute one student's risk from current signals."""
    try:
        return await engine.recompute_one(student_id)
    except RecomputeFailedError as e:
        status = 404 if isinstance(e.cause, StudentNotFoundError) else 503
        raise HTTPException(status_code=status, detail=str(e))


@router.post("/sweep", response_model=SweepReport)
async def run_sweep(engine: RiskEngine = Depends(get_risk_engine)):
    """Recompute every active student and return the sweep report."""
    return await engine.recompute_all()


@router.get("/sweeps/recent", response_model=RecentSweepsResponse)
async def recent_sweeps(
    count: int = Query(default=20, ge=1, le=500),
    audit: AuditLogger = Depends(get_audit_logger),
):
    """Most recent sweep reports from the audit trail."""
    return RecentSweepsResponse(sweeps=audit.read_recent(count))
