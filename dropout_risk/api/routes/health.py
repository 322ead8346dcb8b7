"""
Health Check Route — GET /health
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from dropout_risk.api.dependencies import get_engine_config
from dropout_risk.models.config_models import EngineConfig

router = APIRouter()


@router.get("/health")
async def health(config: EngineConfig = Depends(get_engine_config)):
    """Health check endpoint."""
    return {
        "status": "ok",
        "version": "1.0.0",
        "thresholds": config.thresholds.model_dump(),
        "weights": {f.value: w for f, w in config.weights.weights.items()},
    }
