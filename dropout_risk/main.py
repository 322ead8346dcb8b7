"""
Dropout Risk FastAPI Application.

Risk assessment engine for the school administration system:
  POST /risk/students/{id}/recompute → recompute one student's risk
  POST /risk/sweep                   → recompute every active student
  POST /attendance/marked            → attendance mutation hook
  GET  /health                       → {"status": "ok", ...}
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from dotenv import load_dotenv
load_dotenv()

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from dropout_risk.api.dependencies import get_engine_config, get_risk_engine
from dropout_risk.api.routes.attendance import router as attendance_router
from dropout_risk.api.routes.health import router as health_router
from dropout_risk.api.routes.risk import router as risk_router
from dropout_risk.config import settings
from dropout_risk.workers.scheduler import SweepScheduler

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("dropout_risk")


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Refuse to start on invalid weights or thresholds
    get_engine_config()
    scheduler: SweepScheduler | None = None
    if settings.scheduled_sweep_enabled:
        scheduler = SweepScheduler(get_risk_engine(), settings.sweep_interval_seconds)
        scheduler.start()
    yield
    if scheduler is not None:
        await scheduler.stop()


app = FastAPI(
    title="Dropout Risk Engine",
    description="Multi-factor student dropout risk scoring and classification",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health_router)
app.include_router(risk_router)
app.include_router(attendance_router)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    body = await request.body()
    logger.error(f"Validation Error. Raw body: {body.decode('utf-8')[:500]} | Errors: {exc.errors()}")
    return JSONResponse(
        status_code=422,
        content={"detail": jsonable_encoder(exc.errors()), "body": body.decode("utf-8")[:100]},
    )
