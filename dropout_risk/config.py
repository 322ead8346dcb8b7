"""
Dropout Risk Configuration — pydantic-settings based.

All settings are read from environment variables or .env file.
Scoring values (weights, thresholds, bands) are validated into an immutable
EngineConfig once at startup; see dropout_risk.models.config_models.
"""

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application-wide settings sourced from environment variables."""

    # ── Scoring ──
    risk_weights: dict[str, float] = Field(
        default={
            "attendance": 0.25,
            "academic": 0.25,
            "financial": 0.15,
            "behavioral": 0.10,
            "health": 0.10,
            "distance": 0.10,
            "family": 0.05,
        },
        description="Factor weights, must cover every factor and sum to 1.0",
    )
    risk_threshold_low: int = Field(default=30, description="Scores below this are Low")
    risk_threshold_medium: int = Field(default=60, description="Scores below this are Medium")
    risk_threshold_high: int = Field(default=80, description="Scores at or above this are Critical")

    # ── Normalization ──
    health_flag_score: int = Field(default=70, description="Subscore when a health issue is flagged")
    behavioral_flag_score: int = Field(default=70, description="Subscore when a behavioral issue is flagged")
    family_flag_score: int = Field(default=70, description="Subscore when a family problem is flagged")
    economic_flag_score: int = Field(default=70, description="Subscore when economic distress is flagged")
    distance_bands: list[tuple[float, int]] = Field(
        default=[(2.0, 10), (5.0, 30), (10.0, 50)],
        description="(upper km inclusive, subscore) bands, ascending",
    )
    distance_beyond_score: int = Field(
        default=80, description="Subscore beyond the last distance band"
    )
    income_tier_scores: dict[str, int] = Field(
        default={
            "below_poverty_line": 80,
            "low": 50,
            "middle": 20,
            "high": 0,
            "unknown": 0,
        },
        description="Family distress subscore per income tier",
    )

    # ── Signals ──
    academic_year_start_month: int = Field(
        default=4, ge=1, le=12, description="Month the signal window starts on"
    )
    source_timeout_seconds: float = Field(
        default=5.0, description="Timeout for a single collaborator read"
    )

    # ── Recompute ──
    sweep_concurrency: int = Field(default=8, ge=1, description="Worker pool size for sweeps")
    student_timeout_seconds: float = Field(
        default=30.0, description="Upper bound on one student's pipeline during a sweep"
    )
    writer_max_attempts: int = Field(default=3, ge=1, description="Persistence attempts per write")
    writer_backoff_seconds: float = Field(
        default=0.2, description="Base delay for exponential write backoff"
    )
    significant_score_change: int = Field(
        default=10, description="Score delta logged as significant"
    )

    # ── Notifications ──
    publish_max_attempts: int = Field(default=2, ge=1, description="Publish attempts per event")
    high_absence_threshold: int = Field(
        default=5, ge=1, description="Absent count per class and day that raises an alert"
    )

    # ── Scheduler ──
    scheduled_sweep_enabled: bool = Field(
        default=False, description="Feature flag: run a periodic background sweep"
    )
    sweep_interval_seconds: int = Field(
        default=86_400, description="Seconds between scheduled sweeps"
    )

    # ── Server ──
    port: int = Field(default=5001, description="Server port")
    host: str = Field(default="0.0.0.0", description="Server bind host")
    cors_origins: list[str] = Field(
        default=["*"], description="Allowed CORS origins"
    )

    # ── Audit ──
    audit_log_path: str = Field(
        default="sweep_audit.jsonl", description="Path to JSON-lines sweep audit log"
    )

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
    }


# Singleton instance — imported by other modules
settings = Settings()
