# landval/core/config.py
import os
from pathlib import Path
from pydantic_settings import BaseSettings, SettingsConfigDict

PROJECT_ROOT = Path(__file__).parent.parent.parent.parent

class Settings(BaseSettings):
    app_name: str = "LandVal Pipeline"
    env: str = "local"

    # =========================
    # Upstream Valuation API
    # =========================
    VALUATION_API_BASE_URL: str = "http://localhost:5000"
    VALUATION_API_TIMEOUT_SECONDS: float = 15.0
    VALUATION_API_MAX_RETRIES: int = 2

    # Matches the UI refetch interval
    VALUATION_POLL_INTERVAL_SECONDS: float = 2.0

    # Finished (completed/failed) valuations keep their frozen view this long, then are dropped
    VALUATION_TERMINAL_RETENTION_SECONDS: float = 300.0

    # =========================
    # Pipeline progress display
    # =========================
    PIPELINE_ELAPSED_TICK_SECONDS: float = 1.0
    PIPELINE_PHRASE_ROTATE_SECONDS: float = 1.5
    PIPELINE_DOTS_TICK_SECONDS: float = 0.5

    # Nominal total duration used for the progress bar; not measured from backend timings
    PIPELINE_NOMINAL_DURATION_SECONDS: float = 45.0
    PIPELINE_PROGRESS_CAP: float = 0.95

    # "Property Input" stays active this long after creation while nothing is computed yet
    PIPELINE_INPUT_GRACE_SECONDS: float = 2.0

    # CORS
    CORS_ALLOW_ORIGINS: str | None = None
    CORS_ALLOW_VERCEL_PREVIEWS: bool = False

    model_config = SettingsConfigDict(
        env_file=os.path.join(PROJECT_ROOT, ".env"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

settings = Settings()
