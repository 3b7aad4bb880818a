from pathlib import Path

from pydantic_settings import BaseSettings
from functools import lru_cache

_BACKEND_DIR = Path(__file__).resolve().parents[1]
_ENV_FILES = (
    _BACKEND_DIR / ".env",
    ".env",
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    app_title: str = "CMS Content Sync"
    app_version: str = "0.1.0"
    app_env: str = "development"
    database_url: str = "sqlite:///./content.db"
    cors_origins: list[str] = ["http://localhost:5173"]

    # Admin write endpoints require "Authorization: Bearer <token>" when set
    admin_api_token: str = ""

    # Content API client
    api_base_url: str = "http://localhost:8000"
    channel_path: str = "/ws"
    request_timeout: float = 5.0
    delete_max_retries: int = 2
    retry_base_delay: float = 1.0
    refetch_delay: float = 0.5

    # Notification channel reconnection
    reconnect_max_attempts: int = 5
    reconnect_base_delay: float = 1.0
    reconnect_max_delay: float = 16.0

    # Logging: per-category log levels (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    log_level: str = "INFO"                  # Root / app-wide
    log_level_sql: str = "WARNING"           # sqlalchemy.engine SQL queries
    log_level_http: str = "WARNING"          # httpx / httpcore outbound HTTP
    log_level_uvicorn: str = "INFO"          # uvicorn.access / uvicorn.error
    log_level_sync: str = "INFO"             # Reconciler / local cache
    log_level_channel: str = "INFO"          # Channel supervisor / websockets

    model_config = {
        "env_file": _ENV_FILES,
        "env_file_encoding": "utf-8",
    }


@lru_cache
def get_settings() -> Settings:
    """Cached settings instance — reads .env once."""
    return Settings()
