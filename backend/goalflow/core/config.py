"""Application configuration managed via environment variables."""
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = "GoalFlow Planner"
    debug: bool = False
    log_level: str = "INFO"
    default_time_of_day: str = "09:00"
    min_sessions_required: int = 10
    plan_dedupe_window_seconds: int = 120
    opik_enabled: bool = False
    opik_api_key: str | None = None
    opik_project: str = "goalflow"


@lru_cache
def get_settings() -> Settings:
    """Return a cached Settings instance."""
    return Settings()


settings = get_settings()
