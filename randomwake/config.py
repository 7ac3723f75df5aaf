import os
from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings

DEFAULT_DATA_DIR = Path(__file__).resolve().parent / "data"


class Settings(BaseSettings):
    persistence_mode: Literal["database", "legacy", "hybrid"] = Field(
        "legacy",
        alias="RANDOMWAKE_PERSISTENCE_MODE",
    )
    data_dir: Path = Field(DEFAULT_DATA_DIR, alias="RANDOMWAKE_DATA_DIR")
    database_url: Optional[str] = Field(None, alias="RANDOMWAKE_DATABASE_URL")
    database_echo: bool = Field(False, alias="RANDOMWAKE_DATABASE_ECHO")
    language: Literal["en", "tr"] = Field("en", alias="RANDOMWAKE_LANGUAGE")
    default_task_type: Literal["math", "typing", "sequence", "shake"] = Field(
        "math",
        alias="RANDOMWAKE_DEFAULT_TASK_TYPE",
    )
    max_window_minutes: int = Field(30, ge=1, alias="RANDOMWAKE_MAX_WINDOW_MINUTES")
    streak_lookback_days: int = Field(365, ge=1, alias="RANDOMWAKE_STREAK_LOOKBACK_DAYS")
    pre_alarm_minutes: Optional[int] = Field(None, ge=1, alias="RANDOMWAKE_PRE_ALARM_MINUTES")

    class Config:
        env_file = os.getenv("ENV_FILE", ".env")
        env_file_encoding = "utf-8"
        case_sensitive = True


@lru_cache
def get_settings() -> Settings:
    try:
        return Settings()  # type: ignore[arg-type]
    except ValidationError as exc:
        raise RuntimeError(f"Invalid configuration: {exc}") from exc
