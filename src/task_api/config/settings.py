"""Application settings."""

from functools import lru_cache
import os
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

PROJECT_ROOT = Path(__file__).resolve().parents[3]

DEFAULT_APP_ENV = "development"


class Settings(BaseSettings):
    """Runtime settings loaded from environment variables."""

    app_name: str = "task-api"
    app_env: str = ""
    log_level: str = "INFO"
    storage_backend: Literal["dynamodb", "memory"] = "dynamodb"
    table_name: str = ""
    auto_create_table: bool = False
    aws_region: str = "us-east-1"
    dynamodb_endpoint_url: str = ""
    dynamodb_connect_timeout_s: float = Field(default=2.0, gt=0)
    dynamodb_read_timeout_s: float = Field(default=5.0, gt=0)
    query_page_size: int | None = Field(default=None, ge=1)

    model_config = SettingsConfigDict(
        env_prefix="TASK_API_",
        extra="ignore",
        env_file=(PROJECT_ROOT / ".env", PROJECT_ROOT / ".env.local"),
        env_file_encoding="utf-8",
    )

    def resolved_app_env(self) -> str:
        return self.app_env or os.getenv("APP_ENVIRONMENT", "") or DEFAULT_APP_ENV

    def resolved_table_name(self) -> str:
        return self.table_name or f"{self.resolved_app_env()}-tasks-api"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
