from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = "Account Mapper API"
    environment: str = "dev"
    api_prefix: str = "/v1"

    database_dsn: str = "sqlite:///./account_mapper.db"
    db_pool_size: int = Field(default=10, ge=1, le=200)
    db_max_overflow: int = Field(default=20, ge=0, le=400)
    db_pool_timeout_seconds: int = Field(default=60, ge=1, le=600)
    db_pool_recycle_seconds: int = Field(default=1800, ge=30, le=86400)

    redis_url: str = "redis://redis:6379/0"
    queue_mode: Literal["inline", "redis"] = "inline"
    queue_retry_max: int = Field(default=1, ge=0, le=10)
    queue_retry_interval_seconds: int = Field(default=30, ge=5, le=3600)

    cors_allow_origins: str = "http://localhost:3000,http://127.0.0.1:3000"

    llm_provider: str = "openai"
    llm_model: str = "gpt-4o-mini"
    extraction_backend: Literal["openai", "http", "local"] = "openai"
    extraction_endpoint: str = ""
    extraction_local_module: str = ""
    extraction_local_function: str = "extract_account_analysis"
    extraction_timeout_seconds: int = Field(default=120, ge=5, le=900)

    max_document_bytes: int = Field(default=10 * 1024 * 1024, ge=1)
    default_department: str = "General"

    layout_node_width: float = Field(default=260.0, gt=0)
    layout_node_height: float = Field(default=120.0, gt=0)
    layout_vertical_spacing: float = Field(default=200.0, ge=0)
    layout_horizontal_spacing: float = Field(default=60.0, ge=0)
    hierarchy_cycle_policy: Literal["break", "raise"] = "break"

    log_level: str = "INFO"
    log_format: Literal["text", "json"] = "text"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
