"""Codec configuration utilities."""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class LoggingConfig(BaseModel):
    level: str = Field(default="INFO", description="Root logger level")
    json_logs: bool = Field(default=True, description="Enable JSON formatted logs")


class Settings(BaseSettings):
    """Codec settings loaded from ``KHQR_``-prefixed environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="KHQR_",
        env_nested_delimiter="__",
        env_file=(Path(__file__).resolve().parent.parent / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    default_currency: Literal["KHR", "USD"] = Field(default="KHR")
    default_merchant_category_code: str = Field(default="5999", pattern=r"^[0-9]{4}$")
    min_qr_length: int = Field(default=12, ge=12)
    error_segment_length: int = Field(default=16, ge=1, le=64)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return memoized codec settings."""

    return Settings()


settings = get_settings()
