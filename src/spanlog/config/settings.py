"""
Configuration with Pydantic Settings.

Only ``create_default_logger`` reads these settings; a ``Logger`` built by hand
takes no configuration at all.
"""

import logging
from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """spanlog settings with environment variable support (``SPANLOG_*``)."""

    model_config = SettingsConfigDict(env_prefix="SPANLOG_", case_sensitive=False, extra="ignore")

    log_level: str = Field("INFO", description="Level for spanlog's own diagnostic logging")
    sink: Literal["json", "logging", "memory"] = Field("json")
    stream: Literal["stdout", "stderr"] = Field("stdout")
    service_name: str | None = Field(None, description="Written as root field 'service' when set")

    enable_event_timestamps: bool = Field(True)
    enable_span_timestamps: bool = Field(True)
    enable_trace_context: bool = Field(False)
    enable_metrics: bool = Field(False)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"unknown log level: {v}")
        return level


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
