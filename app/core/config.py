"""
Application configuration models and helpers.

Centralizes settings management so the FastAPI app, the review core, and the
command-line scripts share a consistent configuration surface.
"""

from functools import lru_cache
from pathlib import Path
from typing import Annotated, Optional

import os

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


def _load_env_file(path: str = ".env") -> list[str]:
    """Copy ``KEY=value`` lines from ``path`` into ``os.environ``.

    Variables already present in the environment are left alone. Returns the
    names that were set.
    """
    env_path = Path(path)
    if not env_path.is_file():
        return []
    applied: list[str] = []
    for line in env_path.read_text(encoding="utf-8").splitlines():
        line = line.strip()
        if line.startswith("export "):
            line = line[len("export ") :].lstrip()
        key, sep, value = line.partition("=")
        key = key.strip()
        if line.startswith("#") or not sep or not key or key in os.environ:
            continue
        os.environ[key] = value.strip().strip("\"'")
        applied.append(key)
    return applied


_load_env_file()


class GeminiSettings(BaseSettings):
    """Configuration for Gemini model access."""

    model_config = SettingsConfigDict(env_prefix="GEMINI_", extra="ignore")

    api_key: str = Field(..., description="API key used to authenticate with Gemini.")
    model_name: str = Field("gemini-1.5-pro")
    vision_model_name: str = Field(
        "gemini-1.5-flash",
        description="Model used when the document arrives as a PDF or image.",
    )
    request_timeout_seconds: Optional[float] = Field(
        120.0,
        description="Upper bound for a single generate_content call.",
    )


class ReviewSettings(BaseSettings):
    """Limits applied to document review sessions."""

    model_config = SettingsConfigDict(env_prefix="REVIEW_", extra="ignore")

    session_ttl_seconds: int = Field(
        3600, description="Idle time after which an in-memory review is discarded."
    )
    max_document_bytes: int = Field(15 * 1024 * 1024)
    allowed_mime_types: Annotated[tuple[str, ...], NoDecode] = Field(
        (
            "text/plain",
            "application/pdf",
            "image/png",
            "image/jpeg",
        ),
    )

    @field_validator("allowed_mime_types", mode="before")
    @classmethod
    def _split_mime_types(
        cls, value: str | tuple[str, ...] | list[str]
    ) -> tuple[str, ...]:
        """Support providing MIME types as a comma-separated string."""
        if isinstance(value, tuple):
            return value
        if isinstance(value, list):
            return tuple(value)
        return tuple(item.strip() for item in value.split(",") if item.strip())


class AppSettings(BaseSettings):
    """Root settings object for the FastAPI application."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    environment: str = Field(
        "development", validation_alias=AliasChoices("APP_ENV", "environment")
    )
    log_level: str = Field(
        "INFO", validation_alias=AliasChoices("APP_LOG_LEVEL", "log_level")
    )
    gemini: GeminiSettings = Field(default_factory=GeminiSettings)
    review: ReviewSettings = Field(default_factory=ReviewSettings)


@lru_cache()
def get_settings() -> AppSettings:
    """Return a cached settings object."""
    return AppSettings()  # type: ignore[call-arg]


__all__ = [
    "AppSettings",
    "GeminiSettings",
    "ReviewSettings",
    "get_settings",
]
