"""
FastAPI dependencies exposing configuration to route handlers.
"""

from fastapi import Depends

from app.core.config import AppSettings, get_settings


def get_app_settings() -> AppSettings:
    """FastAPI dependency returning the cached application settings."""
    return get_settings()


SettingsDependency = Depends(get_app_settings)

__all__ = ["SettingsDependency", "get_app_settings"]
