"""Expose dependency helpers for FastAPI routers."""

from .clients import (
    get_event_bus,
    get_gemini_client,
    get_review_service,
    get_review_store,
    get_review_tools,
)
from .config import SettingsDependency, get_app_settings

__all__ = [
    "SettingsDependency",
    "get_app_settings",
    "get_event_bus",
    "get_gemini_client",
    "get_review_service",
    "get_review_store",
    "get_review_tools",
]
