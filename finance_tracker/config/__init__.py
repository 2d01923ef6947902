"""Configuration package."""

from finance_tracker.config.settings import (
    TIME_FRAME_CHOICES,
    AppSettings,
    DemoSettings,
    Settings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "TIME_FRAME_CHOICES",
    "AppSettings",
    "DemoSettings",
    "Settings",
    "get_settings",
    "validate_all_settings",
]
