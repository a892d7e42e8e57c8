"""Configuration package."""

from .settings import CalendarCloneSettings, get_settings, reset_settings

__all__ = ["CalendarCloneSettings", "get_settings", "reset_settings"]
