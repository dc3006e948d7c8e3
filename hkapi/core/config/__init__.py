"""Configuration management module."""

from .settings import HKSettings, get_settings, reset_settings

__all__ = ["HKSettings", "get_settings", "reset_settings"]
