"""
Configuration Module

Application configuration loaded from environment variables.

Usage:
======
    from reelcore.config.settings import settings

    threshold = settings.TRENDING_THRESHOLD
    is_dev = settings.is_development
"""

from reelcore.config.settings import settings, get_settings, Settings

__all__ = [
    "settings",
    "get_settings",
    "Settings",
]
