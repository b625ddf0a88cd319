"""
Configuration module for the swipe shop service.

This module provides centralized configuration management using pydantic-settings.
All environment variables and configuration values should be accessed through this module.

Usage:
    from config import get_settings

    # Get settings instance (cached)
    settings = get_settings()

    # Access values
    seed = settings.catalog_seed
    is_dev = settings.is_development
"""

from config.settings import Settings, get_settings

__all__ = ["Settings", "get_settings"]
