"""Configuration module for hrbridge."""

from hrbridge.config.settings import Settings, TokenCacheBackend, get_settings

__all__ = ["Settings", "TokenCacheBackend", "get_settings"]
