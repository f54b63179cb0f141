"""Configuration package."""

from ledger_service.config.settings import (
    AppSettings,
    AuthSettings,
    GoogleSheetsSettings,
    RateLimitSettings,
    RedisSettings,
    Settings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "AuthSettings",
    "GoogleSheetsSettings",
    "RateLimitSettings",
    "RedisSettings",
    "Settings",
    "get_settings",
    "validate_all_settings",
]
