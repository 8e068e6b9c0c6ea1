"""Configuration package."""

from comptara.config.settings import (
    AIClientSettings,
    AppSettings,
    GeminiSettings,
    GoogleSheetsSettings,
    Settings,
    SyncSettings,
    WalletSettings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AIClientSettings",
    "AppSettings",
    "GeminiSettings",
    "GoogleSheetsSettings",
    "Settings",
    "SyncSettings",
    "WalletSettings",
    "get_settings",
    "validate_all_settings",
]
