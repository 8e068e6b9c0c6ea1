"""
Configuration Management for Comptara

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
This makes it easy to see what external dependencies exist and
ensures all required configuration is validated at startup.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class SyncSettings(BaseSettings):
    """Offline queue and local cache configuration."""

    model_config = SettingsConfigDict(
        env_prefix="SYNC_",
        extra="ignore"
    )

    storage_path: Optional[str] = Field(
        default=None,
        description="JSON file backing local storage (in-memory if unset)"
    )
    queue_key: str = Field(
        default="comptara_offline_queue",
        description="Local storage key holding the pending-write queue"
    )
    cache_key_prefix: str = Field(
        default="comptara_cache_",
        description="Prefix of the per-identity snapshot cache key"
    )
    offline_wallet_sentinel: str = Field(
        default="offline",
        description="Wallet address recorded when no wallet is connected"
    )
    start_online: bool = Field(
        default=True,
        description="Initial connectivity state of the network monitor"
    )
    connectivity_url: Optional[str] = Field(
        default=None,
        description="URL requested by the network monitor's connectivity check"
    )
    connectivity_timeout_seconds: float = Field(
        default=5.0,
        gt=0,
        description="Timeout for the connectivity check"
    )


class GoogleSheetsSettings(BaseSettings):
    """Google Sheets remote data service configuration."""

    model_config = SettingsConfigDict(
        env_prefix="GOOGLE_SHEETS_",
        extra="ignore"
    )

    credentials_path: str = Field(
        ...,
        description="Path to Google service account credentials JSON"
    )
    spreadsheet_id: str = Field(
        ...,
        description="ID of the Google Sheets spreadsheet to use"
    )

    # Sheet names within the spreadsheet
    entries_sheet_name: str = Field(
        default="accounting_entries",
        description="Name of the sheet for accounting entries"
    )
    payments_sheet_name: str = Field(
        default="payments",
        description="Name of the sheet for payments"
    )
    audit_sheet_name: str = Field(
        default="AuditLog",
        description="Name of the sheet for audit logs"
    )

    @field_validator('credentials_path')
    @classmethod
    def validate_credentials_path(cls, v: str) -> str:
        """Warn if credentials file doesn't exist (but don't fail - might be mounted later)."""
        if not Path(v).exists():
            import warnings
            warnings.warn(
                f"Google credentials file not found at {v}. "
                "Make sure it exists before running the application."
            )
        return v


class GeminiSettings(BaseSettings):
    """Hosted LLM configuration used by the AI accountant gateway."""

    model_config = SettingsConfigDict(
        env_prefix="GEMINI_",
        extra="ignore"
    )

    api_key: str = Field(
        ...,
        description="Gemini API key"
    )
    model_name: str = Field(
        default="gemini-1.5-flash",
        description="Gemini model to use"
    )
    max_tokens: int = Field(
        default=4096,
        ge=100,
        le=8192,
        description="Maximum tokens in response"
    )
    temperature: float = Field(
        default=0.2,
        ge=0.0,
        le=1.0,
        description="Model temperature (lower = more deterministic)"
    )


class AIClientSettings(BaseSettings):
    """Client side of the AI analysis boundary."""

    model_config = SettingsConfigDict(
        env_prefix="AI_",
        extra="ignore"
    )

    functions_url: str = Field(
        ...,
        description="Base URL of the hosted functions (without trailing slash)"
    )
    publishable_key: str = Field(
        ...,
        description="Anonymous key used when the session has no access token"
    )
    function_name: str = Field(
        default="ai-accountant",
        description="Name of the analysis function"
    )
    timeout_seconds: float = Field(
        default=120.0,
        gt=0,
        description="HTTP timeout for analysis requests"
    )

    @field_validator('functions_url')
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")


class WalletSettings(BaseSettings):
    """JSON-RPC wallet provider configuration."""

    model_config = SettingsConfigDict(
        env_prefix="WALLET_",
        extra="ignore"
    )

    rpc_url: str = Field(
        default="https://testnet.hashio.io/api",
        description="JSON-RPC endpoint of the wallet provider"
    )
    timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="HTTP timeout for JSON-RPC calls"
    )


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Environment
    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    default_currency: str = Field(
        default="HBAR",
        min_length=1,
        max_length=10,
        description="Currency used when a draft does not name one"
    )


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Sub-settings are loaded lazily to allow partial configuration

    @property
    def sync(self) -> SyncSettings:
        return SyncSettings()

    @property
    def google_sheets(self) -> GoogleSheetsSettings:
        return GoogleSheetsSettings()

    @property
    def gemini(self) -> GeminiSettings:
        return GeminiSettings()

    @property
    def ai_client(self) -> AIClientSettings:
        return AIClientSettings()

    @property
    def wallet(self) -> WalletSettings:
        return WalletSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Uses LRU cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}.
    Useful for startup checks.
    """
    results = {}
    settings = get_settings()

    for name in ("sync", "google_sheets", "gemini", "ai_client", "wallet", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
