"""
Configuration Management for the Ledger Service

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
This makes it easy to see what external dependencies exist and
ensures all required configuration is validated at startup.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AuthSettings(BaseSettings):
    """Identity provider token verification."""

    model_config = SettingsConfigDict(
        env_prefix="AUTH_",
        extra="ignore"
    )

    jwt_secret: str = Field(
        ...,
        min_length=32,
        description="Shared secret the identity provider signs access tokens with"
    )
    jwt_audience: str = Field(
        default="authenticated",
        description="Expected 'aud' claim of access tokens"
    )
    jwt_algorithm: str = Field(
        default="HS256",
        description="Signature algorithm of access tokens"
    )


class RateLimitSettings(BaseSettings):
    """Per-origin request limits."""

    model_config = SettingsConfigDict(
        env_prefix="RATE_LIMIT_",
        extra="ignore"
    )

    max_requests: int = Field(
        default=100,
        ge=1,
        description="Requests admitted per origin within one window"
    )
    window_seconds: int = Field(
        default=60,
        ge=1,
        description="Length of the fixed window in seconds"
    )
    backend: str = Field(
        default="memory",
        pattern="^(memory|redis)$",
        description="Where window counters live"
    )
    key_prefix: str = Field(
        default="ledger:ratelimit",
        description="Key namespace used in the shared counter store"
    )


class RedisSettings(BaseSettings):
    """Redis connection used for shared rate-limit counters."""

    model_config = SettingsConfigDict(
        env_prefix="REDIS_",
        extra="ignore"
    )

    url: str = Field(
        ...,
        description="Redis connection URL, e.g. redis://localhost:6379/0"
    )


class GoogleSheetsSettings(BaseSettings):
    """Google Sheets storage configuration."""

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
    transactions_sheet_name: str = Field(default="Lancamentos")
    accounts_sheet_name: str = Field(default="Contas")
    categories_sheet_name: str = Field(default="Categorias")
    funds_sheet_name: str = Field(default="Fundos")
    people_sheet_name: str = Field(default="Pessoas")
    audit_sheet_name: str = Field(default="LogsSistema")

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
    storage_backend: str = Field(
        default="memory",
        pattern="^(memory|google_sheets)$",
        description="Where transactions and audit entries are stored"
    )

    # Pagination
    default_page_size: int = Field(
        default=20,
        ge=1,
        le=100,
        description="Page size when the caller does not pass 'limit'"
    )
    max_page_size: int = Field(
        default=100,
        ge=1,
        le=100,
        description="Upper bound for 'limit'"
    )

    # Semantic validation thresholds (warnings only)
    max_plausible_amount: float = Field(
        default=1000000.0,
        description="Amounts above this are flagged for review"
    )
    future_date_tolerance_days: int = Field(
        default=365,
        description="How far in the future a transaction date can be before it is flagged"
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
    def auth(self) -> AuthSettings:
        return AuthSettings()

    @property
    def rate_limit(self) -> RateLimitSettings:
        return RateLimitSettings()

    @property
    def redis(self) -> RedisSettings:
        return RedisSettings()

    @property
    def google_sheets(self) -> GoogleSheetsSettings:
        return GoogleSheetsSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}, plus a
    "<name>_error" entry for each group that failed.
    Useful for startup checks.
    """
    results = {}
    settings = get_settings()

    for name in ("auth", "rate_limit", "redis", "google_sheets", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
