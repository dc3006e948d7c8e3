"""Application settings with Pydantic validation."""

from typing import Any, List, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from hkapi.constants import OTP, Database, Notifications, RoomConfig


class HKSettings(BaseSettings):
    """Application settings with validation and environment variable support."""

    # Environment
    env: str = Field(
        default="production", description="Environment (production, staging, development, testing)"
    )

    @model_validator(mode="before")
    @classmethod
    def default_env_for_pytest(cls, data: Any) -> Any:
        """Auto-detect testing environment when running under pytest."""
        import sys

        if not isinstance(data, dict):
            return data

        if ("env" not in data or not data.get("env")) and "pytest" in sys.modules:
            data["env"] = "testing"

        return data

    # Document store
    database_url: str = Field(
        default="postgresql://localhost:5432/hk_api",
        description="PostgreSQL URL for the document table, or memory:// for an in-process store",
    )
    db_pool_size: int = Field(default=10, ge=1, le=100, description="Database connection pool size")

    # HTTP
    cors_allowed_origins: str = Field(
        default="*", description="Comma-separated list of allowed CORS origins"
    )
    rate_limit_enabled: bool = Field(default=True, description="Enable rate limiting")
    otp_rate_limit: str = Field(
        default="5/minute", description="Rate limit for send-otp requests per client"
    )

    # Property
    timezone: str = Field(default="Asia/Dhaka", description="Local timezone of the property")
    property_name: str = Field(
        default="Miami Beach Resort", description="Property name shown in emails"
    )
    default_property_id: int = Field(
        default=279646, description="Property id used when a webhook omits propertyId"
    )
    default_total_rooms: int = Field(
        default=RoomConfig.DEFAULT_TOTAL_ROOMS,
        ge=RoomConfig.MIN_ROOMS,
        le=RoomConfig.MAX_ROOMS,
        description="Room count reported before any capacity is configured",
    )

    # OTP
    otp_ttl_minutes: int = Field(default=OTP.TTL_MINUTES, ge=1, le=60)
    otp_max_attempts: int = Field(default=OTP.MAX_ATTEMPTS, ge=1, le=10)

    # Notifications
    notification_retention_hours: int = Field(
        default=Notifications.RETENTION_HOURS, ge=1, description="Age after which notifications are swept"
    )
    notification_list_limit: int = Field(
        default=Notifications.DEFAULT_LIST_LIMIT, ge=1, le=Notifications.MAX_LIST_LIMIT
    )
    webhook_dedup_enabled: bool = Field(
        default=False,
        description="Upsert notifications keyed by booking id and modifiedTime instead of appending",
    )

    # Email
    smtp_server: str = Field(default="smtp.gmail.com", description="SMTP server address")
    smtp_port: int = Field(default=587, description="SMTP server port")
    smtp_username: Optional[str] = Field(default=None, description="SMTP username")
    smtp_password: Optional[SecretStr] = Field(default=None, description="SMTP password")
    smtp_ca_bundle: Optional[str] = Field(
        default=None, description="CA bundle for verifying the SMTP server certificate"
    )
    email_from: Optional[str] = Field(
        default=None, description="Sender address (defaults to the SMTP username)"
    )

    # Logging
    log_level: str = Field(
        default="INFO", description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("env")
    @classmethod
    def validate_env(cls, v: str) -> str:
        """Validate environment value."""
        allowed = ["production", "development", "testing", "staging"]
        if v.lower() not in allowed:
            raise ValueError(f'ENV must be one of: {", ".join(allowed)}')
        return v.lower()

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        allowed = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in allowed:
            raise ValueError(f'LOG_LEVEL must be one of: {", ".join(allowed)}')
        return v_upper

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        """Validate that the timezone is a known IANA zone."""
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValueError(f"Unknown timezone: {v}")
        return v

    @field_validator("database_url")
    @classmethod
    def validate_database_url(cls, v: str) -> str:
        """Only PostgreSQL and in-memory stores are supported."""
        if not (v.startswith(("postgresql://", "postgres://")) or v == Database.MEMORY_URL):
            raise ValueError("DATABASE_URL must be a postgresql:// URL or memory://")
        return v

    @model_validator(mode="after")
    def validate_store_in_production(self) -> "HKSettings":
        """
        Refuse the in-memory store in production.

        Returns:
            Self if validation passes

        Raises:
            ValueError: If production is configured with memory://
        """
        if self.env == "production" and self.database_url == Database.MEMORY_URL:
            raise ValueError("memory:// store is not allowed in production")
        return self

    @property
    def email_configured(self) -> bool:
        """True when SMTP credentials are present."""
        return bool(self.smtp_username and self.smtp_password)

    @property
    def sender_address(self) -> Optional[str]:
        """Address used in the From header."""
        return self.email_from or self.smtp_username

    def get_cors_origins(self) -> List[str]:
        """
        Get CORS allowed origins as a list.

        Returns:
            List of allowed origin URLs
        """
        return [origin.strip() for origin in self.cors_allowed_origins.split(",") if origin.strip()]

    def is_production(self) -> bool:
        """
        Check if running in production mode.

        Returns:
            True if production environment
        """
        return self.env == "production"


# Singleton instance
_settings: Optional[HKSettings] = None


def get_settings() -> HKSettings:
    """
    Get application settings singleton.

    Returns:
        HKSettings instance

    Raises:
        ValidationError: If settings are invalid
    """
    global _settings
    if _settings is None:
        _settings = HKSettings()
    return _settings


def reset_settings() -> None:
    """Reset settings singleton (useful for testing)."""
    global _settings
    _settings = None
