"""
Application configuration via pydantic-settings.

All settings are loaded from environment variables (and .env file).
Each external concern gets its own settings class; AppSettings composes
them once at startup and the resulting object is injected into components.
"""

from __future__ import annotations

from typing import Optional

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    mongodb_uri: str
    db_name: str = "portfolio"


class JWTSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Tokens are issued by the auth service; this API only verifies them.
    jwt_issuer: Optional[str] = None
    jwt_audience: Optional[str] = None
    jwt_admin_role: str = "admin"

    # RS256 public key (preferred)
    jwt_public_key: str = ""

    # HS256 fallback (used when no public key is configured)
    jwt_secret: str = ""

    @property
    def use_rs256(self) -> bool:
        return bool(self.jwt_public_key)


class GeolocationSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # {ip} is substituted with the cleaned client address
    geo_primary_url: str = "http://ip-api.com/json/{ip}"
    geo_secondary_url: str = "https://ipapi.co/{ip}/json/"
    geo_timeout_seconds: float = 5.0
    geo_user_agent: str = "Portfolio-Analytics/1.0"


class EmailSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    zepto_api_token: str = ""
    zepto_from_email: str = "noreply@sayedsafi.me"
    zepto_from_name: str = "Portfolio Contact"

    admin_email: str = ""
    admin_dashboard_url: str = "https://admin.sayedsafi.me"
    lead_emails_enabled: bool = True


class LoggingSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    log_level: str = "INFO"
    log_format: str = "console"  # "json" in production

    # Sampling rate (0.0–1.0) for per-request tracking logs
    sample_rate_track: float = 0.10


class SentrySettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    sentry_dsn: str = ""
    sentry_send_pii: bool = False
    sentry_traces_sample_rate: float = 0.1
    sentry_profile_sample_rate: float = 0.05


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Core
    env: str = "development"
    app_name: str = "portfolio-api"

    cors_origins: list[str] = [
        "http://localhost:3000",
        "http://localhost:3001",
        "https://sayedsafi.me",
        "https://www.sayedsafi.me",
        "https://admin.sayedsafi.me",
    ]

    # OpenAPI docs URL (None disables the docs UI in production)
    docs_url: Optional[str] = "/docs"

    # Sub-configs (composed via model_validator below)
    db: Optional[DatabaseSettings] = None
    jwt: Optional[JWTSettings] = None
    geo: Optional[GeolocationSettings] = None
    email: Optional[EmailSettings] = None
    logging: Optional[LoggingSettings] = None
    sentry: Optional[SentrySettings] = None

    @model_validator(mode="after")
    def _populate_sub_configs(self) -> "AppSettings":
        if self.db is None:
            self.db = DatabaseSettings()
        if self.jwt is None:
            self.jwt = JWTSettings()
        if self.geo is None:
            self.geo = GeolocationSettings()
        if self.email is None:
            self.email = EmailSettings()
        if self.logging is None:
            self.logging = LoggingSettings()
        if self.sentry is None:
            self.sentry = SentrySettings()
        return self

    @property
    def is_production(self) -> bool:
        return self.env == "production"

    @property
    def is_development(self) -> bool:
        return self.env == "development"
