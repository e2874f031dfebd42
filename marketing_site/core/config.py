# marketing_site/core/config.py
from __future__ import annotations

from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Environment
    environment: str = Field(default="development", validation_alias="ENVIRONMENT")
    debug: bool = Field(default=False, validation_alias="DEBUG")
    site_name: str = Field(default="RobusTest", validation_alias="SITE_NAME")

    # Server
    api_host: str = Field(default="0.0.0.0", validation_alias="API_HOST")
    api_port: int = Field(default=8000, validation_alias="API_PORT")
    api_prefix: str = Field(default="/api", validation_alias="API_PREFIX")

    # Logging
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    log_format: str = Field(default="json", validation_alias="LOG_FORMAT")

    # CORS
    allowed_origins: str = Field(default="http://localhost:3000,http://127.0.0.1:3000", validation_alias="ALLOWED_ORIGINS")
    allowed_methods: str = Field(default="GET,POST,OPTIONS", validation_alias="ALLOWED_METHODS")
    allowed_headers: str = Field(default="*", validation_alias="ALLOWED_HEADERS")

    # Client identification
    trust_forwarded_for: bool = Field(default=True, validation_alias="TRUST_FORWARDED_FOR")

    # Contact form rate limiting
    contact_rate_limit_requests: int = Field(default=5, ge=1, validation_alias="CONTACT_RATE_LIMIT_REQUESTS")
    contact_rate_limit_window_seconds: int = Field(default=300, ge=1, validation_alias="CONTACT_RATE_LIMIT_WINDOW_SECONDS")
    contact_rate_limit_max_keys: Optional[int] = Field(default=None, ge=1, validation_alias="CONTACT_RATE_LIMIT_MAX_KEYS")

    # Contact form email
    sendgrid_api_key: Optional[str] = Field(default=None, validation_alias="SENDGRID_API_KEY")
    sendgrid_api_url: str = Field(default="https://api.sendgrid.com/v3/mail/send", validation_alias="SENDGRID_API_URL")
    sendgrid_timeout_seconds: float = Field(default=10.0, gt=0, validation_alias="SENDGRID_TIMEOUT_SECONDS")
    contact_from_email: str = Field(default="noreply@robustest.com", validation_alias="CONTACT_FROM_EMAIL")
    contact_from_name: str = Field(default="RobusTest Website", validation_alias="CONTACT_FROM_NAME")
    contact_to_email: str = Field(default="hello@robustest.com", validation_alias="CONTACT_TO_EMAIL")
    contact_to_name: str = Field(default="RobusTest Team", validation_alias="CONTACT_TO_NAME")
    contact_send_confirmation: bool = Field(default=True, validation_alias="CONTACT_SEND_CONFIRMATION")

    # Monitoring
    sentry_dsn: Optional[str] = Field(default=None, validation_alias="SENTRY_DSN")

    @field_validator("environment")
    def validate_environment(cls, v):
        valid_envs = ["development", "testing", "staging", "production"]
        if v not in valid_envs:
            raise ValueError(f"environment must be one of {valid_envs}")
        return v

    @field_validator("log_level")
    def validate_log_level(cls, v):
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"log_level must be one of {valid_levels}")
        return v.upper()

    @field_validator("log_format")
    def validate_log_format(cls, v):
        valid_formats = ["json", "console"]
        if v not in valid_formats:
            raise ValueError(f"log_format must be one of {valid_formats}")
        return v

    @field_validator("sendgrid_api_key", "sentry_dsn")
    def blank_to_none(cls, v):
        # An exported-but-empty variable means "not configured"
        if v is not None and not v.strip():
            return None
        return v

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    @property
    def is_testing(self) -> bool:
        return self.environment == "testing"

    @property
    def email_configured(self) -> bool:
        return bool(self.sendgrid_api_key)

    def origins(self) -> List[str]:
        if self.allowed_origins.strip() == "*":
            return ["*"]
        return [origin.strip() for origin in self.allowed_origins.split(",") if origin.strip()]

    def methods(self) -> List[str]:
        return [method.strip() for method in self.allowed_methods.split(",") if method.strip()]

    def headers(self) -> List[str]:
        return [header.strip() for header in self.allowed_headers.split(",") if header.strip()]


settings = Settings()
