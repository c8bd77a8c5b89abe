"""
Application Configuration - Pydantic Settings for type-safe config.

NO DICTIONARIES - All configuration is strongly typed.
FAIL FAST - Critical config is validated at startup.
"""

import sys

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine import make_url


class ConfigurationError(Exception):
    """Raised when critical configuration is missing or invalid."""

    pass


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database Configuration - NO DEFAULT for production safety
    database_url: str = ""
    database_service_password: str | None = None  # Privileged service credential
    database_pool_size: int = 5
    database_max_overflow: int = 5
    database_pool_timeout: int = 30
    database_pool_recycle: int = 3600

    # API Configuration
    api_host: str = "0.0.0.0"
    api_port: int = 10000
    api_title: str = "Boost Billing API"
    api_version: str = "0.1.0"
    api_description: str = "Stripe subscription sessions and entitlement webhooks"

    # CORS
    allow_origin: str | None = None
    client_base_url: str = "http://localhost:5173"
    client_return_path: str = "/profil"

    # Payment Provider - Stripe
    payments_required: bool = True
    stripe_secret_key: str = ""  # sk_test_... or sk_live_...
    stripe_price_id: str = ""  # price_... - the only plan sold
    stripe_webhook_secret: str = ""  # whsec_...
    stripe_api_version: str = "2024-06-20"
    checkout_origin: str = "boost-subscription"

    # SEO
    seo_enabled: bool = False
    public_base_url: str = ""

    # Logging
    log_level: str = "INFO"
    log_format: str = "json"  # json or console

    # Observability
    metrics_enabled: bool = True
    tracing_enabled: bool = False
    otlp_endpoint: str = "http://otel-collector:4317"
    otlp_insecure: bool = True
    service_name: str = "boost-billing-api"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    @model_validator(mode="after")
    def validate_critical_config(self) -> "Settings":
        """
        FAIL FAST: Validate critical configuration at startup.

        The app MUST NOT start if critical config is missing.
        Stripe settings are only optional when PAYMENTS_REQUIRED is false,
        in which case the payment routes answer 501.
        """
        errors: list[str] = []

        if not self.database_url:
            errors.append("DATABASE_URL is required but empty or missing")
        elif not self.database_url.startswith(("postgresql", "postgres")):
            errors.append(
                f"DATABASE_URL must be a PostgreSQL URL, got: {self.database_url[:20]}..."
            )

        if self.payments_required:
            if not self.stripe_secret_key:
                errors.append("STRIPE_SECRET_KEY is required but empty or missing")
            if not self.stripe_price_id:
                errors.append("STRIPE_PRICE_ID is required but empty or missing")
            if not self.stripe_webhook_secret:
                errors.append("STRIPE_WEBHOOK_SECRET is required but empty or missing")

        if self.seo_enabled and not self.sitemap_base_url:
            errors.append("PUBLIC_BASE_URL (or CLIENT_BASE_URL) is required when SEO_ENABLED")

        if errors:
            error_msg = "\n".join(
                [
                    "",
                    "=" * 60,
                    "CRITICAL CONFIGURATION ERROR - APPLICATION CANNOT START",
                    "=" * 60,
                    *[f"  ✗ {e}" for e in errors],
                    "=" * 60,
                    "",
                ]
            )
            print(error_msg, file=sys.stderr)
            raise ConfigurationError(error_msg)

        return self

    @property
    def stripe_configured(self) -> bool:
        """True when every Stripe setting needed for sessions and webhooks is present."""
        return bool(self.stripe_secret_key and self.stripe_price_id and self.stripe_webhook_secret)

    @property
    def cors_origins(self) -> list[str]:
        """Explicit CORS origins, empty when any origin should be reflected."""
        if not self.allow_origin:
            return []
        return [self.allow_origin, self.client_base_url]

    @property
    def sitemap_base_url(self) -> str:
        """Public site URL used in robots.txt and sitemap.xml."""
        return (self.public_base_url or self.client_base_url).rstrip("/")

    @property
    def effective_database_url(self) -> str:
        """Database URL with the service credential applied, if one is configured."""
        if not self.database_service_password:
            return self.database_url
        url = make_url(self.database_url).set(password=self.database_service_password)
        return url.render_as_string(hide_password=False)


# Global settings instance - validates at import time
settings = Settings()
