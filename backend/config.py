"""
Configuration management for the Jersey Order backend.

Loads settings from .env via pydantic-settings.

Notes:
    - Jersey number range and name length are deployment choices, not
      literals in the validator (defaults: 0-500, 40 characters).
    - ADMIN_ACCOUNTS seeds staff logins at startup ("user:pass,user2:pass2").
    - validate_production_settings() enforces a JWT secret and strict CORS
      in production.
"""
import logging

from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Tuple

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # ── Database ────────────────────────────────────────────────────
    database_url: str = "sqlite:///./data/jersey_orders.db"

    # ── Application ─────────────────────────────────────────────────
    environment: str = "development"
    app_version: str = "1.0.0"

    # ── Auth (JWT) ──────────────────────────────────────────────────
    jwt_secret: str = ""
    jwt_issuer: str = "jersey-orders-api"
    jwt_access_ttl_minutes: int = 24 * 60

    # Staff accounts provisioned at startup, "username:password" pairs
    admin_accounts: str = ""

    # ── Email (Brevo transactional API) ─────────────────────────────
    brevo_api_key: str = ""
    brevo_api_url: str = "https://api.brevo.com/v3/smtp/email"
    brevo_from_email: str = ""
    brevo_from_name: str = "ICE Jersey"
    admin_email: str = ""  # optional: receives a copy of every new order
    department_name: str = "Department of Information & Communication Engineering"

    # ── Order rules ─────────────────────────────────────────────────
    jersey_number_min: int = 0
    jersey_number_max: int = 500
    name_max_length: int = 40
    order_code_prefix: str = "ICE"

    # ── Rate limits ─────────────────────────────────────────────────
    order_rate_limit: int = 10
    order_rate_window_seconds: int = 15 * 60
    api_rate_limit: int = 100
    api_rate_window_seconds: int = 15 * 60

    # ── CORS ────────────────────────────────────────────────────────
    cors_origins: str = "http://localhost:3000,http://127.0.0.1:3000,http://localhost:5173,http://127.0.0.1:5173"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # allow unknown .env keys without crashing
    )

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins from comma-separated string."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def admin_accounts_list(self) -> List[Tuple[str, str]]:
        """
        Parse ADMIN_ACCOUNTS into (username, password) pairs.

        Entries without a colon or with an empty side are skipped with a warning.
        """
        accounts = []
        for entry in self.admin_accounts.split(","):
            entry = entry.strip()
            if not entry:
                continue
            username, sep, password = entry.partition(":")
            if not sep or not username.strip() or not password:
                logger.warning(f"Ignoring malformed ADMIN_ACCOUNTS entry: {username.strip() or '?'}")
                continue
            accounts.append((username.strip(), password))
        return accounts

    @property
    def email_configured(self) -> bool:
        return bool(self.brevo_api_key and self.brevo_from_email)

    def validate_production_settings(self):
        """
        Validate settings before the app starts serving.

        In production: JWT secret required, no wildcard CORS.
        Everywhere: the jersey number range must not be empty.
        """
        if self.jersey_number_min > self.jersey_number_max:
            raise ValueError(
                f"JERSEY_NUMBER_MIN ({self.jersey_number_min}) must not exceed "
                f"JERSEY_NUMBER_MAX ({self.jersey_number_max})."
            )

        if self.environment == "production":
            if "*" in self.cors_origins:
                raise ValueError(
                    "CORS_ORIGINS must not contain '*' in production. "
                    "Set explicit allowed origins."
                )
            if not self.jwt_secret:
                raise ValueError(
                    "JWT_SECRET must be set in production. "
                    "It is used to sign admin access tokens."
                )
            logger.info("Production settings validated")
        else:
            warnings = []
            if not self.jwt_secret:
                warnings.append("JWT_SECRET is empty (admin login disabled)")
            if "*" in self.cors_origins:
                warnings.append("CORS_ORIGINS contains '*' (open access)")
            for w in warnings:
                logger.warning(w)

        if not self.email_configured:
            logger.warning("Email service not configured (BREVO_API_KEY / BREVO_FROM_EMAIL)")


# Global settings instance
settings = Settings()
