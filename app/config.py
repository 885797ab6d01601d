# =============================================================================
# app/config.py - Application Settings
# =============================================================================
# This module loads configuration from environment variables using pydantic-settings.
# It provides a single Settings class with all configuration values.
#
# Usage:
#   from app.config import settings
#   print(settings.SUPABASE_URL)
#
# Environment variables are loaded from:
# 1. System environment variables
# 2. .env file in project root (if exists)
#
# Vendor keys (Stripe, Loops) are optional at startup. The routes that need
# them report a configuration error when they are missing, so the rest of
# the API keeps working in local development.
# =============================================================================

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings are accessed via the global `settings` instance.
    """

    # -------------------------------------------------------------------------
    # Supabase Configuration
    # -------------------------------------------------------------------------
    # Database, auth and storage. Required - app won't start without them.

    SUPABASE_URL: str = Field(
        ...,
        description="Supabase project URL (e.g., https://xxx.supabase.co)"
    )

    SUPABASE_ANON_KEY: str = Field(
        ...,
        description="Supabase anon/public API key"
    )

    SUPABASE_SERVICE_KEY: str = Field(
        ...,
        description="Supabase service_role key (bypasses RLS)"
    )

    SUPABASE_JWT_SECRET: str = Field(
        default="",
        description="Legacy HS256 secret used to verify Supabase access tokens"
    )

    # -------------------------------------------------------------------------
    # Redis Configuration (realtime fan-out)
    # -------------------------------------------------------------------------

    REDIS_URL: str = Field(
        default="redis://localhost:6379/0",
        description="Redis connection URL for realtime pub/sub"
    )

    # -------------------------------------------------------------------------
    # Stripe Configuration
    # -------------------------------------------------------------------------

    STRIPE_SECRET_KEY: str = Field(
        default="",
        description="Stripe secret API key (sk_live_... / sk_test_...)"
    )

    STRIPE_WEBHOOK_SECRET: str = Field(
        default="",
        description="Signing secret for the Stripe webhook endpoint (whsec_...)"
    )

    STRIPE_MONTHLY_PRICE_ID: str = Field(
        default="",
        description="Stripe price ID for the monthly plan"
    )

    STRIPE_YEARLY_PRICE_ID: str = Field(
        default="",
        description="Stripe price ID for the yearly plan"
    )

    APP_URL: str = Field(
        default="http://localhost:3000",
        description="Public URL of the web client, used for Stripe redirects"
    )

    # -------------------------------------------------------------------------
    # Loops Configuration (waitlist)
    # -------------------------------------------------------------------------

    LOOPS_API_KEY: str = Field(
        default="",
        description="Loops API key for waitlist contacts"
    )

    LOOPS_API_URL: str = Field(
        default="https://app.loops.so/api/v1",
        description="Base URL of the Loops REST API"
    )

    LOOPS_WAITLIST_MAILING_LIST_ID: str = Field(
        default="",
        description="Optional Loops mailing list ID for presell signups"
    )

    # -------------------------------------------------------------------------
    # Data Fetch Guards
    # -------------------------------------------------------------------------

    FETCH_TIMEOUT_SECONDS: float = Field(
        default=10.0,
        gt=0,
        le=60,
        description="Timeout for library/program/dashboard fetches"
    )

    USER_CONTEXT_TIMEOUT_SECONDS: float = Field(
        default=8.0,
        gt=0,
        le=60,
        description="Timeout for profile + subscription fetches"
    )

    LIBRARY_CACHE_TTL_SECONDS: float = Field(
        default=300.0,
        ge=0,
        description="How long a fetched exercise library is reused"
    )

    USER_CONTEXT_CACHE_TTL_SECONDS: float = Field(
        default=60.0,
        ge=0,
        description="How long a loaded user context is reused"
    )

    # -------------------------------------------------------------------------
    # Exercise Player
    # -------------------------------------------------------------------------

    PLAYER_TICK_SECONDS: float = Field(
        default=1.0,
        gt=0,
        le=5,
        description="Interval between player countdown ticks"
    )

    SPEECH_RATE: float = Field(
        default=0.85,
        ge=0.1,
        le=10,
        description="Narration speaking rate (slower for relaxation)"
    )

    SPEECH_PITCH: float = Field(
        default=1.0,
        ge=0,
        le=2,
        description="Narration pitch"
    )

    SPEECH_VOLUME: float = Field(
        default=1.0,
        ge=0,
        le=1,
        description="Narration volume"
    )

    # -------------------------------------------------------------------------
    # Application Settings
    # -------------------------------------------------------------------------

    ENVIRONMENT: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Current environment"
    )

    DEBUG: bool = Field(
        default=False,
        description="Enable debug mode (verbose logging, auto-reload)"
    )

    # -------------------------------------------------------------------------
    # CORS
    # -------------------------------------------------------------------------

    # Comma-separated string that gets parsed
    CORS_ORIGINS: str = Field(
        default="http://localhost:3000",
        description="Allowed CORS origins (comma-separated)"
    )

    # -------------------------------------------------------------------------
    # Pydantic Settings Configuration
    # -------------------------------------------------------------------------

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        # Don't fail if .env doesn't exist
        env_ignore_empty=True,
        case_sensitive=True,
    )

    # -------------------------------------------------------------------------
    # Computed Properties
    # -------------------------------------------------------------------------

    @property
    def cors_origins_list(self) -> list[str]:
        """
        Parse CORS_ORIGINS string into a list.

        Example: "http://localhost:3000, https://tranquil.app" -> ["http://localhost:3000", "https://tranquil.app"]
        """
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",")]

    @property
    def app_url(self) -> str:
        """APP_URL without a trailing slash, ready for path joins."""
        return self.APP_URL.rstrip("/")

    @property
    def stripe_configured(self) -> bool:
        """True when Stripe calls can be made."""
        return bool(self.STRIPE_SECRET_KEY)

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.ENVIRONMENT == "production"


@lru_cache
def get_settings() -> Settings:
    """
    Get cached Settings instance.

    Using lru_cache ensures we only parse .env and validate once,
    not on every access.

    Returns:
        Settings: The application settings instance
    """
    return Settings()


# Global settings instance for easy importing
# Usage: from app.config import settings
settings = get_settings()
