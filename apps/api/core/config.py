"""Centralized application configuration via Pydantic Settings.

Loads all env vars into a typed Settings instance. The capture service
runs against the in-memory ledger unless LEDGER_BACKEND=supabase.
"""

from pydantic_settings import BaseSettings
from pydantic import Field, field_validator

from packages.transaction_capture.constants import DEFAULT_EXPENSE_CATEGORY_ID


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Supabase
    SUPABASE_URL: str = Field(default="", description="Supabase project URL")
    SUPABASE_SERVICE_KEY: str = Field(
        default="",
        description="Supabase service-role key used to write captured transactions",
    )

    # Ledger
    LEDGER_BACKEND: str = Field(
        default="memory",
        description="Where captured transactions are stored: memory or supabase",
    )
    DEFAULT_CATEGORY_ID: str = Field(
        default=DEFAULT_EXPENSE_CATEGORY_ID,
        description="Category used when the cascade yields no category id",
    )

    # CORS
    ALLOWED_ORIGINS: str = Field(
        default="http://localhost:3000",
        description="Comma-separated allowed origins for CORS",
    )

    # Logging
    LOG_LEVEL: str = Field(default="INFO", description="Python log level")
    ENVIRONMENT: str = Field(
        default="development",
        description="Runtime environment: development, staging, production",
    )

    # App
    APP_VERSION: str = Field(default="0.1.0", description="Application version")
    ENABLE_DIAGNOSTICS: bool = Field(
        default=False,
        description="Expose the pipeline self-test endpoint",
    )

    @field_validator("LEDGER_BACKEND")
    @classmethod
    def _check_backend(cls, value: str) -> str:
        value = value.strip().lower()
        if value not in ("memory", "supabase"):
            raise ValueError("LEDGER_BACKEND must be 'memory' or 'supabase'")
        return value

    @property
    def allowed_origins(self) -> list[str]:
        """Parse comma-separated origins into a list."""
        return [o.strip() for o in self.ALLOWED_ORIGINS.split(",") if o.strip()]

    @property
    def log_level(self) -> str:
        return self.LOG_LEVEL

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"

    model_config = {"env_file": ".env", "extra": "ignore"}


def get_settings() -> Settings:
    """Factory for Settings - allows test override."""
    return Settings()


# Module-level singleton
try:
    settings = get_settings()
except Exception:
    # A malformed env must not break imports; tests build their own Settings
    settings = None  # type: ignore[assignment]
