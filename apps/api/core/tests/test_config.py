"""Tests for core config module."""

import pydantic
import pytest


class TestSettings:
    """Test Pydantic Settings loads env vars correctly."""

    def test_settings_loads_supabase_credentials(self, monkeypatch):
        """Settings should load the Supabase URL and service key from env."""
        monkeypatch.setenv("SUPABASE_URL", "https://test.supabase.co")
        monkeypatch.setenv("SUPABASE_SERVICE_KEY", "test-service-key")

        from apps.api.core.config import Settings
        settings = Settings()
        assert settings.SUPABASE_URL == "https://test.supabase.co"
        assert settings.SUPABASE_SERVICE_KEY == "test-service-key"

    def test_settings_loads_allowed_origins(self, monkeypatch):
        """Settings should parse ALLOWED_ORIGINS as comma-separated list."""
        monkeypatch.setenv("ALLOWED_ORIGINS", "http://localhost:3000,https://ledger.example.com")

        from apps.api.core.config import Settings
        settings = Settings()
        assert settings.allowed_origins == [
            "http://localhost:3000",
            "https://ledger.example.com",
        ]

    def test_settings_defaults(self, monkeypatch):
        """Settings should have sensible defaults."""
        for name in ("LOG_LEVEL", "ENVIRONMENT", "ALLOWED_ORIGINS", "LEDGER_BACKEND", "ENABLE_DIAGNOSTICS"):
            monkeypatch.delenv(name, raising=False)

        from apps.api.core.config import Settings
        settings = Settings(_env_file=None)
        assert settings.LOG_LEVEL == "INFO"
        assert settings.ENVIRONMENT == "development"
        assert settings.ALLOWED_ORIGINS == "http://localhost:3000"
        assert settings.LEDGER_BACKEND == "memory"
        assert settings.ENABLE_DIAGNOSTICS is False
        assert settings.is_production is False

    def test_ledger_backend_from_env(self, monkeypatch):
        monkeypatch.setenv("LEDGER_BACKEND", "SUPABASE")

        from apps.api.core.config import Settings
        assert Settings().LEDGER_BACKEND == "supabase"

    def test_invalid_ledger_backend(self, monkeypatch):
        monkeypatch.setenv("LEDGER_BACKEND", "sqlite")

        from apps.api.core.config import Settings
        with pytest.raises(pydantic.ValidationError):
            Settings()

    def test_diagnostics_flag_from_env(self, monkeypatch):
        monkeypatch.setenv("ENABLE_DIAGNOSTICS", "true")

        from apps.api.core.config import Settings
        assert Settings().ENABLE_DIAGNOSTICS is True
