"""Unit tests for the settings model and its grouped views."""

from churchsync.server.core.config import Settings


def make_settings(**values) -> Settings:
    return Settings(_env_file=None, **values)


def test_defaults(monkeypatch):
    monkeypatch.delenv("DATABASE_URL", raising=False)
    monkeypatch.delenv("EMAIL_SEND_ENABLED", raising=False)
    monkeypatch.delenv("GHL_CALL_ENABLED", raising=False)
    settings = make_settings()

    assert settings.server_port == 8000
    assert settings.database.url.startswith("postgresql+asyncpg://")
    assert settings.database.auto_create is False
    assert settings.email.send_enabled is False
    assert settings.ghl.call_enabled is False
    assert settings.rate_limit.enabled is True
    assert "application/pdf" in settings.storage.allowed_content_types


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "sqlite+aiosqlite:///./dev.db")
    monkeypatch.setenv("SMTP_PORT", "465")
    monkeypatch.setenv("CORS_ORIGINS", '["https://app.example.org"]')
    monkeypatch.setenv("RATE_LIMIT_ENABLED", "false")
    settings = make_settings()

    assert settings.database.url == "sqlite+aiosqlite:///./dev.db"
    assert settings.email.port == 465
    assert settings.cors.origins == ["https://app.example.org"]
    assert settings.rate_limit.enabled is False


def test_ghl_configured_requires_token_and_location():
    assert not make_settings(GHL_PIT="pit-token").ghl.configured
    assert make_settings(GHL_PIT="pit-token", GHL_LOCATION_ID="loc").ghl.configured


def test_storage_limits():
    settings = make_settings(STORAGE_MAX_UPLOAD_BYTES=1024, STORAGE_ROOT="/tmp/files")
    assert settings.storage.max_upload_bytes == 1024
    assert settings.storage.root == "/tmp/files"
