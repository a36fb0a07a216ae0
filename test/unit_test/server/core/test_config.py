"""Unit tests for server configuration settings model.

Tests verify that the Settings model correctly binds environment variables
from the .env.example file and that the grouped configuration views expose
the same values.
"""

from pathlib import Path

import pytest

from mis_compras.server.core.config import (
    AuthConfig,
    CORSConfig,
    DatabaseConfig,
    MailConfig,
    ProcurementConfig,
    Settings,
)


@pytest.fixture
def env_example_path() -> Path:
    """Get path to .env.example file."""
    return Path(__file__).resolve().parents[4] / ".env.example"


@pytest.fixture
def env_example_vars(env_example_path: Path) -> dict[str, str]:
    """Parse .env.example file and return environment variables."""
    env_vars = {}
    with open(env_example_path) as f:
        for line in f:
            line = line.strip()
            # Skip comments and empty lines
            if not line or line.startswith("#"):
                continue
            if "=" in line:
                key, value = line.split("=", 1)
                env_vars[key.strip()] = value.strip()
    return env_vars


class TestEnvExample:
    """The documented variables are the ones the settings read."""

    def test_every_variable_is_a_settings_alias(self, env_example_vars: dict[str, str]):
        aliases = {field.alias for field in Settings.model_fields.values()}
        assert set(env_example_vars) <= aliases

    def test_every_settings_alias_is_documented(self, env_example_vars: dict[str, str]):
        aliases = {field.alias for field in Settings.model_fields.values()}
        assert aliases <= set(env_example_vars)


class TestSettingsBinding:
    """Test Settings model environment variable binding."""

    def test_server_binding(self, monkeypatch):
        monkeypatch.setenv("MIS_COMPRAS_SERVER_HOST", "127.0.0.1")
        monkeypatch.setenv("MIS_COMPRAS_SERVER_PORT", "9000")

        settings = Settings()
        assert settings.server_host == "127.0.0.1"
        assert settings.server_port == 9000

    def test_log_level_binding(self, monkeypatch):
        monkeypatch.setenv("MIS_COMPRAS_LOG_LEVEL", "DEBUG")
        assert Settings().log_level == "DEBUG"

    def test_database_url_binding(self):
        """DATABASE_URL is set by the test suite to in-memory SQLite."""
        settings = Settings()
        assert settings.database_url.startswith("sqlite+aiosqlite")
        assert settings.database.url == settings.database_url

    def test_cors_lists_parse_json(self, monkeypatch):
        monkeypatch.setenv("CORS_ORIGINS", '["https://compras.museo.co", "http://localhost:5173"]')
        cors = Settings().cors
        assert isinstance(cors, CORSConfig)
        assert cors.origins == ["https://compras.museo.co", "http://localhost:5173"]

    def test_procurement_binding(self, monkeypatch):
        monkeypatch.setenv("MAX_PAYMENTS_PER_REQUIREMENT", "3")
        monkeypatch.setenv("AMOUNT_TOLERANCE_PCT", "2.5")
        monkeypatch.setenv("UPLOAD_DIR", "/srv/uploads")

        procurement = Settings().procurement
        assert isinstance(procurement, ProcurementConfig)
        assert procurement.max_payments == 3
        assert procurement.amount_tolerance_pct == 2.5
        assert procurement.upload_dir == "/srv/uploads"

    def test_auth_binding(self, monkeypatch):
        monkeypatch.setenv("JWT_SECRET_KEY", "s3cret")
        monkeypatch.setenv("JWT_EXPIRE_HOURS", "2")

        auth = Settings().auth
        assert isinstance(auth, AuthConfig)
        assert auth.secret_key == "s3cret"
        assert auth.expire_hours == 2
        assert auth.algorithm == "HS256"

    def test_mail_binding(self, monkeypatch):
        monkeypatch.setenv("SMTP_HOST", "smtp.museo.co")
        monkeypatch.setenv("SMTP_PORT", "465")
        monkeypatch.setenv("SMTP_SECURITY", "ssl")

        mail = Settings().mail
        assert isinstance(mail, MailConfig)
        assert (mail.host, mail.port, mail.security) == ("smtp.museo.co", 465, "ssl")
        assert mail.enabled is True

    def test_mail_is_off_without_host(self, monkeypatch):
        monkeypatch.delenv("SMTP_HOST", raising=False)
        assert Settings().mail.enabled is False

    def test_env_names_are_case_sensitive(self, monkeypatch):
        monkeypatch.setenv("max_upload_mb", "99")
        monkeypatch.delenv("MAX_UPLOAD_MB", raising=False)
        assert Settings().max_upload_mb == 10

    def test_default_admin_is_optional(self, monkeypatch):
        monkeypatch.delenv("DEFAULT_ADMIN_EMAIL", raising=False)
        monkeypatch.delenv("DEFAULT_ADMIN_PASSWORD", raising=False)
        settings = Settings()
        assert settings.default_admin_email is None
        assert settings.default_admin_password is None


class TestGroupedConfig:
    """Grouped models also accept their aliases directly."""

    def test_database_config_aliases(self):
        config = DatabaseConfig.model_validate({"DATABASE_URL": "sqlite+aiosqlite:///x.db", "DATABASE_ECHO": True})
        assert config.url == "sqlite+aiosqlite:///x.db"
        assert config.echo is True
        assert config.auto_create is False

    def test_populate_by_name(self):
        config = ProcurementConfig(max_payments=5)
        assert config.max_payments == 5
        assert config.max_upload_mb == 10
