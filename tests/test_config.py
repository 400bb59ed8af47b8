"""
Unit tests for Settings in social.graze.authinfo.config
"""

import base64
import pytest
from cryptography.fernet import Fernet
from pydantic import ValidationError

from social.graze.authinfo.config import Settings


class TestEncryptionKey:
    def test_from_base64_environment_value(self, monkeypatch):
        key = Fernet.generate_key()
        monkeypatch.setenv("ENCRYPTION_KEY", base64.b64encode(key).decode("utf-8"))

        settings = Settings()

        assert settings.encryption_key == key

    def test_from_bytes(self):
        key = Fernet.generate_key()
        settings = Settings(encryption_key=key)
        assert settings.encryption_key == key

    def test_default_is_usable(self):
        Fernet(Settings().encryption_key)

    @pytest.mark.parametrize(
        "value",
        [
            "not base64 at all!",
            base64.b64encode(b"too-short").decode("utf-8"),
        ],
    )
    def test_rejects_invalid_keys(self, monkeypatch, value):
        monkeypatch.setenv("ENCRYPTION_KEY", value)
        with pytest.raises(ValidationError):
            Settings()


class TestDatabaseSettings:
    def test_default_dsn(self, monkeypatch):
        monkeypatch.delenv("PG_DSN", raising=False)
        monkeypatch.delenv("DATABASE_URL", raising=False)
        assert Settings().pg_dsn == "postgresql+asyncpg://postgres:password@db/authinfo"

    def test_database_url_alias(self, monkeypatch):
        monkeypatch.delenv("PG_DSN", raising=False)
        monkeypatch.setenv("DATABASE_URL", "sqlite+aiosqlite:///alias.db")
        assert Settings().pg_dsn == "sqlite+aiosqlite:///alias.db"

    def test_metrics_backend_is_validated(self, monkeypatch):
        monkeypatch.setenv("METRICS_BACKEND", "carrier-pigeon")
        with pytest.raises(ValidationError):
            Settings()
