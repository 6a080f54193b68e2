"""Tests for RowbindSettings and get_settings."""

import pytest
from pydantic import ValidationError

from rowbind.core.settings import RowbindSettings, get_settings


class TestRowbindSettings:
    def test_defaults(self, monkeypatch):
        for var in ("ROWBIND_DATABASE_URL", "ROWBIND_LOG_LEVEL", "ROWBIND_LOG_FORMAT"):
            monkeypatch.delenv(var, raising=False)
        settings = RowbindSettings(_env_file=None)
        assert settings.database_url == "memory"
        assert settings.autocommit is True
        assert settings.echo_sql is False
        assert settings.log_level == "INFO"

    def test_reads_prefixed_env(self, monkeypatch):
        monkeypatch.setenv("ROWBIND_DATABASE_URL", "sqlite:///library.db")
        monkeypatch.setenv("ROWBIND_ECHO_SQL", "true")
        settings = RowbindSettings(_env_file=None)
        assert settings.database_url == "sqlite:///library.db"
        assert settings.echo_sql is True

    def test_log_level_normalized(self):
        assert RowbindSettings(_env_file=None, log_level="debug").log_level == "DEBUG"

    def test_unknown_log_level_rejected(self):
        with pytest.raises(ValidationError):
            RowbindSettings(_env_file=None, log_level="chatty")

    def test_unknown_log_format_rejected(self):
        with pytest.raises(ValidationError):
            RowbindSettings(_env_file=None, log_format="xml")

    @pytest.mark.parametrize(
        ("log_format", "expected"),
        [("auto", None), ("json", True), ("console", False)],
    )
    def test_json_logs(self, log_format, expected):
        assert RowbindSettings(_env_file=None, log_format=log_format).json_logs is expected


class TestGetSettings:
    def test_cached(self):
        assert get_settings() is get_settings()

    def test_force_reload(self, monkeypatch):
        first = get_settings()
        monkeypatch.setenv("ROWBIND_LOG_LEVEL", "warning")
        reloaded = get_settings(_force_reload=True)
        assert reloaded is not first
        assert reloaded.log_level == "WARNING"
