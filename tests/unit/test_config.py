"""Unit tests for settings loading and token lifetime parsing."""

from datetime import timedelta

import pytest
from pydantic import ValidationError

from videohub.config import Settings, parse_duration
from videohub.services.token_service import TokenConfig


class TestParseDuration:
    @pytest.mark.parametrize(
        "value, expected",
        [
            ("900", timedelta(seconds=900)),
            ("30s", timedelta(seconds=30)),
            ("15m", timedelta(minutes=15)),
            ("2h", timedelta(hours=2)),
            ("1d", timedelta(days=1)),
            ("10D", timedelta(days=10)),
            (60, timedelta(minutes=1)),
            (timedelta(hours=1), timedelta(hours=1)),
        ],
    )
    def test_accepted_formats(self, value, expected):
        assert parse_duration(value) == expected

    @pytest.mark.parametrize("value", ["", "abc", "1w", "-5m", "0", 0, None])
    def test_rejected_values(self, value):
        with pytest.raises(ValueError):
            parse_duration(value)


class TestSettings:
    def _env(self, monkeypatch, **overrides):
        values = {
            "ACCESS_TOKEN_SECRET": "access-secret",
            "ACCESS_TOKEN_EXPIRY": "1d",
            "REFRESH_TOKEN_SECRET": "refresh-secret",
            "REFRESH_TOKEN_EXPIRY": "10d",
        }
        values.update(overrides)
        for key, value in values.items():
            if value is None:
                monkeypatch.delenv(key, raising=False)
            else:
                monkeypatch.setenv(key, value)

    def test_loads_token_settings(self, monkeypatch):
        self._env(monkeypatch)

        settings = Settings(_env_file=None)

        assert settings.access_token_expiry == timedelta(days=1)
        assert settings.refresh_token_expiry == timedelta(days=10)
        config = TokenConfig.from_settings(settings)
        assert config.access_secret == "access-secret"
        assert config.refresh_ttl == timedelta(days=10)

    @pytest.mark.parametrize(
        "missing",
        ["ACCESS_TOKEN_SECRET", "ACCESS_TOKEN_EXPIRY", "REFRESH_TOKEN_SECRET", "REFRESH_TOKEN_EXPIRY"],
    )
    def test_missing_token_setting_is_fatal(self, monkeypatch, missing):
        self._env(monkeypatch, **{missing: None})

        with pytest.raises(ValidationError):
            Settings(_env_file=None)

    def test_empty_secret_is_fatal(self, monkeypatch):
        self._env(monkeypatch, REFRESH_TOKEN_SECRET="")

        with pytest.raises(ValidationError):
            Settings(_env_file=None)

    def test_invalid_expiry_is_fatal(self, monkeypatch):
        self._env(monkeypatch, ACCESS_TOKEN_EXPIRY="soon")

        with pytest.raises(ValidationError):
            Settings(_env_file=None)

    def test_cors_origins_list(self, monkeypatch):
        self._env(monkeypatch, CORS_ORIGIN="https://a.example, https://b.example")

        settings = Settings(_env_file=None)

        assert settings.cors_origins_list == ["https://a.example", "https://b.example"]

    def test_cors_defaults_to_no_origins(self, monkeypatch):
        self._env(monkeypatch, CORS_ORIGIN=None)

        settings = Settings(_env_file=None)

        assert settings.cors_origin == ""
        assert settings.cors_origins_list == []

    def test_pool_size_from_env(self, monkeypatch):
        self._env(monkeypatch, DB_POOL_MIN_SIZE="3", DB_POOL_MAX_SIZE="7")

        settings = Settings(_env_file=None)

        assert (settings.db_pool_min_size, settings.db_pool_max_size) == (3, 7)

    def test_pool_min_above_max_is_fatal(self, monkeypatch):
        self._env(monkeypatch, DB_POOL_MIN_SIZE="8", DB_POOL_MAX_SIZE="2")

        with pytest.raises(ValidationError):
            Settings(_env_file=None)

    def test_reads_env_file(self, monkeypatch, tmp_path):
        self._env(
            monkeypatch,
            ACCESS_TOKEN_SECRET=None,
            ACCESS_TOKEN_EXPIRY=None,
            REFRESH_TOKEN_SECRET=None,
            REFRESH_TOKEN_EXPIRY=None,
        )
        env_file = tmp_path / ".env"
        env_file.write_text(
            "access_token_secret=file-access\n"
            "ACCESS_TOKEN_EXPIRY=15m\n"
            "REFRESH_TOKEN_SECRET=file-refresh\n"
            "REFRESH_TOKEN_EXPIRY=1d\n"
        )

        settings = Settings(_env_file=env_file)

        assert settings.access_token_secret == "file-access"
        assert settings.access_token_expiry == timedelta(minutes=15)
        assert Settings.model_config["env_file"] == ".env"
