"""
Tests for environment settings, logging setup and secret generation.
"""

import logging

import pytest

import config
from generate_key import generate_secret_key
from logger import LOGGER_NAME, get_logger, setup_logger


@pytest.fixture
def env(monkeypatch):
    monkeypatch.setattr(config, "load_dotenv", lambda: None)
    for name in ("SECRET_KEY", "DATABASE_URL", "ACCESS_TOKEN_EXPIRE_MINUTES", "PORT",
                 "CLIENT_ORIGIN", "ENVIRONMENT", "SQL_ECHO", "LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("SECRET_KEY", "s3cret")
    monkeypatch.setenv("DATABASE_URL", "sqlite://")
    return monkeypatch


class TestLoadSettings:
    def test_defaults(self, env):
        settings = config.load_settings()

        assert settings.secret_key == "s3cret"
        assert settings.algorithm == "HS256"
        assert settings.access_token_expire_minutes == 60
        assert settings.port == 8000
        assert not settings.is_production
        assert settings.sql_echo is False

    def test_overrides(self, env):
        env.setenv("ACCESS_TOKEN_EXPIRE_MINUTES", "15")
        env.setenv("PORT", "5003")
        env.setenv("CLIENT_ORIGIN", "https://blog.example.com")
        env.setenv("ENVIRONMENT", "production")
        env.setenv("SQL_ECHO", "true")
        env.setenv("LOG_LEVEL", "debug")

        settings = config.load_settings()

        assert settings.access_token_expire_minutes == 15
        assert settings.port == 5003
        assert settings.client_origin == "https://blog.example.com"
        assert settings.is_production
        assert settings.sql_echo is True
        assert settings.log_level == "DEBUG"

    def test_missing_secret_is_fatal(self, env):
        env.delenv("SECRET_KEY")
        with pytest.raises(ValueError, match="SECRET_KEY"):
            config.load_settings()

    def test_missing_database_url_is_fatal(self, env):
        env.delenv("DATABASE_URL")
        with pytest.raises(ValueError, match="DATABASE_URL"):
            config.load_settings()

    def test_settings_are_immutable(self, env):
        settings = config.load_settings()
        with pytest.raises(Exception):
            settings.secret_key = "changed"


class TestLogger:
    def test_setup_is_idempotent(self, tmp_path):
        log_file = tmp_path / "app.log"
        setup_logger("INFO", str(log_file))
        logger = setup_logger("INFO", str(log_file))

        assert len(logger.handlers) == 2
        get_logger("posts").info("hello")
        for handler in logger.handlers:
            handler.flush()
        assert "| INFO | blog_api.posts | hello" in log_file.read_text(encoding="utf-8")

        setup_logger("WARNING", None)

    def test_console_only(self):
        logger = setup_logger("WARNING", None)

        assert logger is logging.getLogger(LOGGER_NAME)
        assert len(logger.handlers) == 1
        assert logger.handlers[0].level == logging.WARNING


class TestGenerateKey:
    def test_length_and_randomness(self):
        first = generate_secret_key()
        assert len(first) == 64
        assert first != generate_secret_key()

    def test_rejects_short_keys(self):
        with pytest.raises(ValueError):
            generate_secret_key(16)
