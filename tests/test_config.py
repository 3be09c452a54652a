from __future__ import annotations

import pytest

from bot.config import DEFAULT_BOT_NAME, env_bool, env_int, load_config


DB_URL = "postgresql+asyncpg://u:p@localhost/db"


def test_env_bool_parser_truthy_falsy_defaults(monkeypatch):
    monkeypatch.setenv("FLAG", "true")
    assert env_bool("FLAG") is True

    monkeypatch.setenv("FLAG", "off")
    assert env_bool("FLAG") is False

    monkeypatch.delenv("FLAG", raising=False)
    assert env_bool("FLAG", default=True) is True


def test_env_int_blank_uses_default_and_garbage_raises(monkeypatch):
    monkeypatch.setenv("NUM", "  ")
    assert env_int("NUM", default=7) == 7

    monkeypatch.setenv("NUM", "42")
    assert env_int("NUM", default=7) == 42

    monkeypatch.setenv("NUM", "forty")
    with pytest.raises(ValueError, match="Invalid integer env NUM"):
        env_int("NUM", default=7)


def test_defaults(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", DB_URL)
    for name in ("BOT_NAME", "DISCORD_LOG_LEVEL", "DEV_MODE", "DEV_GUILD_ID", "LOG_CHANNEL_ID", "DB_ECHO"):
        monkeypatch.delenv(name, raising=False)

    cfg = load_config()

    assert cfg.bot_name == DEFAULT_BOT_NAME
    assert cfg.discord_log_level == "INFO"
    assert cfg.dev_mode is False
    assert cfg.log_channel_id == 0
    assert cfg.db_echo is False


def test_missing_database_url_is_rejected(monkeypatch):
    monkeypatch.delenv("DATABASE_URL", raising=False)
    with pytest.raises(ValueError, match="DATABASE_URL must be set"):
        load_config()


def test_discord_log_level_validation_rejects_invalid_value(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", DB_URL)
    monkeypatch.setenv("DISCORD_LOG_LEVEL", "trace")
    with pytest.raises(ValueError, match="DISCORD_LOG_LEVEL must be one of"):
        load_config()


def test_dev_mode_requires_guild(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", DB_URL)
    monkeypatch.setenv("DEV_MODE", "1")
    monkeypatch.delenv("DEV_GUILD_ID", raising=False)
    with pytest.raises(ValueError, match="DEV_MODE requires DEV_GUILD_ID"):
        load_config()

    monkeypatch.setenv("DEV_GUILD_ID", "123")
    assert load_config().dev_guild_id == 123
