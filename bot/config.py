from __future__ import annotations

from dataclasses import dataclass
import os


BOT_VERSION = "1.0.0"
DEFAULT_BOT_NAME = "Group Up"
TRUTHY_VALUES = {"1", "true", "yes", "on"}
VALID_DISCORD_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def env_bool(name: str, *, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in TRUTHY_VALUES


def env_int(name: str, *, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    text = raw.strip()
    if not text:
        return default
    try:
        return int(text)
    except ValueError as exc:
        raise ValueError(f"Invalid integer env {name}={raw!r}") from exc


@dataclass(frozen=True)
class BotConfig:
    discord_token: str
    database_url: str
    db_echo: bool
    bot_name: str
    log_channel_id: int
    dev_guild_id: int
    dev_mode: bool
    discord_log_level: str
    version: str = BOT_VERSION

    def validate(self) -> None:
        if not self.database_url:
            raise ValueError("DATABASE_URL must be set")
        if not self.bot_name.strip():
            raise ValueError("BOT_NAME must not be empty")
        if self.log_channel_id < 0 or self.dev_guild_id < 0:
            raise ValueError("LOG_CHANNEL_ID/DEV_GUILD_ID must be >= 0")
        if self.dev_mode and self.dev_guild_id <= 0:
            raise ValueError("DEV_MODE requires DEV_GUILD_ID")
        if self.discord_log_level not in VALID_DISCORD_LOG_LEVELS:
            valid = ", ".join(sorted(VALID_DISCORD_LOG_LEVELS))
            raise ValueError(f"DISCORD_LOG_LEVEL must be one of: {valid}")


def load_config() -> BotConfig:
    cfg = BotConfig(
        discord_token=os.getenv("DISCORD_TOKEN", ""),
        database_url=os.getenv("DATABASE_URL", ""),
        db_echo=env_bool("DB_ECHO", default=False),
        bot_name=os.getenv("BOT_NAME", DEFAULT_BOT_NAME).strip(),
        log_channel_id=env_int("LOG_CHANNEL_ID", default=0),
        dev_guild_id=env_int("DEV_GUILD_ID", default=0),
        dev_mode=env_bool("DEV_MODE", default=False),
        discord_log_level=os.getenv("DISCORD_LOG_LEVEL", "INFO").strip().upper(),
    )
    cfg.validate()
    return cfg
