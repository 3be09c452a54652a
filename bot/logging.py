from __future__ import annotations

import logging


LOG_FORMAT = "[%(asctime)s] %(levelname)s [%(name)s|%(module)s.%(funcName)s] %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
NOISY_LOGGERS = ("discord.gateway", "discord.http", "sqlalchemy.engine")


def setup_logging(level_name: str = "INFO") -> None:
    log_level = getattr(logging, (level_name or "INFO").upper(), logging.INFO)

    logging.basicConfig(
        level=log_level,
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
        force=True,
    )
    # discord.py and SQLAlchemy log every heartbeat/statement at INFO
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))
