from __future__ import annotations

import logging


log = logging.getLogger("groupup.errors")


def db_error(location: str, operation: str, exc: BaseException) -> None:
    log.error("%s | Failed to %s database | %s", location, operation, exc, exc_info=exc)


def message_send_error(location: str, tag: str, exc: BaseException) -> None:
    log.error("%s | Failed to send message (%s) | %s", location, tag, exc)


def message_delete_error(location: str, tag: str, exc: BaseException) -> None:
    log.error("%s | Failed to delete message (%s) | %s", location, tag, exc)


def channel_update_error(location: str, tag: str, exc: BaseException) -> None:
    log.error("%s | Failed to update channel (%s) | %s", location, tag, exc)


def message_fetch_error(location: str, tag: str, exc: BaseException) -> None:
    log.error("%s | Failed to fetch messages (%s) | %s", location, tag, exc)
