from __future__ import annotations

import asyncio
from collections import OrderedDict
import logging
from typing import Any


log = logging.getLogger("groupup.runtime")

_RESPONSE_ERRORS = {
    "InteractionResponded",
    "HTTPException",
    "NotFound",
    "Forbidden",
}


class InteractionAcker:
    """Per-interaction ack guard to prevent double-respond races."""

    def __init__(self, *, max_tracked: int = 2048) -> None:
        self._lock = asyncio.Lock()
        self._acked: OrderedDict[int, None] = OrderedDict()
        self._max_tracked = max(1, int(max_tracked))

    async def mark_or_get(self, interaction_id: int) -> bool:
        async with self._lock:
            if interaction_id in self._acked:
                return False
            self._acked[interaction_id] = None
            while len(self._acked) > self._max_tracked:
                self._acked.popitem(last=False)
            return True


def _is_response_error(exc: Exception) -> bool:
    return exc.__class__.__name__ in _RESPONSE_ERRORS


def _log_safe_wrapper_error(action: str, exc: Exception) -> None:
    if _is_response_error(exc):
        log.info("Discord call '%s' rejected: %s", action, exc)
        return
    log.warning("Discord call '%s' failed: %s", action, exc, exc_info=True)


def _response_done(interaction: Any) -> bool:
    response = getattr(interaction, "response", None)
    is_done = getattr(response, "is_done", None)
    return bool(callable(is_done) and is_done())


async def safe_defer(interaction: Any, *, ephemeral: bool = False) -> bool:
    response = getattr(interaction, "response", None)
    if response is None or _response_done(interaction):
        return False

    try:
        await response.defer(ephemeral=ephemeral)
        return True
    except Exception as exc:
        _log_safe_wrapper_error("defer", exc)
        return False


async def safe_followup(interaction: Any, content: str | None = None, *, ephemeral: bool = False, **kwargs: Any) -> bool:
    followup = getattr(interaction, "followup", None)
    if followup is None:
        return False

    try:
        await followup.send(content, ephemeral=ephemeral, **kwargs)
        return True
    except Exception as exc:
        _log_safe_wrapper_error("followup.send", exc)
        return False


async def safe_send_initial(
    interaction: Any,
    content: str | None = None,
    *,
    ephemeral: bool = False,
    **kwargs: Any,
) -> bool:
    response = getattr(interaction, "response", None)
    if response is None:
        return False
    if _response_done(interaction):
        return await safe_followup(interaction, content, ephemeral=ephemeral, **kwargs)

    try:
        await response.send_message(content, ephemeral=ephemeral, **kwargs)
        return True
    except Exception as exc:
        _log_safe_wrapper_error("response.send_message", exc)
        if not _is_response_error(exc):
            return False
        return await safe_followup(interaction, content, ephemeral=ephemeral, **kwargs)


async def safe_edit_response(interaction: Any, **kwargs: Any) -> bool:
    """Edit the message the component was attached to, as the interaction response."""
    response = getattr(interaction, "response", None)
    if response is None or _response_done(interaction):
        return False

    try:
        await response.edit_message(**kwargs)
        return True
    except Exception as exc:
        _log_safe_wrapper_error("response.edit_message", exc)
        return False


async def safe_send_modal(interaction: Any, modal: Any) -> bool:
    response = getattr(interaction, "response", None)
    if response is None or _response_done(interaction):
        return False

    try:
        await response.send_modal(modal)
        return True
    except Exception as exc:
        _log_safe_wrapper_error("response.send_modal", exc)
        return False


async def safe_send_channel_message(channel: Any, **kwargs: Any) -> Any | None:
    send_fn = getattr(channel, "send", None)
    if send_fn is None:
        return None
    try:
        return await send_fn(**kwargs)
    except Exception as exc:
        _log_safe_wrapper_error("channel.send", exc)
        return None


async def safe_edit_message(message: Any, **kwargs: Any) -> bool:
    edit_fn = getattr(message, "edit", None)
    if edit_fn is None:
        return False
    try:
        await edit_fn(**kwargs)
        return True
    except Exception as exc:
        _log_safe_wrapper_error("message.edit", exc)
        return False


async def safe_delete_message(message: Any) -> bool:
    delete_fn = getattr(message, "delete", None)
    if delete_fn is None:
        return False
    try:
        await delete_fn()
        return True
    except Exception as exc:
        _log_safe_wrapper_error("message.delete", exc)
        return False


async def safe_fetch_message(channel: Any, message_id: int) -> Any | None:
    fetch_fn = getattr(channel, "fetch_message", None)
    if fetch_fn is None:
        return None
    try:
        return await fetch_fn(int(message_id))
    except Exception as exc:
        _log_safe_wrapper_error("channel.fetch_message", exc)
        return None
