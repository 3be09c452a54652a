from __future__ import annotations

import logging
from typing import Any

import discord

from services.results import OpResult
from services.setup_service import MessageSnapshot
from utils import loggers
from views.components import detach, welcome_view
from views.embeds import log_probe_embed, welcome_content, welcome_embed


log = logging.getLogger("groupup.setup")

LOCATION = "channel_ops"
PERMISSION_REASON = "LFG Channel setup"


def snapshot_message(message: Any) -> MessageSnapshot:
    embeds = getattr(message, "embeds", None) or []
    footer_text = None
    if embeds:
        footer_text = getattr(getattr(embeds[0], "footer", None), "text", None)
    author = getattr(message, "author", None)
    return MessageSnapshot(
        id=int(message.id),
        author_id=int(getattr(author, "id", 0) or 0),
        footer_text=footer_text,
    )


class DiscordChannelOps:
    """Setup-time operations against one text channel, every failure reported as an OpResult."""

    def __init__(self, channel: Any, *, bot_name: str, bot_user_id: int) -> None:
        self.channel = channel
        self.guild = channel.guild
        self.bot_name = bot_name
        self.bot_user_id = int(bot_user_id)

    async def fetch_recent_messages(self, limit: int) -> OpResult[list[MessageSnapshot]]:
        try:
            messages = [snapshot_message(message) async for message in self.channel.history(limit=limit)]
        except Exception as exc:
            loggers.message_fetch_error(LOCATION, "fetch-messages", exc)
            return OpResult.failure("fetch_failed")
        return OpResult.success(messages)

    async def send_log_probe(self, log_channel_id: int) -> OpResult[None]:
        log_channel = self.guild.get_channel(int(log_channel_id))
        if log_channel is None:
            log.info("Log channel %s not visible in guild %s", log_channel_id, self.guild.id)
            return OpResult.failure("log_channel_missing")
        try:
            await log_channel.send(embed=log_probe_embed(self.bot_name))
        except Exception as exc:
            loggers.message_send_error(LOCATION, "log-test", exc)
            return OpResult.failure("log_channel_send_failed")
        return OpResult.success()

    async def _allow_or_deny_send(self, target: Any, *, allow: bool, tag: str) -> OpResult[None]:
        overwrite = self.channel.overwrites_for(target)
        overwrite.send_messages = allow
        try:
            await self.channel.set_permissions(target, overwrite=overwrite, reason=PERMISSION_REASON)
        except Exception as exc:
            loggers.channel_update_error(LOCATION, tag, exc)
            return OpResult.failure("permission_update_failed")
        return OpResult.success()

    async def allow_role_send(self, role_id: int) -> OpResult[None]:
        role = self.guild.get_role(int(role_id))
        if role is None:
            log.info("Manager role %s not found in guild %s", role_id, self.guild.id)
            return OpResult.failure("role_missing")
        return await self._allow_or_deny_send(role, allow=True, tag="manager-allow")

    async def deny_everyone_send(self) -> OpResult[None]:
        return await self._allow_or_deny_send(self.guild.default_role, allow=False, tag="everyone-deny")

    async def bulk_delete(self, message_ids: list[int], *, reason: str) -> OpResult[None]:
        if not message_ids:
            return OpResult.success()
        try:
            targets = [discord.Object(id=message_id) for message_id in message_ids]
            await self.channel.delete_messages(targets, reason=reason)
        except Exception as exc:
            loggers.message_delete_error(LOCATION, "bulk-msg-cleanup", exc)
            return OpResult.failure("bulk_delete_failed")
        return OpResult.success()

    async def send_welcome(self, *, managed: bool, manager_role_id: int) -> OpResult[int]:
        try:
            message = await self.channel.send(
                content=welcome_content(self.channel.id, self.bot_user_id),
                embed=welcome_embed(self.bot_name, managed=managed, manager_role_id=manager_role_id),
                view=detach(welcome_view()),
            )
        except Exception as exc:
            loggers.message_send_error(LOCATION, "init-msg", exc)
            return OpResult.failure("welcome_send_failed")
        return OpResult.success(int(message.id))

    async def pin_message(self, message_id: int) -> OpResult[None]:
        try:
            await self.channel.get_partial_message(int(message_id)).pin(reason=PERMISSION_REASON)
        except Exception as exc:
            loggers.message_send_error(LOCATION, "pin-init-msg", exc)
            return OpResult.failure("pin_failed")
        return OpResult.success()
