from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from gateway.channel_ops import DiscordChannelOps
from services.setup_service import (
    SetupRequest,
    SetupResult,
    SetupState,
    delete_channel_setup,
    parse_setup_request,
    run_channel_setup,
)
from views.embeds import delete_channel_embed, setup_result_embed

if TYPE_CHECKING:
    from bot.runtime import GroupUpBot


log = logging.getLogger("groupup.setup")


def _resolve_channel(bot: "GroupUpBot", interaction: Any, channel_id: int | None) -> Any | None:
    channel = bot.get_channel(channel_id) if channel_id else None
    if channel is None:
        channel = getattr(interaction, "channel", None)
    if getattr(channel, "guild", None) is None:
        return None
    return channel


async def execute_setup(bot: "GroupUpBot", interaction: Any) -> SetupResult:
    request: SetupRequest = parse_setup_request(
        getattr(interaction, "data", None),
        guild_id=getattr(interaction, "guild_id", None),
        channel_id=getattr(interaction, "channel_id", None),
    )
    await bot._defer(interaction, ephemeral=True)
    await bot.track_usage("cmd-setup")

    channel = _resolve_channel(bot, interaction, request.channel_id)
    if channel is None:
        result = SetupResult(SetupState.MISSING_OPTIONS, request, error_code="setupMissingAllOptions")
    else:
        channel_ops = DiscordChannelOps(
            channel,
            bot_name=bot.config.bot_name,
            bot_user_id=int(getattr(bot.user, "id", 0) or 0),
        )
        result = await run_channel_setup(
            request,
            store=bot.store,
            persistence=bot.persistence,
            channel_ops=channel_ops,
            bot_user_id=channel_ops.bot_user_id,
        )

    log.info(
        "Setup finished state=%s guild_id=%s channel_id=%s user_id=%s deleted=%s kept=%s",
        result.state.value,
        request.guild_id,
        request.channel_id,
        getattr(getattr(interaction, "user", None), "id", None),
        result.deleted_count,
        len(result.preserved_post_ids),
    )
    await bot.reply_embed(interaction, setup_result_embed(result, bot.config.bot_name))
    return result


async def execute_delete_lfg_channel(bot: "GroupUpBot", interaction: Any) -> None:
    await bot._defer(interaction, ephemeral=True)
    await bot.track_usage("cmd-delete")
    result = await delete_channel_setup(
        guild_id=getattr(interaction, "guild_id", None),
        channel_id=getattr(interaction, "channel_id", None),
        store=bot.store,
        persistence=bot.persistence,
    )
    if not result.ok:
        log.info(
            "Delete lfg-channel rejected reason=%s guild_id=%s channel_id=%s",
            result.reason,
            getattr(interaction, "guild_id", None),
            getattr(interaction, "channel_id", None),
        )
    await bot.reply_embed(interaction, delete_channel_embed(result, bot.config.bot_name))
