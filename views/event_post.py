from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import discord

from gateway.safety import (
    safe_delete_message,
    safe_defer,
    safe_edit_message,
    safe_edit_response,
    safe_fetch_message,
    safe_followup,
    safe_send_channel_message,
)
from services.event_service import EventDraft, RosterAction, apply_roster_action, can_delete_event
from views.embeds import INFO_COLOR, INFO_COLOR_2, SAFELY_DISMISS_MSG, SUCCESS_COLOR, error_embed
from views.event_embed import build_event_embed, parse_event_message
from views.routing import ComponentId

if TYPE_CHECKING:
    from bot.runtime import GroupUpBot


log = logging.getLogger("groupup.wizard")

_NO_CHANGE_MESSAGES = {
    "already_member": "You are already a member of this event.",
    "already_alternate": "You are already an alternate for this event.",
    "event_full": "This event is full and you are already on the alternate list.",
    "not_joined": "You are not a member or alternate of this event.",
    "alternates_full": "The alternate list for this event is full.",
}


def event_lock_key(message: Any) -> str:
    return f"event-{int(getattr(message, 'id', 0) or 0)}"


async def _latest_message(interaction: Any) -> Any:
    message = getattr(interaction, "message", None)
    if message is None:
        return None
    fresh = await safe_fetch_message(getattr(interaction, "channel", None), message.id)
    return fresh or message


async def _apply_roster(bot: "GroupUpBot", interaction: Any, action: RosterAction) -> None:
    message = getattr(interaction, "message", None)
    if message is None:
        await bot.reply_error_code(interaction, f"{action.value}EventMissingMessage")
        return

    async with bot.event_locks.locked(event_lock_key(message)):
        current = await _latest_message(interaction)
        try:
            draft = parse_event_message(current)
        except ValueError:
            await bot.reply_error_code(interaction, f"{action.value}EventBadEmbed")
            return

        change = apply_roster_action(draft, action, interaction.user.id)
        if not change.changed:
            notice = _NO_CHANGE_MESSAGES.get(change.reason or "", "Nothing changed.")
            await bot.reply_embed(interaction, discord.Embed(description=notice, color=INFO_COLOR))
            return

        embed = build_event_embed(draft)
        updated = False
        first = await bot._mark_interaction_once(interaction)
        if first:
            updated = await safe_edit_response(interaction, embed=embed)
        if not updated:
            if first:
                await safe_defer(interaction)
            updated = await safe_edit_message(current, embed=embed)

    if not updated:
        log.warning("Roster update for message_id=%s was not saved", getattr(message, "id", None))
        await safe_followup(
            interaction,
            ephemeral=True,
            embed=error_embed("Unable to update the event.", "Please try again in a moment."),
        )
        return

    if change.action is RosterAction.ALTERNATE and change.reason == "event_full":
        await safe_followup(
            interaction,
            ephemeral=True,
            embed=discord.Embed(
                description="This event is full, so you were added to the alternate list.",
                color=INFO_COLOR,
            ),
        )


async def handle_join_event(bot: "GroupUpBot", interaction: Any, arg: str) -> None:
    await _apply_roster(bot, interaction, RosterAction.JOIN)


async def handle_alternate_event(bot: "GroupUpBot", interaction: Any, arg: str) -> None:
    await _apply_roster(bot, interaction, RosterAction.ALTERNATE)


async def handle_leave_event(bot: "GroupUpBot", interaction: Any, arg: str) -> None:
    await _apply_roster(bot, interaction, RosterAction.LEAVE)


def _role_ids(member: Any) -> set[int]:
    return {int(role.id) for role in (getattr(member, "roles", None) or [])}


def _can_manage_messages(interaction: Any) -> bool:
    permissions = getattr(interaction, "permissions", None)
    return bool(getattr(permissions, "manage_messages", False))


def manager_audit_embed(draft: EventDraft, *, manager: Any, channel_id: int) -> discord.Embed:
    embed = discord.Embed(
        title="Event deleted by a manager",
        description=f"<@{manager.id}> deleted an event in <#{channel_id}>.",
        color=INFO_COLOR_2,
    )
    embed.add_field(name="Activity:", value=f"{draft.activity_title}\n{draft.activity_subtitle or '-'}", inline=False)
    embed.add_field(name="Created by:", value=f"<@{draft.creator_id}>" if draft.creator_id else "Unknown", inline=True)
    embed.add_field(name="Members:", value=str(len(draft.members)), inline=True)
    return embed


async def handle_delete_event(bot: "GroupUpBot", interaction: Any, arg: str) -> None:
    message = getattr(interaction, "message", None)
    try:
        draft = parse_event_message(message)
    except ValueError:
        await bot.reply_error_code(interaction, "deleteEventBadEmbed")
        return

    settings = bot.store.get_for_channel(
        getattr(interaction, "guild_id", None),
        getattr(interaction, "channel_id", None),
    )
    manager_role_id = settings.manager_role_id if settings is not None and settings.managed else 0
    user = interaction.user
    user_role_ids = _role_ids(user)
    if not can_delete_event(
        draft,
        user_id=user.id,
        user_role_ids=user_role_ids,
        can_manage_messages=_can_manage_messages(interaction),
        manager_role_id=manager_role_id,
    ):
        await bot.reply_embed(
            interaction,
            error_embed("Unable to delete event.", "Only the creator of this event or a manager may delete it."),
        )
        return

    await bot._defer(interaction, ephemeral=True)
    if not await safe_delete_message(message):
        await safe_followup(
            interaction,
            ephemeral=True,
            embed=error_embed(
                "Unable to delete event.",
                f"{bot.config.bot_name} could not delete this message.  Please check its permissions.",
            ),
        )
        return

    log.info(
        "Deleted event message_id=%s channel_id=%s by user_id=%s (creator_id=%s)",
        getattr(message, "id", None),
        getattr(interaction, "channel_id", None),
        user.id,
        draft.creator_id,
    )
    is_manager_delete = bool(manager_role_id) and manager_role_id in user_role_ids and user.id != draft.creator_id
    if is_manager_delete and settings is not None and settings.log_channel_id:
        log_channel = bot.get_channel(settings.log_channel_id)
        audit = manager_audit_embed(draft, manager=user, channel_id=int(interaction.channel_id))
        if await safe_send_channel_message(log_channel, embed=audit) is None:
            log.warning("Could not write manager audit to log channel %s", settings.log_channel_id)

    await safe_followup(
        interaction,
        ephemeral=True,
        embed=discord.Embed(
            title="Event deleted.",
            description=f"The event has been removed from this channel.  {SAFELY_DISMISS_MSG}",
            color=SUCCESS_COLOR,
        ),
    )


def register_event_post(router: Any) -> None:
    router.register(ComponentId.JOIN_EVENT, handle_join_event)
    router.register(ComponentId.ALTERNATE_EVENT, handle_alternate_event)
    router.register(ComponentId.LEAVE_EVENT, handle_leave_event)
    router.register(ComponentId.DELETE_EVENT, handle_delete_event)
