from __future__ import annotations

from datetime import UTC
import logging
from typing import TYPE_CHECKING, Any

import discord

from gateway.safety import safe_send_channel_message, safe_send_initial, safe_send_modal
from services.activities import (
    MAX_SELECT_OPTIONS,
    PATH_SEPARATOR,
    ResolvedActivity,
    options_at,
    resolve_activity,
    validate_custom_activity,
    walk_path,
)
from services.event_service import EventDraft
from utils.time_utils import parse_event_start, utc_now
from views.components import (
    DATE_INPUT_ID,
    DESCRIPTION_INPUT_ID,
    MAX_MEMBERS_INPUT_ID,
    SUBTITLE_INPUT_ID,
    TIME_INPUT_ID,
    TIMEZONE_INPUT_ID,
    TITLE_INPUT_ID,
    CustomActivityModal,
    EventDetailsModal,
    custom_activity_verify_view,
    detach,
    event_post_view,
    event_preview_view,
    game_selection_view,
    modal_values,
    respond_step,
    selected_values,
    selection_breadcrumb,
    view_kwargs,
)
from views.embeds import INFO_COLOR, SAFELY_DISMISS_MSG, SUCCESS_COLOR, error_embed
from views.event_embed import (
    build_custom_activity_embed,
    build_event_embed,
    parse_custom_activity_message,
    parse_event_message,
)
from views.routing import ComponentId

if TYPE_CHECKING:
    from bot.runtime import GroupUpBot


log = logging.getLogger("groupup.wizard")

CUSTOM_SOURCE = "custom"
EDIT_SOURCE = "edit"
PREVIEW_CONTENT = "Please verify the details of your event below."


def member_name(user: Any) -> str:
    for attr in ("display_name", "global_name", "name"):
        value = getattr(user, attr, None)
        if value:
            return str(value)
    return str(getattr(user, "id", "Unknown"))


def is_modal_submit(interaction: Any) -> bool:
    return getattr(interaction, "type", None) == discord.InteractionType.modal_submit


async def open_modal(bot: "GroupUpBot", interaction: Any, modal: discord.ui.Modal) -> bool:
    if not await bot._mark_interaction_once(interaction):
        return False
    if await safe_send_modal(interaction, detach(modal)):
        return True
    log.warning("Could not open modal %s for user_id=%s", modal.custom_id, getattr(interaction.user, "id", None))
    return await safe_send_initial(
        interaction,
        ephemeral=True,
        embed=error_embed("Unable to open the form.", "Please click the button again."),
    )


def game_selection_embed(path: str) -> discord.Embed:
    if not path:
        return discord.Embed(
            title="Please select a Game from the list below.",
            description=(
                "If your game is not listed, click on the `Create Custom Event` button to describe it yourself."
            ),
            color=INFO_COLOR,
        )
    return discord.Embed(
        title="Please select an Activity from the list below.",
        description=(
            f"Selected: **{selection_breadcrumb(path)}**\n\n"
            "If your activity is not listed, click on the `Create Custom Event` button to describe it yourself."
        ),
        color=INFO_COLOR,
    )


async def handle_game_selection(bot: "GroupUpBot", interaction: Any, arg: str) -> None:
    path = arg
    values = selected_values(interaction)
    if values:
        path = f"{arg}{PATH_SEPARATOR}{values[0]}" if arg else values[0]

    try:
        chain = walk_path(path)
    except ValueError:
        log.info("Rejected activity path %r from user_id=%s", path, getattr(interaction.user, "id", None))
        await bot.reply_error_code(interaction, "gameSelBadPath")
        return

    if chain and chain[-1].is_leaf:
        await open_modal(bot, interaction, EventDetailsModal(path))
        return
    if len(options_at(path)) > MAX_SELECT_OPTIONS:
        await bot.reply_error_code(interaction, "gameSelTooManyOptions")
        return
    await respond_step(bot, interaction, embed=game_selection_embed(path), view=game_selection_view(path))


async def handle_create_custom_event(bot: "GroupUpBot", interaction: Any, arg: str) -> None:
    modal = CustomActivityModal()
    if arg == EDIT_SOURCE:
        try:
            activity = parse_custom_activity_message(getattr(interaction, "message", None))
        except ValueError:
            activity = None
        if activity is not None:
            modal = CustomActivityModal(
                title_default=activity.title,
                subtitle_default=activity.subtitle,
                max_members_default=str(activity.max_members),
            )
    await open_modal(bot, interaction, modal)


async def handle_verify_custom_activity(bot: "GroupUpBot", interaction: Any, arg: str) -> None:
    values = modal_values(interaction)
    try:
        activity = validate_custom_activity(
            values.get(TITLE_INPUT_ID, ""),
            values.get(SUBTITLE_INPUT_ID, ""),
            values.get(MAX_MEMBERS_INPUT_ID, ""),
        )
    except ValueError as exc:
        await bot.reply_embed(interaction, error_embed("Invalid custom activity.", f"{exc}.  Please try again."))
        return
    await respond_step(
        bot,
        interaction,
        embed=build_custom_activity_embed(activity),
        view=custom_activity_verify_view(),
    )


def resolve_event_activity(source: str, message: Any) -> ResolvedActivity:
    """Find the activity for the details form: catalog path, custom activity embed or event preview."""
    if source == CUSTOM_SOURCE:
        return parse_custom_activity_message(message)
    if source == EDIT_SOURCE:
        return parse_event_message(message).activity()
    return resolve_activity(source)


def _details_modal_for(source: str, message: Any) -> EventDetailsModal:
    if source != EDIT_SOURCE:
        return EventDetailsModal(source)
    draft = parse_event_message(message)
    start = draft.start.astimezone(UTC) if draft.start is not None else None
    return EventDetailsModal(
        source,
        time_default=start.strftime("%H:%M") if start else "",
        timezone_default="UTC",
        date_default=start.strftime("%Y-%m-%d") if start else "",
        description_default=draft.description,
    )


async def handle_finalize(bot: "GroupUpBot", interaction: Any, arg: str) -> None:
    message = getattr(interaction, "message", None)
    if not arg:
        await bot.reply_error_code(interaction, "finalizeMissingSource")
        return

    if not is_modal_submit(interaction):
        try:
            modal = _details_modal_for(arg, message)
        except ValueError:
            await bot.reply_error_code(interaction, "finalizeBadPreview")
            return
        await open_modal(bot, interaction, modal)
        return

    try:
        activity = resolve_event_activity(arg, message)
    except ValueError:
        log.info("Could not resolve activity source=%r user_id=%s", arg, getattr(interaction.user, "id", None))
        await bot.reply_error_code(interaction, "finalizeBadActivity")
        return

    values = modal_values(interaction)
    try:
        start = parse_event_start(
            values.get(TIME_INPUT_ID, ""),
            values.get(TIMEZONE_INPUT_ID, ""),
            values.get(DATE_INPUT_ID, ""),
        )
    except ValueError as exc:
        await bot.reply_embed(interaction, error_embed("Invalid start time.", f"{exc}.  Please try again."))
        return
    if start < utc_now():
        await bot.reply_embed(
            interaction,
            error_embed("Invalid start time.", "The event cannot start in the past.  Please try again."),
        )
        return

    draft = EventDraft.from_activity(
        activity,
        start=start,
        description=values.get(DESCRIPTION_INPUT_ID, ""),
        creator_id=interaction.user.id,
        creator_name=member_name(interaction.user),
    )
    await respond_step(
        bot,
        interaction,
        content=PREVIEW_CONTENT,
        embed=build_event_embed(draft),
        view=event_preview_view(),
    )


async def handle_create_event(bot: "GroupUpBot", interaction: Any, arg: str) -> None:
    try:
        draft = parse_event_message(getattr(interaction, "message", None))
    except ValueError:
        await bot.reply_error_code(interaction, "createEventBadPreview")
        return

    posted = await safe_send_channel_message(
        interaction.channel,
        embed=build_event_embed(draft),
        **view_kwargs(event_post_view()),
    )
    if posted is None:
        await bot.reply_embed(
            interaction,
            error_embed(
                "Unable to create event.",
                f"{bot.config.bot_name} could not post in this channel.  Please check its permissions and try again.",
            ),
        )
        return

    log.info(
        "Created event message_id=%s guild_id=%s channel_id=%s creator_id=%s",
        posted.id,
        getattr(interaction, "guild_id", None),
        getattr(interaction, "channel_id", None),
        draft.creator_id,
    )
    jump_url = getattr(posted, "jump_url", None) or f"message {posted.id}"
    await respond_step(
        bot,
        interaction,
        embed=discord.Embed(
            title="Event created!",
            description=f"Your event has been posted: {jump_url}\n\n{SAFELY_DISMISS_MSG}",
            color=SUCCESS_COLOR,
        ),
    )


def register_event_creation(router: Any) -> None:
    router.register(ComponentId.GAME_SELECTION, handle_game_selection)
    router.register(ComponentId.CREATE_CUSTOM_EVENT, handle_create_custom_event)
    router.register(ComponentId.VERIFY_CUSTOM_ACTIVITY, handle_verify_custom_activity)
    router.register(ComponentId.FINALIZE, handle_finalize)
    router.register(ComponentId.CREATE_EVENT, handle_create_event)
