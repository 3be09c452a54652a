from __future__ import annotations

from typing import TYPE_CHECKING, Any

import discord

from gateway.safety import safe_edit_response, safe_followup, safe_send_initial
from services.activities import PATH_SEPARATOR, Activity, options_at, walk_path
from views.embeds import CREATE_NEW_EVENT_LABEL
from views.routing import ComponentId, build_custom_id

if TYPE_CHECKING:
    from bot.runtime import GroupUpBot


TITLE_INPUT_ID = "activityTitle"
SUBTITLE_INPUT_ID = "activitySubtitle"
MAX_MEMBERS_INPUT_ID = "activityMaxMembers"
TIME_INPUT_ID = "eventTime"
TIMEZONE_INPUT_ID = "eventTimeZone"
DATE_INPUT_ID = "eventDate"
DESCRIPTION_INPUT_ID = "eventDescription"


def detach(view: discord.ui.View) -> discord.ui.View:
    """Stop a view before sending so discord.py does not keep it; the router answers its components."""
    view.stop()
    return view


def view_kwargs(view: discord.ui.View | None) -> dict[str, Any]:
    return {"view": detach(view)} if view is not None else {}


def is_ephemeral_message(message: Any) -> bool:
    flags = getattr(message, "flags", None)
    return bool(getattr(flags, "ephemeral", False))


def modal_values(interaction: Any) -> dict[str, str]:
    values: dict[str, str] = {}
    rows = (getattr(interaction, "data", None) or {}).get("components") or []
    for row in rows:
        children = row.get("components") or ([row["component"]] if row.get("component") else [])
        for child in children:
            custom_id = child.get("custom_id")
            if custom_id:
                values[str(custom_id)] = str(child.get("value") or "")
    return values


def selected_values(interaction: Any) -> list[str]:
    return [str(value) for value in ((getattr(interaction, "data", None) or {}).get("values") or [])]


async def respond_step(
    bot: "GroupUpBot",
    interaction: Any,
    *,
    embed: discord.Embed,
    view: discord.ui.View | None = None,
    content: str | None = None,
) -> bool:
    """Answer a wizard step: replace the ephemeral step message, or open a new ephemeral one."""
    first = await bot._mark_interaction_once(interaction)
    if first and is_ephemeral_message(getattr(interaction, "message", None)):
        edited = await safe_edit_response(
            interaction,
            content=content,
            embed=embed,
            view=detach(view) if view is not None else None,
        )
        if edited:
            return True
    if first:
        return await safe_send_initial(interaction, content, ephemeral=True, embed=embed, **view_kwargs(view))
    return await safe_followup(interaction, content, ephemeral=True, embed=embed, **view_kwargs(view))


def _button(
    label: str,
    component_id: ComponentId,
    arg: str = "",
    *,
    style: discord.ButtonStyle = discord.ButtonStyle.primary,
    emoji: str | None = None,
    row: int | None = None,
) -> discord.ui.Button:
    return discord.ui.Button(
        label=label,
        custom_id=build_custom_id(component_id, arg),
        style=style,
        emoji=emoji,
        row=row,
    )


def welcome_view() -> discord.ui.View:
    view = discord.ui.View(timeout=None)
    view.add_item(_button(CREATE_NEW_EVENT_LABEL, ComponentId.GAME_SELECTION, style=discord.ButtonStyle.success))
    return view


def _option_label(activity: Activity) -> str:
    return activity.name[:100]


def game_selection_view(path: str) -> discord.ui.View:
    options = options_at(path)
    view = discord.ui.View(timeout=None)
    select = discord.ui.Select(
        custom_id=build_custom_id(ComponentId.GAME_SELECTION, path),
        placeholder="Select a Game..." if not path else "Select an Activity...",
        min_values=1,
        max_values=1,
        options=[
            discord.SelectOption(
                label=_option_label(activity),
                value=str(index),
                description=None if activity.is_leaf else f"{len(activity.options)} options",
            )
            for index, activity in enumerate(options)
        ],
        row=0,
    )
    view.add_item(select)
    view.add_item(_button("Create Custom Event", ComponentId.CREATE_CUSTOM_EVENT, row=1))
    if path:
        parent = path.rpartition(PATH_SEPARATOR)[0]
        view.add_item(
            _button("Back", ComponentId.GAME_SELECTION, parent, style=discord.ButtonStyle.secondary, row=1)
        )
    return view


def selection_breadcrumb(path: str) -> str:
    return " → ".join(node.name for node in walk_path(path))


def custom_activity_verify_view() -> discord.ui.View:
    view = discord.ui.View(timeout=None)
    view.add_item(_button("Looks good, continue", ComponentId.FINALIZE, "custom", style=discord.ButtonStyle.success))
    view.add_item(
        _button("Edit Custom Activity", ComponentId.CREATE_CUSTOM_EVENT, "edit", style=discord.ButtonStyle.secondary)
    )
    return view


def event_preview_view() -> discord.ui.View:
    view = discord.ui.View(timeout=None)
    view.add_item(_button("Create Event", ComponentId.CREATE_EVENT, style=discord.ButtonStyle.success))
    view.add_item(_button("Edit Event Details", ComponentId.FINALIZE, "edit", style=discord.ButtonStyle.secondary))
    return view


def event_post_view() -> discord.ui.View:
    view = discord.ui.View(timeout=None)
    view.add_item(_button("Join", ComponentId.JOIN_EVENT, style=discord.ButtonStyle.success, emoji="✅"))
    view.add_item(_button("Join as Alternate", ComponentId.ALTERNATE_EVENT, emoji="🔄"))
    view.add_item(_button("Leave", ComponentId.LEAVE_EVENT, style=discord.ButtonStyle.secondary, emoji="❌"))
    view.add_item(_button("Delete", ComponentId.DELETE_EVENT, style=discord.ButtonStyle.danger, emoji="🗑️"))
    return view


class CustomActivityModal(discord.ui.Modal):
    activity_title = discord.ui.TextInput(
        label="Activity Title",
        placeholder="The name of the game or event",
        custom_id=TITLE_INPUT_ID,
        required=True,
        max_length=35,
    )
    activity_subtitle = discord.ui.TextInput(
        label="Activity Subtitle",
        placeholder="The specific activity within the game or event",
        custom_id=SUBTITLE_INPUT_ID,
        required=False,
        max_length=50,
    )
    max_members = discord.ui.TextInput(
        label="Maximum Members",
        placeholder="1-99",
        custom_id=MAX_MEMBERS_INPUT_ID,
        required=True,
        max_length=2,
    )

    def __init__(self, *, title_default: str = "", subtitle_default: str = "", max_members_default: str = ""):
        super().__init__(
            title="Create Custom Activity",
            custom_id=build_custom_id(ComponentId.VERIFY_CUSTOM_ACTIVITY),
            timeout=None,
        )
        self.activity_title.default = title_default or None
        self.activity_subtitle.default = subtitle_default or None
        self.max_members.default = max_members_default or None


class EventDetailsModal(discord.ui.Modal):
    start_time = discord.ui.TextInput(
        label="Start Time",
        placeholder="8pm, 8:30 PM, 20:30",
        custom_id=TIME_INPUT_ID,
        required=True,
        max_length=8,
    )
    time_zone = discord.ui.TextInput(
        label="Time Zone",
        placeholder="EST, CET, UTC+2, America/New_York",
        custom_id=TIMEZONE_INPUT_ID,
        required=False,
        max_length=40,
    )
    start_date = discord.ui.TextInput(
        label="Start Date",
        placeholder="today, tomorrow, MM/DD/YYYY, YYYY-MM-DD",
        custom_id=DATE_INPUT_ID,
        required=False,
        max_length=20,
    )
    description = discord.ui.TextInput(
        label="Description",
        style=discord.TextStyle.paragraph,
        placeholder="Anything members should know",
        custom_id=DESCRIPTION_INPUT_ID,
        required=False,
        max_length=1000,
    )

    def __init__(
        self,
        source: str,
        *,
        time_default: str = "",
        timezone_default: str = "",
        date_default: str = "",
        description_default: str = "",
    ):
        super().__init__(
            title="Event Details",
            custom_id=build_custom_id(ComponentId.FINALIZE, source),
            timeout=None,
        )
        self.start_time.default = time_default or None
        self.time_zone.default = timezone_default or None
        self.start_date.default = date_default or None
        self.description.default = description_default or None
