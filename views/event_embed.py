from __future__ import annotations

from datetime import UTC, datetime
import re
from typing import Any

import discord

from services.activities import ResolvedActivity, validate_custom_activity
from services.event_service import EVENT_FOOTER_MARKER, EventDraft
from utils.text import mention_list, parse_mentions
from utils.time_utils import discord_timestamp
from views.embeds import INFO_COLOR, INFO_COLOR_2


ACTIVITY_DETAILS_FIELD = "Activity Details:"
START_TIME_FIELD = "Start Time:"
MEMBERS_FIELD_PREFIX = "Members"
ALTERNATES_FIELD = "Alternates:"
MEMBERS_CONTINUED_FIELD = "Members (cont.):"
ALTERNATES_CONTINUED_FIELD = "Alternates (cont.):"
CUSTOM_TITLE_FIELD = "Activity Title:"
CUSTOM_SUBTITLE_FIELD = "Activity Subtitle:"
CUSTOM_MAX_MEMBERS_FIELD = "Maximum Members:"
EMPTY_SUBTITLE = "-"
FOOTER_SEPARATOR = " | "
# Mentions per field. A field value holds at most 1024 characters.
ROSTER_FIELD_LIMIT = 40

_MEMBERS_FIELD_PATTERN = re.compile(r"^Members \((?P<count>\d+)/(?P<max>\d+)\):$")
_START_PATTERN = re.compile(r"<t:(?P<epoch>-?\d+):F>")


def members_field_name(draft: EventDraft) -> str:
    return f"{MEMBERS_FIELD_PREFIX} ({len(draft.members)}/{draft.max_members}):"


def _add_roster_fields(embed: discord.Embed, name: str, continued_name: str, user_ids: list[int]) -> None:
    chunks = [user_ids[index:index + ROSTER_FIELD_LIMIT] for index in range(0, len(user_ids), ROSTER_FIELD_LIMIT)]
    for position, chunk in enumerate(chunks or [[]]):
        embed.add_field(
            name=name if position == 0 else continued_name,
            value=mention_list(chunk, limit=ROSTER_FIELD_LIMIT),
            inline=True,
        )


def build_event_embed(draft: EventDraft) -> discord.Embed:
    embed = discord.Embed(
        title=draft.activity_title,
        description=draft.description or None,
        color=INFO_COLOR,
    )
    embed.add_field(name=ACTIVITY_DETAILS_FIELD, value=draft.activity_subtitle or EMPTY_SUBTITLE, inline=False)
    if draft.start is not None:
        embed.add_field(
            name=START_TIME_FIELD,
            value=f"{discord_timestamp(draft.start, 'F')} ({discord_timestamp(draft.start, 'R')})",
            inline=False,
        )
    _add_roster_fields(embed, members_field_name(draft), MEMBERS_CONTINUED_FIELD, draft.members)
    _add_roster_fields(embed, ALTERNATES_FIELD, ALTERNATES_CONTINUED_FIELD, draft.alternates)
    creator = draft.creator_name or "Unknown"
    embed.set_footer(text=f"{EVENT_FOOTER_MARKER} {creator}{FOOTER_SEPARATOR}{draft.creator_id or 0}")
    return embed


def _first_embed(message: Any) -> Any | None:
    embeds = getattr(message, "embeds", None) or []
    return embeds[0] if embeds else None


def _parse_footer(text: str | None) -> tuple[str | None, int | None]:
    if not text or not text.startswith(EVENT_FOOTER_MARKER):
        raise ValueError("Embed is not an event post")
    body = text[len(EVENT_FOOTER_MARKER):].strip()
    name, separator, raw_id = body.rpartition(FOOTER_SEPARATOR.strip())
    if not separator:
        return body or None, None
    try:
        creator_id = int(raw_id.strip())
    except ValueError:
        creator_id = None
    return name.strip() or None, creator_id


def parse_event_embed(embed: Any) -> EventDraft:
    """Rebuild the event state stored in an event (or preview) embed."""
    if embed is None:
        raise ValueError("Missing event embed")

    footer_text = getattr(getattr(embed, "footer", None), "text", None)
    creator_name, creator_id = _parse_footer(footer_text)

    subtitle = ""
    start: datetime | None = None
    max_members: int | None = None
    members: list[int] = []
    alternates: list[int] = []
    for field in getattr(embed, "fields", None) or []:
        name = str(field.name or "")
        value = str(field.value or "")
        if name == ACTIVITY_DETAILS_FIELD:
            subtitle = "" if value == EMPTY_SUBTITLE else value
        elif name == START_TIME_FIELD:
            match = _START_PATTERN.search(value)
            if match:
                start = datetime.fromtimestamp(int(match.group("epoch")), tz=UTC)
        elif name in (ALTERNATES_FIELD, ALTERNATES_CONTINUED_FIELD):
            alternates.extend(parse_mentions(value))
        elif name == MEMBERS_CONTINUED_FIELD:
            members.extend(parse_mentions(value))
        else:
            match = _MEMBERS_FIELD_PATTERN.match(name)
            if match:
                max_members = int(match.group("max"))
                members.extend(parse_mentions(value))

    if max_members is None:
        raise ValueError("Event embed has no members field")

    return EventDraft(
        activity_title=str(embed.title or ""),
        activity_subtitle=subtitle,
        max_members=max_members,
        start=start,
        description=str(embed.description or ""),
        creator_id=creator_id,
        creator_name=creator_name,
        members=members,
        alternates=alternates,
    )


def parse_event_message(message: Any) -> EventDraft:
    return parse_event_embed(_first_embed(message))


def build_custom_activity_embed(activity: ResolvedActivity) -> discord.Embed:
    embed = discord.Embed(
        title="Please verify your custom activity.",
        description="If everything looks right, continue to the event details.  Otherwise edit the activity.",
        color=INFO_COLOR_2,
    )
    embed.add_field(name=CUSTOM_TITLE_FIELD, value=activity.title, inline=True)
    embed.add_field(name=CUSTOM_SUBTITLE_FIELD, value=activity.subtitle or EMPTY_SUBTITLE, inline=True)
    embed.add_field(name=CUSTOM_MAX_MEMBERS_FIELD, value=str(activity.max_members), inline=True)
    return embed


def parse_custom_activity_embed(embed: Any) -> ResolvedActivity:
    if embed is None:
        raise ValueError("Missing custom activity embed")
    values = {str(field.name): str(field.value or "") for field in getattr(embed, "fields", None) or []}
    if CUSTOM_TITLE_FIELD not in values or CUSTOM_MAX_MEMBERS_FIELD not in values:
        raise ValueError("Embed is not a custom activity")
    subtitle = values.get(CUSTOM_SUBTITLE_FIELD, "")
    return validate_custom_activity(
        values[CUSTOM_TITLE_FIELD],
        "" if subtitle == EMPTY_SUBTITLE else subtitle,
        values[CUSTOM_MAX_MEMBERS_FIELD],
    )


def parse_custom_activity_message(message: Any) -> ResolvedActivity:
    return parse_custom_activity_embed(_first_embed(message))
