from __future__ import annotations

from datetime import UTC, datetime
from types import SimpleNamespace

import discord
import pytest

from services.activities import ResolvedActivity
from services.event_service import MAX_ALTERNATES, EventDraft, join_event
from views.event_embed import (
    ALTERNATES_CONTINUED_FIELD,
    ALTERNATES_FIELD,
    EMPTY_SUBTITLE,
    MEMBERS_CONTINUED_FIELD,
    ROSTER_FIELD_LIMIT,
    build_custom_activity_embed,
    build_event_embed,
    members_field_name,
    parse_custom_activity_embed,
    parse_custom_activity_message,
    parse_event_embed,
    parse_event_message,
)


def _draft() -> EventDraft:
    draft = EventDraft.from_activity(
        ResolvedActivity(title="Destiny 2", subtitle="Raids - Vow of the Disciple", max_members=6),
        start=datetime(2026, 10, 20, 20, 0, tzinfo=UTC),
        description="Fresh run",
        creator_id=11,
        creator_name="Guardian | One",
    )
    draft.members.append(12)
    draft.alternates.append(13)
    return draft


def test_event_embed_layout():
    embed = build_event_embed(_draft())
    epoch = int(datetime(2026, 10, 20, 20, 0, tzinfo=UTC).timestamp())

    assert embed.title == "Destiny 2"
    assert embed.description == "Fresh run"
    assert [field.name for field in embed.fields] == [
        "Activity Details:",
        "Start Time:",
        "Members (2/6):",
        ALTERNATES_FIELD,
    ]
    assert embed.fields[1].value == f"<t:{epoch}:F> (<t:{epoch}:R>)"
    assert embed.fields[2].value == "<@11>\n<@12>"
    assert embed.footer.text == "Created by: Guardian | One | 11"


def test_event_embed_round_trip_keeps_state():
    draft = _draft()

    parsed = parse_event_embed(build_event_embed(draft))

    assert parsed.activity_title == draft.activity_title
    assert parsed.activity_subtitle == draft.activity_subtitle
    assert parsed.max_members == 6
    assert parsed.start == draft.start
    assert parsed.description == "Fresh run"
    assert parsed.creator_id == 11
    assert parsed.creator_name == "Guardian | One"
    assert parsed.members == [11, 12]
    assert parsed.alternates == [13]


def test_empty_subtitle_and_roster_render_placeholders():
    draft = EventDraft.from_activity(
        ResolvedActivity(title="Among Us", subtitle="", max_members=10),
        start=None,
        description="",
        creator_id=5,
        creator_name="Crew",
    )
    draft.members.clear()

    embed = build_event_embed(draft)
    parsed = parse_event_message(SimpleNamespace(embeds=[embed]))

    assert embed.description is None
    assert embed.fields[0].value == EMPTY_SUBTITLE
    assert embed.fields[1].name == members_field_name(draft) == "Members (0/10):"
    assert embed.fields[1].value == "None"
    assert parsed.activity_subtitle == ""
    assert parsed.start is None
    assert parsed.members == []


def test_parse_event_embed_rejects_foreign_embeds():
    with pytest.raises(ValueError, match="not an event post"):
        parse_event_embed(discord.Embed(title="hello").set_footer(text="something else"))
    with pytest.raises(ValueError):
        parse_event_embed(None)
    with pytest.raises(ValueError, match="no members field"):
        parse_event_embed(discord.Embed(title="x").set_footer(text="Created by: A | 1"))


def test_custom_activity_embed_round_trip():
    activity = ResolvedActivity(title="Phasmophobia", subtitle="", max_members=4)

    embed = build_custom_activity_embed(activity)

    assert parse_custom_activity_embed(embed) == activity
    assert parse_custom_activity_message(SimpleNamespace(embeds=[embed])) == activity
    with pytest.raises(ValueError, match="not a custom activity"):
        parse_custom_activity_embed(discord.Embed(title="x"))


def test_large_roster_spans_continuation_fields():
    draft = EventDraft(
        activity_title="Community Night",
        activity_subtitle="Open lobby",
        max_members=99,
        description="x" * 1000,
        creator_id=1,
        creator_name="Host",
        members=[1_000_000_000_000_000_000 + index for index in range(50)],
        alternates=[2_000_000_000_000_000_000 + index for index in range(MAX_ALTERNATES)],
    )

    embed = build_event_embed(draft)

    assert [field.name for field in embed.fields] == [
        "Activity Details:",
        "Members (50/99):",
        MEMBERS_CONTINUED_FIELD,
        ALTERNATES_FIELD,
    ]
    assert all(len(field.value) <= 1024 for field in embed.fields)
    parsed = parse_event_embed(embed)
    assert parsed.members == draft.members
    assert parsed.alternates == draft.alternates

    parsed.alternates.pop()
    assert join_event(parsed, 3).changed is True
    full_roster = build_event_embed(parsed)
    assert len(full_roster) <= 6000
    reparsed = parse_event_embed(full_roster)
    assert len(reparsed.members) == 51
    assert reparsed.members[-1] == 3
    assert len(reparsed.alternates) == MAX_ALTERNATES - 1


def test_alternates_continue_after_first_field():
    draft = _draft()
    draft.alternates.extend(range(100, 100 + ROSTER_FIELD_LIMIT + 5))

    embed = build_event_embed(draft)

    assert [field.name for field in embed.fields][-2:] == [ALTERNATES_FIELD, ALTERNATES_CONTINUED_FIELD]
    assert parse_event_embed(embed).alternates == draft.alternates
