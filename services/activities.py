from __future__ import annotations

from dataclasses import dataclass


PATH_SEPARATOR = "-"
MAX_SELECT_OPTIONS = 25
CUSTOM_TITLE_MAX_LENGTH = 35
CUSTOM_SUBTITLE_MAX_LENGTH = 50
MAX_MEMBERS_LIMIT = 99


@dataclass(frozen=True, slots=True)
class Activity:
    name: str
    max_members: int = 0
    options: tuple["Activity", ...] = ()

    @property
    def is_leaf(self) -> bool:
        return not self.options


@dataclass(frozen=True, slots=True)
class ResolvedActivity:
    title: str
    subtitle: str
    max_members: int


def _group(name: str, *options: Activity) -> Activity:
    return Activity(name=name, options=tuple(options))


ACTIVITIES: tuple[Activity, ...] = (
    _group(
        "Destiny 2",
        _group(
            "Raids",
            Activity("Salvation's Edge", 6),
            Activity("Crota's End", 6),
            Activity("Root of Nightmares", 6),
            Activity("King's Fall", 6),
            Activity("Vow of the Disciple", 6),
            Activity("Vault of Glass", 6),
            Activity("Deep Stone Crypt", 6),
            Activity("Garden of Salvation", 6),
            Activity("Last Wish", 6),
        ),
        _group(
            "Dungeons",
            Activity("Warlord's Ruin", 3),
            Activity("Ghosts of the Deep", 3),
            Activity("Spire of the Watcher", 3),
            Activity("Duality", 3),
            Activity("Grasp of Avarice", 3),
            Activity("Prophecy", 3),
            Activity("Pit of Heresy", 3),
            Activity("Shattered Throne", 3),
        ),
        _group(
            "Crucible",
            Activity("Control", 6),
            Activity("Iron Banner", 6),
            Activity("Trials of Osiris", 3),
            Activity("Competitive", 3),
            Activity("Rumble", 6),
        ),
        Activity("Gambit", 4),
        Activity("Nightfall", 3),
        Activity("Vanguard Ops", 3),
    ),
    _group(
        "Overwatch 2",
        Activity("Quick Play", 5),
        Activity("Competitive", 5),
        Activity("Arcade", 6),
    ),
    _group(
        "Among Us",
        Activity("Vanilla", 15),
        Activity("Modded", 15),
        Activity("Hide and Seek", 15),
    ),
    _group(
        "Lethal Company",
        Activity("Vanilla", 4),
        Activity("Modded", 8),
    ),
    _group(
        "Phasmophobia",
        Activity("Casual", 4),
        Activity("Professional", 4),
        Activity("Nightmare", 4),
    ),
    Activity("Deep Rock Galactic", 4),
    Activity("Helldivers 2", 4),
)


def parse_path(raw: str) -> list[int]:
    text = (raw or "").strip()
    if not text:
        return []
    try:
        indexes = [int(part) for part in text.split(PATH_SEPARATOR)]
    except ValueError as exc:
        raise ValueError(f"Invalid activity path {raw!r}") from exc
    if any(index < 0 for index in indexes):
        raise ValueError(f"Invalid activity path {raw!r}")
    return indexes


def walk_path(raw: str, catalog: tuple[Activity, ...] = ACTIVITIES) -> list[Activity]:
    """Return the chain of activities selected by an index path like ``0-2-1``."""
    chain: list[Activity] = []
    options = catalog
    for index in parse_path(raw):
        if index >= len(options):
            raise ValueError(f"Unknown activity path {raw!r}")
        node = options[index]
        chain.append(node)
        options = node.options
    return chain


def options_at(raw: str, catalog: tuple[Activity, ...] = ACTIVITIES) -> tuple[Activity, ...]:
    chain = walk_path(raw, catalog)
    if not chain:
        return catalog
    return chain[-1].options


def resolve_activity(raw: str, catalog: tuple[Activity, ...] = ACTIVITIES) -> ResolvedActivity:
    chain = walk_path(raw, catalog)
    if not chain or not chain[-1].is_leaf:
        raise ValueError(f"Activity path {raw!r} does not end at an activity")
    title = chain[0].name
    subtitle = " - ".join(node.name for node in chain[1:])
    return ResolvedActivity(title=title, subtitle=subtitle, max_members=chain[-1].max_members)


def validate_custom_activity(title: str, subtitle: str, max_members_input: str) -> ResolvedActivity:
    clean_title = (title or "").strip()
    clean_subtitle = (subtitle or "").strip()
    if not clean_title:
        raise ValueError("Activity title is required")
    if len(clean_title) > CUSTOM_TITLE_MAX_LENGTH:
        raise ValueError(f"Activity title must be at most {CUSTOM_TITLE_MAX_LENGTH} characters")
    if len(clean_subtitle) > CUSTOM_SUBTITLE_MAX_LENGTH:
        raise ValueError(f"Activity subtitle must be at most {CUSTOM_SUBTITLE_MAX_LENGTH} characters")
    try:
        max_members = int((max_members_input or "").strip())
    except ValueError as exc:
        raise ValueError(f"Maximum members must be a number between 1 and {MAX_MEMBERS_LIMIT}") from exc
    if max_members < 1 or max_members > MAX_MEMBERS_LIMIT:
        raise ValueError(f"Maximum members must be a number between 1 and {MAX_MEMBERS_LIMIT}")
    return ResolvedActivity(title=clean_title, subtitle=clean_subtitle, max_members=max_members)
