from __future__ import annotations

from datetime import UTC, date, datetime, time, timedelta, timezone, tzinfo
import re
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


DEFAULT_TIMEZONE_NAME = "UTC"

_ABBREVIATION_OFFSETS: dict[str, float] = {
    "UTC": 0,
    "GMT": 0,
    "BST": 1,
    "WET": 0,
    "WEST": 1,
    "CET": 1,
    "CEST": 2,
    "EET": 2,
    "EEST": 3,
    "MSK": 3,
    "IST": 5.5,
    "JST": 9,
    "KST": 9,
    "AWST": 8,
    "ACST": 9.5,
    "AEST": 10,
    "AEDT": 11,
    "NZST": 12,
    "NZDT": 13,
    "HST": -10,
    "AKST": -9,
    "AKDT": -8,
    "PST": -8,
    "PDT": -7,
    "MST": -7,
    "MDT": -6,
    "CST": -6,
    "CDT": -5,
    "EST": -5,
    "EDT": -4,
    "AST": -4,
    "ADT": -3,
}

_TIME_PATTERN = re.compile(r"^(?P<hour>\d{1,2})(?:[:.]?(?P<minute>\d{2}))?\s*(?P<meridiem>am|pm|a|p)?$")
_OFFSET_PATTERN = re.compile(r"^(?:UTC|GMT)(?P<sign>[+-])(?P<hours>\d{1,2})(?::?(?P<minutes>\d{2}))?$")


def utc_now() -> datetime:
    return datetime.now(UTC)


def parse_timezone(raw: str) -> tzinfo:
    text = (raw or "").strip()
    if not text:
        return ZoneInfo(DEFAULT_TIMEZONE_NAME)

    upper = text.upper()
    offset_hours = _ABBREVIATION_OFFSETS.get(upper)
    if offset_hours is not None:
        return timezone(timedelta(hours=offset_hours), upper)

    match = _OFFSET_PATTERN.match(upper)
    if match:
        delta = timedelta(hours=int(match.group("hours")), minutes=int(match.group("minutes") or 0))
        if match.group("sign") == "-":
            delta = -delta
        if abs(delta) > timedelta(hours=14):
            raise ValueError(f"Unknown time zone {text!r}")
        return timezone(delta, upper)

    try:
        return ZoneInfo(text)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValueError(f"Unknown time zone {text!r}") from exc


def parse_time_of_day(raw: str) -> time:
    text = (raw or "").strip().lower().replace(" ", "")
    match = _TIME_PATTERN.match(text)
    if not match:
        raise ValueError(f"Could not read start time {raw!r}, try something like 8:30 PM or 20:30")

    hour = int(match.group("hour"))
    minute = int(match.group("minute") or 0)
    meridiem = match.group("meridiem")
    if meridiem:
        if hour < 1 or hour > 12:
            raise ValueError(f"Could not read start time {raw!r}, 12-hour times use 1-12")
        if meridiem.startswith("p") and hour != 12:
            hour += 12
        elif meridiem.startswith("a") and hour == 12:
            hour = 0
    if hour > 23 or minute > 59:
        raise ValueError(f"Could not read start time {raw!r}")
    return time(hour=hour, minute=minute)


def parse_date(raw: str, *, today: date) -> date | None:
    text = (raw or "").strip().lower()
    if not text:
        return None
    if text == "today":
        return today
    if text == "tomorrow":
        return today + timedelta(days=1)

    for fmt in ("%m/%d/%Y", "%Y-%m-%d", "%m/%d/%y"):
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue

    try:
        month, day = (int(part) for part in text.split("/"))
        candidate = date(today.year, month, day)
        if candidate < today:
            candidate = candidate.replace(year=today.year + 1)
    except ValueError as exc:
        raise ValueError(f"Could not read start date {raw!r}, try MM/DD/YYYY or YYYY-MM-DD") from exc
    return candidate


def parse_event_start(time_raw: str, timezone_raw: str, date_raw: str, *, now: datetime | None = None) -> datetime:
    """Combine the finalize modal inputs into an aware start datetime.

    Without an explicit date the event is placed on the next occurrence of
    the given time in the given zone.
    """
    zone = parse_timezone(timezone_raw)
    local_now = (now or utc_now()).astimezone(zone)
    start_time = parse_time_of_day(time_raw)
    start_date = parse_date(date_raw, today=local_now.date())

    if start_date is None:
        start = datetime.combine(local_now.date(), start_time, tzinfo=zone)
        if start < local_now:
            start += timedelta(days=1)
        return start
    return datetime.combine(start_date, start_time, tzinfo=zone)


def discord_timestamp(value: datetime, style: str = "F") -> str:
    return f"<t:{int(value.timestamp())}:{style}>"
