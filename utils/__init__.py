from utils.text import mention_list, parse_mentions, short_list
from utils.time_utils import discord_timestamp, parse_event_start, parse_timezone

__all__ = [
    "discord_timestamp",
    "mention_list",
    "parse_event_start",
    "parse_mentions",
    "parse_timezone",
    "short_list",
]
