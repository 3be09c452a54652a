from __future__ import annotations

import re


_MENTION_PATTERN = re.compile(r"<@!?(\d+)>")


def short_list(lines: list[str], *, limit: int = 30, empty: str = "None") -> str:
    if not lines:
        return empty
    if len(lines) <= limit:
        return "\n".join(lines)
    return "\n".join(lines[:limit]) + f"\n... +{len(lines) - limit} more"


def mention_list(user_ids: list[int], *, limit: int = 30) -> str:
    return short_list([f"<@{user_id}>" for user_id in user_ids], limit=limit)


def parse_mentions(text: str | None) -> list[int]:
    out: list[int] = []
    for match in _MENTION_PATTERN.finditer(text or ""):
        user_id = int(match.group(1))
        if user_id not in out:
            out.append(user_id)
    return out
