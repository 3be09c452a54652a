from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncContextManager, AsyncIterator, Dict, Iterable, Iterator, List


def settings_key(guild_id: int, channel_id: int) -> str:
    return f"{int(guild_id)}-{int(channel_id)}"


@dataclass(frozen=True, slots=True)
class ChannelSettingRecord:
    guild_id: int
    channel_id: int
    managed: bool = False
    manager_role_id: int = 0
    log_channel_id: int = 0

    @property
    def key(self) -> str:
        return settings_key(self.guild_id, self.channel_id)


class KeyedLocks:
    """asyncio locks created on first use and dropped once nobody holds or waits on them."""

    def __init__(self) -> None:
        self._locks: Dict[str, asyncio.Lock] = {}
        self._users: Dict[str, int] = {}

    @asynccontextmanager
    async def locked(self, key: str) -> AsyncIterator[None]:
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._users[key] = self._users.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            remaining = self._users[key] - 1
            if remaining:
                self._users[key] = remaining
            else:
                self._users.pop(key, None)
                self._locks.pop(key, None)

    def __len__(self) -> int:
        return len(self._locks)


class ChannelSettingsStore:
    """In-memory view of every configured LFG channel.

    Entries mirror the ``guild_settings`` table and are only written after the
    matching row has been committed. Records are frozen; reconfiguring a
    channel means deleting the entry and creating a new one.
    """

    def __init__(self) -> None:
        self._settings: Dict[str, ChannelSettingRecord] = {}
        self._locks = KeyedLocks()

    def __contains__(self, key: object) -> bool:
        return key in self._settings

    def __len__(self) -> int:
        return len(self._settings)

    def __iter__(self) -> Iterator[ChannelSettingRecord]:
        return iter(list(self._settings.values()))

    def contains(self, key: str) -> bool:
        return key in self._settings

    def get(self, key: str) -> ChannelSettingRecord | None:
        return self._settings.get(key)

    def get_for_channel(self, guild_id: int | None, channel_id: int | None) -> ChannelSettingRecord | None:
        if not guild_id or not channel_id:
            return None
        return self._settings.get(settings_key(guild_id, channel_id))

    def set(self, record: ChannelSettingRecord) -> ChannelSettingRecord:
        if record.key in self._settings:
            raise ValueError(f"Channel settings already cached for {record.key}")
        self._settings[record.key] = record
        return record

    def delete(self, key: str) -> ChannelSettingRecord | None:
        return self._settings.pop(key, None)

    def hydrate(self, records: Iterable[ChannelSettingRecord]) -> int:
        self._settings.clear()
        for record in records:
            self._settings[record.key] = record
        return len(self._settings)

    def list_guild(self, guild_id: int) -> List[ChannelSettingRecord]:
        return [row for row in self._settings.values() if row.guild_id == int(guild_id)]

    def locked(self, key: str) -> AsyncContextManager[None]:
        return self._locks.locked(key)

    def active_lock_count(self) -> int:
        return len(self._locks)
