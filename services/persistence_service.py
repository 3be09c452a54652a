from __future__ import annotations

import logging
from typing import Protocol

from sqlalchemy import delete, insert, select
from sqlalchemy.dialects.postgresql import insert as pg_insert

from db.models import CommandCounter, GuildChannelSettings
from db.repository import ChannelSettingRecord
from db.session import SessionManager
from services.results import OpResult
from utils import loggers


log = logging.getLogger("groupup.db")


class SettingsPersistence(Protocol):
    async def load_channel_settings(self) -> list[ChannelSettingRecord]:
        ...

    async def insert_channel_setting(self, record: ChannelSettingRecord) -> OpResult[None]:
        ...

    async def delete_channel_setting(self, guild_id: int, channel_id: int) -> OpResult[None]:
        ...

    async def increment_counter(self, command_name: str) -> OpResult[None]:
        ...


def _row_to_record(row: GuildChannelSettings) -> ChannelSettingRecord:
    manager_role_id = int(row.manager_role_id or 0)
    return ChannelSettingRecord(
        guild_id=int(row.guild_id),
        channel_id=int(row.lfg_channel_id),
        managed=manager_role_id != 0,
        manager_role_id=manager_role_id,
        log_channel_id=int(row.log_channel_id or 0),
    )


class ChannelSettingsPersistence:
    """SQL side of the channel settings cache plus the usage counters."""

    def __init__(self, session_manager: SessionManager) -> None:
        self.session_manager = session_manager

    async def load_channel_settings(self) -> list[ChannelSettingRecord]:
        async with self.session_manager.session_scope() as session:
            result = await session.execute(select(GuildChannelSettings))
            rows = result.scalars().all()
        records = [_row_to_record(row) for row in rows]
        log.info("Loaded %s LFG channel settings rows", len(records))
        return records

    async def insert_channel_setting(self, record: ChannelSettingRecord) -> OpResult[None]:
        try:
            async with self.session_manager.session_scope() as session:
                await session.execute(
                    insert(GuildChannelSettings).values(
                        guild_id=record.guild_id,
                        lfg_channel_id=record.channel_id,
                        manager_role_id=record.manager_role_id,
                        log_channel_id=record.log_channel_id,
                    )
                )
        except Exception as exc:
            loggers.db_error("persistence", "insert into guild_settings", exc)
            return OpResult.failure("insert_failed")
        return OpResult.success()

    async def delete_channel_setting(self, guild_id: int, channel_id: int) -> OpResult[None]:
        try:
            async with self.session_manager.session_scope() as session:
                await session.execute(
                    delete(GuildChannelSettings).where(
                        GuildChannelSettings.guild_id == int(guild_id),
                        GuildChannelSettings.lfg_channel_id == int(channel_id),
                    )
                )
        except Exception as exc:
            loggers.db_error("persistence", "delete from guild_settings", exc)
            return OpResult.failure("delete_failed")
        return OpResult.success()

    async def increment_counter(self, command_name: str) -> OpResult[None]:
        statement = pg_insert(CommandCounter).values(command_name=command_name, count=1)
        statement = statement.on_conflict_do_update(
            index_elements=[CommandCounter.command_name],
            set_={"count": CommandCounter.count + 1},
        )
        try:
            async with self.session_manager.session_scope() as session:
                await session.execute(statement)
        except Exception as exc:
            loggers.db_error("persistence", f"increment counter {command_name} on", exc)
            return OpResult.failure("counter_failed")
        return OpResult.success()
