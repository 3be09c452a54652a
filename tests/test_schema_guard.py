from __future__ import annotations

import pytest

from db.models import Base, GuildChannelSettings, REQUIRED_BOOT_TABLES, mapped_public_table_names
from db.schema_guard import build_add_column_sql, ensure_required_schema, validate_required_tables


class DummyConnection:
    def __init__(self) -> None:
        self.ddl: list[str] = []
        self.run_sync_calls = 0

    async def execute(self, clause):
        self.ddl.append(str(clause))
        return None

    async def run_sync(self, fn):
        self.run_sync_calls += 1
        return None


def _complete_columns() -> dict[str, dict[str, str]]:
    out: dict[str, dict[str, str]] = {}
    for table in Base.metadata.sorted_tables:
        out[table.name] = {column.name: "int8" for column in table.columns}
    return out


def _patch(monkeypatch, tables, columns):
    async def fake_tables(_connection):
        return set(tables)

    async def fake_columns(_connection):
        return columns

    monkeypatch.setattr("db.schema_guard.fetch_public_tables", fake_tables)
    monkeypatch.setattr("db.schema_guard.fetch_public_columns", fake_columns)


def test_required_boot_tables_cover_all_mapped_tables():
    assert set(REQUIRED_BOOT_TABLES) == set(Base.metadata.tables.keys())
    assert set(REQUIRED_BOOT_TABLES) == {"guild_settings", "command_counters"}
    assert tuple(REQUIRED_BOOT_TABLES) == tuple(mapped_public_table_names())


@pytest.mark.asyncio
async def test_validate_required_tables_detects_missing_table(monkeypatch):
    _patch(monkeypatch, {"guild_settings"}, {})

    with pytest.raises(RuntimeError, match="Missing required DB tables: command_counters"):
        await validate_required_tables(connection=None)


@pytest.mark.asyncio
async def test_validate_required_tables_detects_missing_columns(monkeypatch):
    columns = _complete_columns()
    columns["guild_settings"].pop("manager_role_id")
    _patch(monkeypatch, REQUIRED_BOOT_TABLES, columns)

    with pytest.raises(RuntimeError, match=r"Missing required DB columns: guild_settings\(manager_role_id\)"):
        await validate_required_tables(connection=None)


@pytest.mark.asyncio
async def test_validate_required_tables_rejects_32_bit_snowflake_columns(monkeypatch):
    columns = _complete_columns()
    columns["guild_settings"]["lfg_channel_id"] = "int4"
    _patch(monkeypatch, REQUIRED_BOOT_TABLES, columns)

    with pytest.raises(RuntimeError, match="guild_settings.lfg_channel_id=int4"):
        await validate_required_tables(connection=None)


@pytest.mark.asyncio
async def test_validate_required_tables_passes_for_complete_schema(monkeypatch):
    _patch(monkeypatch, REQUIRED_BOOT_TABLES, _complete_columns())

    await validate_required_tables(connection=None)


@pytest.mark.asyncio
async def test_ensure_required_schema_applies_missing_table_and_column(monkeypatch):
    columns = _complete_columns()
    columns["guild_settings"].pop("log_channel_id")
    _patch(monkeypatch, {"guild_settings"}, columns)

    connection = DummyConnection()
    changes = await ensure_required_schema(connection=connection)

    assert connection.run_sync_calls == 1
    assert "create_table:command_counters" in changes
    assert "add_column:guild_settings.log_channel_id" in changes
    assert any('ADD COLUMN IF NOT EXISTS "log_channel_id" BIGINT DEFAULT 0 NOT NULL' in ddl for ddl in connection.ddl)


@pytest.mark.asyncio
async def test_ensure_required_schema_no_change_when_complete(monkeypatch):
    _patch(monkeypatch, REQUIRED_BOOT_TABLES, _complete_columns())

    connection = DummyConnection()
    changes = await ensure_required_schema(connection=connection)

    assert changes == []
    assert connection.run_sync_calls == 0
    assert connection.ddl == []


def test_build_add_column_sql_without_default_stays_nullable():
    column = GuildChannelSettings.__table__.c.guild_id

    sql = build_add_column_sql("guild_settings", column)

    assert sql == 'ALTER TABLE public."guild_settings" ADD COLUMN IF NOT EXISTS "guild_id" BIGINT'
