from __future__ import annotations

from sqlalchemy import BigInteger, DateTime, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.sql import func


class Base(DeclarativeBase):
    pass


class GuildChannelSettings(Base):
    __tablename__ = "guild_settings"

    guild_id: Mapped[int] = mapped_column(BigInteger, primary_key=True)
    lfg_channel_id: Mapped[int] = mapped_column(BigInteger, primary_key=True)
    manager_role_id: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    log_channel_id: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    created_at: Mapped[DateTime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())


class CommandCounter(Base):
    __tablename__ = "command_counters"

    command_name: Mapped[str] = mapped_column(Text, primary_key=True)
    count: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    updated_at: Mapped[DateTime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())


def mapped_public_table_names() -> tuple[str, ...]:
    return tuple(table.name for table in Base.metadata.sorted_tables)


REQUIRED_BOOT_TABLES = mapped_public_table_names()
