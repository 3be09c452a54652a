from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from db.models import REQUIRED_BOOT_TABLES
from db.repository import ChannelSettingsStore


EXPECTED_SLASH_COMMANDS = {
    "setup",
    "delete",
    "lfg",
    "info",
}


@dataclass(slots=True)
class BootSmokeStats:
    required_tables: int
    configured_channels: int
    managed_channels: int


def command_registry_health(registered_commands: Iterable[str]) -> tuple[list[str], list[str], list[str]]:
    registered = sorted(set(registered_commands))
    reg_set = set(registered)
    missing = sorted(EXPECTED_SLASH_COMMANDS - reg_set)
    unexpected = sorted(reg_set - EXPECTED_SLASH_COMMANDS)
    return registered, missing, unexpected


def run_boot_smoke_checks(store: ChannelSettingsStore, existing_tables: Iterable[str]) -> BootSmokeStats:
    existing = set(existing_tables)
    missing = [table for table in REQUIRED_BOOT_TABLES if table not in existing]
    if missing:
        raise RuntimeError(f"Missing required DB tables: {', '.join(missing)}")

    return BootSmokeStats(
        required_tables=len(REQUIRED_BOOT_TABLES),
        configured_channels=len(store),
        managed_channels=sum(1 for record in store if record.managed),
    )
