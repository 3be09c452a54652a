from db.models import REQUIRED_BOOT_TABLES
from db.repository import ChannelSettingRecord, ChannelSettingsStore, KeyedLocks, settings_key
from db.session import SessionManager

__all__ = [
    "ChannelSettingRecord",
    "ChannelSettingsStore",
    "KeyedLocks",
    "REQUIRED_BOOT_TABLES",
    "SessionManager",
    "settings_key",
]
