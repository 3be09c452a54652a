from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
import logging
from typing import Any, Iterable, Mapping, Protocol

from db.repository import ChannelSettingRecord, ChannelSettingsStore, settings_key
from services.event_service import EVENT_FOOTER_MARKER
from services.persistence_service import SettingsPersistence
from services.results import OpResult


log = logging.getLogger("groupup.setup")

WITHOUT_MANAGER_ROLE = "without-manager-role"
WITH_MANAGER_ROLE = "with-manager-role"
MANAGER_ROLE_OPTION = "manager-role"
LOG_CHANNEL_OPTION = "log-channel"
MESSAGE_PAGE_LIMIT = 100
CLEANUP_REASON = "Cleaning LFG Channel"


class SetupVariant(str, Enum):
    WITHOUT_MANAGER_ROLE = WITHOUT_MANAGER_ROLE
    WITH_MANAGER_ROLE = WITH_MANAGER_ROLE


class SetupState(str, Enum):
    COMPLETE = "complete"
    MISSING_OPTIONS = "missing_options"
    ALREADY_CONFIGURED = "already_configured"
    FETCH_FAILED = "fetch_failed"
    TOO_MANY_MESSAGES = "too_many_messages"
    INVALID_OPTIONS = "invalid_options"
    LOG_CHANNEL_FAILED = "log_channel_failed"
    PERMISSION_FAILED = "permission_failed"
    PERSIST_FAILED = "persist_failed"
    ANNOUNCE_FAILED = "announce_failed"


@dataclass(slots=True)
class SetupRequest:
    guild_id: int | None
    channel_id: int | None
    variant: SetupVariant | None
    manager_role_id: int = 0
    log_channel_id: int = 0
    options_present: bool = False

    @property
    def managed(self) -> bool:
        return self.variant is SetupVariant.WITH_MANAGER_ROLE

    @property
    def key(self) -> str:
        return settings_key(self.guild_id or 0, self.channel_id or 0)


@dataclass(frozen=True, slots=True)
class MessageSnapshot:
    id: int
    author_id: int
    footer_text: str | None = None


@dataclass(slots=True)
class SetupResult:
    state: SetupState
    request: SetupRequest
    error_code: str | None = None
    deleted_count: int = 0
    preserved_post_ids: list[int] = field(default_factory=list)
    welcome_message_id: int | None = None

    @property
    def ok(self) -> bool:
        return self.state is SetupState.COMPLETE


class SetupChannelOps(Protocol):
    """Discord operations the setup flow needs, bound to the target channel."""

    async def fetch_recent_messages(self, limit: int) -> OpResult[list[MessageSnapshot]]:
        ...

    async def send_log_probe(self, log_channel_id: int) -> OpResult[None]:
        ...

    async def allow_role_send(self, role_id: int) -> OpResult[None]:
        ...

    async def deny_everyone_send(self) -> OpResult[None]:
        ...

    async def bulk_delete(self, message_ids: list[int], *, reason: str) -> OpResult[None]:
        ...

    async def send_welcome(self, *, managed: bool, manager_role_id: int) -> OpResult[int]:
        ...

    async def pin_message(self, message_id: int) -> OpResult[None]:
        ...


def _parse_snowflake(value: Any) -> int:
    try:
        parsed = int(str(value or "0").strip() or "0")
    except ValueError:
        return 0
    return parsed if parsed > 0 else 0


def setup_error_code(log_channel_id: int, manager_role_id: int) -> str:
    return f"setupLog{log_channel_id}Mgr{manager_role_id}"


def parse_setup_request(
    data: Mapping[str, Any] | None,
    *,
    guild_id: int | None,
    channel_id: int | None,
) -> SetupRequest:
    """Build a request from the raw ``/setup`` interaction payload."""
    options = (data or {}).get("options") or []
    subcommand = options[0] if options and isinstance(options[0], Mapping) else {}
    name = subcommand.get("name")
    try:
        variant = SetupVariant(name) if name else None
    except ValueError:
        variant = None

    request = SetupRequest(guild_id=guild_id, channel_id=channel_id, variant=variant)
    sub_options = subcommand.get("options")
    if not sub_options:
        return request

    request.options_present = True
    for opt in sub_options:
        if not isinstance(opt, Mapping):
            continue
        if opt.get("name") == MANAGER_ROLE_OPTION:
            request.manager_role_id = _parse_snowflake(opt.get("value"))
        elif opt.get("name") == LOG_CHANNEL_OPTION:
            request.log_channel_id = _parse_snowflake(opt.get("value"))
    return request


def is_event_post(message: MessageSnapshot, bot_user_id: int) -> bool:
    if int(message.author_id) != int(bot_user_id):
        return False
    return bool(message.footer_text) and EVENT_FOOTER_MARKER in message.footer_text


def partition_messages(messages: Iterable[MessageSnapshot], bot_user_id: int) -> tuple[list[int], list[int]]:
    """Split a channel page into (ids to delete, event post ids to keep)."""
    to_delete: list[int] = []
    event_posts: list[int] = []
    for message in messages:
        if is_event_post(message, bot_user_id):
            event_posts.append(int(message.id))
        else:
            to_delete.append(int(message.id))
    return to_delete, event_posts


async def run_channel_setup(
    request: SetupRequest,
    *,
    store: ChannelSettingsStore,
    persistence: SettingsPersistence,
    channel_ops: SetupChannelOps,
    bot_user_id: int,
) -> SetupResult:
    if request.variant is None or not request.guild_id or not request.channel_id:
        return SetupResult(SetupState.MISSING_OPTIONS, request, error_code="setupMissingAllOptions")

    async with store.locked(request.key):
        return await _run_locked(
            request,
            store=store,
            persistence=persistence,
            channel_ops=channel_ops,
            bot_user_id=bot_user_id,
        )


async def _run_locked(
    request: SetupRequest,
    *,
    store: ChannelSettingsStore,
    persistence: SettingsPersistence,
    channel_ops: SetupChannelOps,
    bot_user_id: int,
) -> SetupResult:
    if store.contains(request.key):
        return SetupResult(SetupState.ALREADY_CONFIGURED, request)

    fetched = await channel_ops.fetch_recent_messages(MESSAGE_PAGE_LIMIT)
    if not fetched.ok:
        return SetupResult(SetupState.FETCH_FAILED, request, error_code="setupFetchMessagesFailed")
    messages = fetched.value or []
    if len(messages) >= MESSAGE_PAGE_LIMIT:
        return SetupResult(SetupState.TOO_MANY_MESSAGES, request)

    if request.managed:
        if not request.options_present:
            return SetupResult(SetupState.MISSING_OPTIONS, request, error_code="setupMissingRoleMgrOptions")
        if request.log_channel_id == 0 or request.manager_role_id == 0:
            return SetupResult(
                SetupState.INVALID_OPTIONS,
                request,
                error_code=setup_error_code(request.log_channel_id, request.manager_role_id),
            )
        probe = await channel_ops.send_log_probe(request.log_channel_id)
        if not probe.ok:
            return SetupResult(SetupState.LOG_CHANNEL_FAILED, request)

    permissions_failed = False
    if request.managed:
        permissions_failed = not (await channel_ops.allow_role_send(request.manager_role_id)).ok
    if not permissions_failed:
        permissions_failed = not (await channel_ops.deny_everyone_send()).ok
    if permissions_failed:
        return SetupResult(SetupState.PERMISSION_FAILED, request)

    to_delete, event_posts = partition_messages(messages, bot_user_id)
    deleted_count = 0
    if to_delete:
        deleted = await channel_ops.bulk_delete(to_delete, reason=CLEANUP_REASON)
        if deleted.ok:
            deleted_count = len(to_delete)
    if event_posts:
        # Existing event posts are kept as-is; they are not re-attached to the roster flow.
        log.info("Kept %s existing event posts in channel %s", len(event_posts), request.channel_id)

    record = ChannelSettingRecord(
        guild_id=int(request.guild_id or 0),
        channel_id=int(request.channel_id or 0),
        managed=request.managed,
        manager_role_id=request.manager_role_id,
        log_channel_id=request.log_channel_id,
    )
    persisted = await persistence.insert_channel_setting(record)
    if not persisted.ok:
        return SetupResult(
            SetupState.PERSIST_FAILED,
            request,
            error_code="setupDBInsertFailed",
            deleted_count=deleted_count,
            preserved_post_ids=event_posts,
        )
    store.set(record)
    log.info("Configured LFG channel %s (managed=%s)", record.key, record.managed)

    welcome = await channel_ops.send_welcome(managed=request.managed, manager_role_id=request.manager_role_id)
    if not welcome.ok or welcome.value is None:
        return SetupResult(
            SetupState.ANNOUNCE_FAILED,
            request,
            deleted_count=deleted_count,
            preserved_post_ids=event_posts,
        )
    await channel_ops.pin_message(welcome.value)

    return SetupResult(
        SetupState.COMPLETE,
        request,
        deleted_count=deleted_count,
        preserved_post_ids=event_posts,
        welcome_message_id=welcome.value,
    )


@dataclass(slots=True)
class DeleteChannelResult:
    ok: bool
    reason: str | None = None


async def delete_channel_setup(
    *,
    guild_id: int | None,
    channel_id: int | None,
    store: ChannelSettingsStore,
    persistence: SettingsPersistence,
) -> DeleteChannelResult:
    if not guild_id or not channel_id:
        return DeleteChannelResult(ok=False, reason="missing_ids")

    key = settings_key(guild_id, channel_id)
    async with store.locked(key):
        if not store.contains(key):
            return DeleteChannelResult(ok=False, reason="not_configured")
        deleted = await persistence.delete_channel_setting(guild_id, channel_id)
        if not deleted.ok:
            return DeleteChannelResult(ok=False, reason="db_failed")
        store.delete(key)
    log.info("Removed LFG channel settings %s", key)
    return DeleteChannelResult(ok=True)
