from __future__ import annotations

import logging
import os
from typing import Any

import discord
from discord import app_commands

from bot.config import BotConfig, load_config
from bot.logging import setup_logging
from commands.runtime_commands import register_runtime_commands
from db.repository import ChannelSettingsStore, KeyedLocks
from db.schema_guard import ensure_required_schema, fetch_public_tables, validate_required_tables
from db.session import SessionManager
from gateway.safety import InteractionAcker, safe_defer, safe_followup, safe_send_channel_message, safe_send_initial
from services.persistence_service import ChannelSettingsPersistence, SettingsPersistence
from services.startup_service import command_registry_health, run_boot_smoke_checks
from views import build_component_router
from views.embeds import INFO_COLOR, something_went_wrong_embed


log = logging.getLogger("groupup.runtime")

ROUTED_INTERACTION_TYPES = (
    discord.InteractionType.component,
    discord.InteractionType.modal_submit,
)


class GroupUpBot(discord.Client):
    def __init__(
        self,
        config: BotConfig,
        *,
        store: ChannelSettingsStore | None = None,
        persistence: SettingsPersistence | None = None,
    ) -> None:
        super().__init__(intents=discord.Intents.default())

        self.config = config
        self.store = store if store is not None else ChannelSettingsStore()
        self.session_manager: SessionManager | None = None
        if persistence is None:
            self.session_manager = SessionManager(config)
            persistence = ChannelSettingsPersistence(self.session_manager)
        self.persistence = persistence
        self.tree = app_commands.CommandTree(self)
        self.router = build_component_router()
        self.acker = InteractionAcker()
        self.event_locks = KeyedLocks()

        self._commands_registered = False
        self._state_loaded = False
        self._commands_synced = False
        self._startup_notice_sent = False
        self._slash_command_names: set[str] = set()

    async def setup_hook(self) -> None:
        if not self._state_loaded:
            await self._bootstrap_settings()
            self._state_loaded = True
        if not self._commands_registered:
            register_runtime_commands(self)
            self._slash_command_names = {cmd.name.lower() for cmd in self.tree.get_commands()}
            registered, missing, unexpected = command_registry_health(self._slash_command_names)
            if missing:
                raise RuntimeError(f"Slash commands not registered: {', '.join(missing)}")
            if unexpected:
                log.warning("Unexpected slash commands registered: %s", ", ".join(unexpected))
            log.info("Registered slash commands: %s", ", ".join(registered))
            self._commands_registered = True

    async def _bootstrap_settings(self) -> None:
        existing_tables: set[str] = set()
        if self.session_manager is not None:
            async with self.session_manager.engine.begin() as connection:
                changes = await ensure_required_schema(connection)
                await validate_required_tables(connection)
                existing_tables = await fetch_public_tables(connection)
            if changes:
                log.info("Applied DB schema changes: %s", ", ".join(changes))

        records = await self.persistence.load_channel_settings()
        self.store.hydrate(records)
        if self.session_manager is not None:
            stats = run_boot_smoke_checks(self.store, existing_tables)
            log.info(
                "Boot checks passed (tables=%s channels=%s managed=%s)",
                stats.required_tables,
                stats.configured_channels,
                stats.managed_channels,
            )

    async def on_ready(self) -> None:
        if not self._commands_synced:
            if self.config.dev_mode and self.config.dev_guild_id:
                dev_guild = discord.Object(id=self.config.dev_guild_id)
                try:
                    self.tree.copy_global_to(guild=dev_guild)
                    await self.tree.sync(guild=dev_guild)
                    log.info("Synced commands to dev guild %s", self.config.dev_guild_id)
                except Exception:
                    log.exception("Dev guild sync failed for %s", self.config.dev_guild_id)
            else:
                try:
                    await self.tree.sync()
                except Exception:
                    log.exception("Global command sync failed")
            self._commands_synced = True

        if not self._startup_notice_sent:
            self._startup_notice_sent = True
            await self._send_startup_notice()

        log.info("%s ready as %s (%s LFG channels)", self.config.bot_name, self.user, len(self.store))

    async def _send_startup_notice(self) -> None:
        if not self.config.log_channel_id:
            return
        channel = self.get_channel(self.config.log_channel_id)
        if channel is None:
            log.warning("Startup log channel %s not found", self.config.log_channel_id)
            return
        embed = discord.Embed(
            title=f"{self.config.bot_name} is starting up!",
            description=f"Version {self.config.version}, {len(self.store)} LFG channels loaded.",
            color=INFO_COLOR,
        )
        await safe_send_channel_message(channel, embed=embed)

    async def on_interaction(self, interaction: Any) -> None:
        if getattr(interaction, "type", None) not in ROUTED_INTERACTION_TYPES:
            return
        await self.router.dispatch(self, interaction)

    async def _mark_interaction_once(self, interaction: Any) -> bool:
        interaction_id = int(getattr(interaction, "id", 0) or 0)
        if interaction_id <= 0:
            return True
        return await self.acker.mark_or_get(interaction_id)

    async def reply_embed(
        self,
        interaction: Any,
        embed: discord.Embed,
        *,
        ephemeral: bool = True,
        **kwargs: Any,
    ) -> bool:
        first = await self._mark_interaction_once(interaction)
        if first and await safe_send_initial(interaction, ephemeral=ephemeral, embed=embed, **kwargs):
            return True
        return await safe_followup(interaction, ephemeral=ephemeral, embed=embed, **kwargs)

    async def reply_error_code(self, interaction: Any, error_code: str) -> bool:
        return await self.reply_embed(interaction, something_went_wrong_embed(error_code, self.config.bot_name))

    async def _defer(self, interaction: Any, *, ephemeral: bool = True) -> bool:
        first = await self._mark_interaction_once(interaction)
        if not first:
            return False
        return await safe_defer(interaction, ephemeral=ephemeral)

    async def track_usage(self, name: str) -> None:
        result = await self.persistence.increment_counter(name)
        if not result.ok:
            log.warning("Usage counter %s not updated: %s", name, result.reason)

    async def close(self) -> None:
        try:
            await super().close()
        finally:
            if self.session_manager is not None:
                await self.session_manager.dispose()


def run() -> int:
    setup_logging(os.getenv("LOG_LEVEL", "INFO"))

    try:
        config = load_config()
    except ValueError as exc:
        log.error("Config error: %s", exc)
        return 1

    setup_logging(config.discord_log_level)
    if not config.discord_token:
        log.error("DISCORD_TOKEN missing")
        return 1

    bot = GroupUpBot(config)
    try:
        bot.run(config.discord_token, log_handler=None)
    except KeyboardInterrupt:
        return 0
    return 0


if __name__ == "__main__":
    raise SystemExit(run())
