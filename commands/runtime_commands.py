from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import discord
from discord import app_commands

from commands.setup_command import execute_delete_lfg_channel, execute_setup
from views.components import game_selection_view, respond_step
from views.embeds import info_embed
from views.event_creation import game_selection_embed

if TYPE_CHECKING:
    from bot.runtime import GroupUpBot


log = logging.getLogger("groupup.runtime")


def register_runtime_commands(bot: "GroupUpBot") -> None:
    name = bot.config.bot_name
    admin_only = discord.Permissions(administrator=True)

    setup_group = app_commands.Group(
        name="setup",
        description=f"Configures this channel to be a dedicated event channel to be managed by {name}.",
        default_permissions=admin_only,
        guild_only=True,
    )

    @setup_group.command(
        name="without-manager-role",
        description=f"This will configure {name} without a manager role.",
    )
    async def setup_without_manager_role(interaction: discord.Interaction):
        await execute_setup(bot, interaction)

    @setup_group.command(
        name="with-manager-role",
        description=f"This will configure {name} with a manager role.",
    )
    @app_commands.rename(manager_role="manager-role", log_channel="log-channel")
    @app_commands.describe(
        manager_role="This role will be allowed to manage all events in this guild.",
        log_channel=f"This channel is where {name} will send Audit Messages whenever a manager updates an event.",
    )
    async def setup_with_manager_role(
        interaction: discord.Interaction,
        manager_role: discord.Role,
        log_channel: discord.TextChannel,
    ):
        # execute_setup reads both options from the raw payload
        await execute_setup(bot, interaction)

    delete_group = app_commands.Group(
        name="delete",
        description=f"Removes {name} configuration.",
        default_permissions=admin_only,
        guild_only=True,
    )

    @delete_group.command(name="lfg-channel", description=f"Stops {name} from managing this channel.")
    async def delete_lfg_channel(interaction: discord.Interaction):
        await execute_delete_lfg_channel(bot, interaction)

    lfg_group = app_commands.Group(
        name="lfg",
        description="Looking For Group events.",
        guild_only=True,
    )

    @lfg_group.command(name="create", description="Create a new event in this channel.")
    async def lfg_create(interaction: discord.Interaction):
        await respond_step(bot, interaction, embed=game_selection_embed(""), view=game_selection_view(""))
        await bot.track_usage("cmd-lfg")

    @bot.tree.command(name="info", description=f"Shows information about {name}.")
    async def info_cmd(interaction: discord.Interaction):
        records = list(bot.store)
        await bot.reply_embed(
            interaction,
            info_embed(
                name,
                bot.config.version,
                configured_channels=len(records),
                managed_channels=sum(1 for record in records if record.managed),
            ),
        )
        await bot.track_usage("cmd-info")

    bot.tree.add_command(setup_group)
    bot.tree.add_command(delete_group)
    bot.tree.add_command(lfg_group)
    log.debug("Registered command groups setup/delete/lfg and /info")
