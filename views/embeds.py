from __future__ import annotations

import discord

from services.setup_service import DeleteChannelResult, SetupResult, SetupState


FAIL_COLOR = 0xE71212
SUCCESS_COLOR = 0x0F8108
INFO_COLOR = 0x313BF9
INFO_COLOR_2 = 0x6805E9

CREATE_NEW_EVENT_LABEL = "Create New Event"
SAFELY_DISMISS_MSG = "You may safely dismiss this message."
REQUIRED_PERMISSIONS = ("MANAGE_GUILD", "MANAGE_CHANNELS", "MANAGE_ROLES", "MANAGE_MESSAGES")


def something_went_wrong_embed(error_code: str, bot_name: str) -> discord.Embed:
    embed = discord.Embed(
        title="Something went wrong...",
        description=(
            f"You should not be able to get here.  Please try again and if the issue continues, "
            f"report this issue to the {bot_name} developers with the error code below."
        ),
        color=FAIL_COLOR,
    )
    embed.add_field(name="Error Code:", value=error_code, inline=False)
    return embed


def error_embed(title: str, description: str) -> discord.Embed:
    return discord.Embed(title=title, description=description, color=FAIL_COLOR)


def _add_permission_fields(embed: discord.Embed, bot_name: str) -> discord.Embed:
    listed = "\n".join(f"`{name}`" for name in REQUIRED_PERMISSIONS)
    embed.add_field(
        name=f"Please make sure {bot_name} has the following permissions:",
        value=f"{listed}\n\nThe only permission that is required after setup completes is `MANAGE_MESSAGES`.",
        inline=False,
    )
    return embed


def welcome_content(channel_id: int, bot_user_id: int) -> str:
    return f"Welcome to <#{channel_id}>, managed by <@{bot_user_id}>!"


def welcome_embed(bot_name: str, *, managed: bool, manager_role_id: int) -> discord.Embed:
    embed = discord.Embed(
        title=f"To get started, click on the '{CREATE_NEW_EVENT_LABEL}' button below!",
        color=SUCCESS_COLOR,
    )
    embed.add_field(
        name="Joining/Deleting an event:",
        value=(
            "Use the buttons under an event to join it, join as an alternate or leave it.  "
            "The creator of an event can delete it with the 🗑️ button."
        ),
        inline=False,
    )
    if managed:
        embed.add_field(
            name=f"{bot_name} Manager Details:",
            value=(
                f"{bot_name} Managers with the <@&{manager_role_id}> role may delete any event in this channel.  "
                "Every event a manager deletes is recorded in the log channel."
            ),
            inline=False,
        )
    return embed


def log_probe_embed(bot_name: str) -> discord.Embed:
    return discord.Embed(
        title=f"This is the channel {bot_name} will be logging events to.",
        description=f"{bot_name} will only send messages here as frequently as your event managers update events.",
        color=INFO_COLOR_2,
    )


def setup_result_embed(result: SetupResult, bot_name: str) -> discord.Embed:
    """Map a terminal setup state to the single embed shown to the invoking admin."""
    state = result.state
    if state is SetupState.COMPLETE:
        return discord.Embed(
            title="LFG Channel setup complete!",
            description=f"{bot_name} has finished setting up this channel.  {SAFELY_DISMISS_MSG}",
            color=SUCCESS_COLOR,
        )
    if state is SetupState.ALREADY_CONFIGURED:
        return error_embed(
            "Unable to setup LFG channel.",
            (
                "This channel is already set as an LFG channel.  If you need to edit the channel, please run "
                "`/delete lfg-channel` in this channel and then run `/setup` again.\n\n"
                "This will not harm any active events in this channel and simply resets the settings for this channel."
            ),
        )
    if state is SetupState.TOO_MANY_MESSAGES:
        embed = error_embed(
            "Unable to setup LFG channel.",
            (
                f"{bot_name} attempted to clean this channel, but encountered too many messages (100 or more).  "
                "There are two ways to move forward:"
            ),
        )
        embed.add_field(
            name="Is this channel a dedicated LFG Channel?",
            value="You either need to manually clean this channel or create a brand new channel for events.",
            inline=True,
        )
        embed.add_field(
            name="Is this a chat channel that you want events mixed into?",
            value="You do not need to run the `/setup` command, and instead should use the `/lfg create` command.",
            inline=True,
        )
        return embed
    if state is SetupState.INVALID_OPTIONS:
        embed = error_embed(
            "Unable to setup log channel or manager role.",
            (
                f"{bot_name} attempted to set the log channel or manager role, but one or both were undefined.  "
                "Please try again and if the issue continues, report this issue to the developers with the "
                "error code below."
            ),
        )
        embed.add_field(name="Error Code:", value=result.error_code or "", inline=False)
        return embed
    if state is SetupState.LOG_CHANNEL_FAILED:
        embed = error_embed(
            "Unable to setup log channel.",
            f"{bot_name} attempted to send a message to the specified log channel.",
        )
        embed.add_field(
            name=f"Please allow {bot_name} to send messages in the requested channel.",
            value=bot_name,
            inline=False,
        )
        return embed
    if state is SetupState.PERMISSION_FAILED:
        embed = error_embed(
            "Unable to set lfg channel permissions.",
            f"{bot_name} attempted to update the permissions for the current channel, but could not.",
        )
        return _add_permission_fields(embed, bot_name)
    if state is SetupState.ANNOUNCE_FAILED:
        embed = discord.Embed(title="Failed to send the initial message!", color=FAIL_COLOR)
        return _add_permission_fields(embed, bot_name)
    return something_went_wrong_embed(result.error_code or f"setup{state.name.title().replace('_', '')}", bot_name)


def delete_channel_embed(result: DeleteChannelResult, bot_name: str) -> discord.Embed:
    if result.ok:
        return discord.Embed(
            title="LFG Channel settings removed!",
            description=(
                f"{bot_name} no longer manages this channel.  Existing event posts are left in place.  "
                f"{SAFELY_DISMISS_MSG}"
            ),
            color=SUCCESS_COLOR,
        )
    if result.reason == "not_configured":
        return error_embed(
            "Unable to delete LFG channel.",
            "This channel is not an LFG channel.  Run `/setup` first if you want to configure it.",
        )
    if result.reason == "db_failed":
        return something_went_wrong_embed("deleteDBFailed", bot_name)
    return something_went_wrong_embed("deleteMissingIds", bot_name)


def info_embed(bot_name: str, version: str, *, configured_channels: int, managed_channels: int) -> discord.Embed:
    embed = discord.Embed(
        title=f"{bot_name} v{version}",
        description=(
            f"{bot_name} organizes Looking For Group events.  Run `/setup` in a dedicated channel or use "
            "`/lfg create` anywhere to start a new event."
        ),
        color=INFO_COLOR,
    )
    embed.add_field(name="LFG Channels:", value=str(configured_channels), inline=True)
    embed.add_field(name="Managed Channels:", value=str(managed_channels), inline=True)
    return embed
