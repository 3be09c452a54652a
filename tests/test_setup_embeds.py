from __future__ import annotations

import pytest

from services.setup_service import DeleteChannelResult, SetupRequest, SetupResult, SetupState, SetupVariant
from views.embeds import (
    FAIL_COLOR,
    SUCCESS_COLOR,
    delete_channel_embed,
    info_embed,
    setup_result_embed,
    welcome_content,
    welcome_embed,
)


BOT_NAME = "Group Up"


def _result(state: SetupState, error_code: str | None = None) -> SetupResult:
    request = SetupRequest(guild_id=1, channel_id=2, variant=SetupVariant.WITH_MANAGER_ROLE)
    return SetupResult(state, request, error_code=error_code)


@pytest.mark.parametrize(
    "state,title",
    [
        (SetupState.ALREADY_CONFIGURED, "Unable to setup LFG channel."),
        (SetupState.TOO_MANY_MESSAGES, "Unable to setup LFG channel."),
        (SetupState.LOG_CHANNEL_FAILED, "Unable to setup log channel."),
        (SetupState.PERMISSION_FAILED, "Unable to set lfg channel permissions."),
        (SetupState.ANNOUNCE_FAILED, "Failed to send the initial message!"),
    ],
)
def test_failure_states_have_dedicated_embeds(state, title):
    embed = setup_result_embed(_result(state), BOT_NAME)

    assert embed.title == title
    assert embed.color.value == FAIL_COLOR


def test_complete_embed_is_green():
    embed = setup_result_embed(_result(SetupState.COMPLETE), BOT_NAME)

    assert embed.title == "LFG Channel setup complete!"
    assert embed.color.value == SUCCESS_COLOR


def test_invalid_options_shows_error_code_field():
    embed = setup_result_embed(_result(SetupState.INVALID_OPTIONS, "setupLog0Mgr5"), BOT_NAME)

    assert embed.title == "Unable to setup log channel or manager role."
    assert embed.fields[-1].name == "Error Code:"
    assert embed.fields[-1].value == "setupLog0Mgr5"


@pytest.mark.parametrize(
    "state,code",
    [
        (SetupState.MISSING_OPTIONS, "setupMissingAllOptions"),
        (SetupState.FETCH_FAILED, "setupFetchMessagesFailed"),
        (SetupState.PERSIST_FAILED, "setupDBInsertFailed"),
    ],
)
def test_unexpected_states_fall_back_to_error_code(state, code):
    embed = setup_result_embed(_result(state, code), BOT_NAME)

    assert embed.title == "Something went wrong..."
    assert embed.fields[0].value == code


def test_permission_embeds_list_required_permissions():
    embed = setup_result_embed(_result(SetupState.PERMISSION_FAILED), BOT_NAME)

    assert "MANAGE_ROLES" in embed.fields[0].value
    assert BOT_NAME in embed.fields[0].name


def test_welcome_message_mentions_manager_only_when_managed():
    managed = welcome_embed(BOT_NAME, managed=True, manager_role_id=77)
    unmanaged = welcome_embed(BOT_NAME, managed=False, manager_role_id=0)

    assert welcome_content(2, 999) == "Welcome to <#2>, managed by <@999>!"
    assert "<@&77>" in managed.fields[-1].value
    assert len(unmanaged.fields) == len(managed.fields) - 1


@pytest.mark.parametrize(
    "result,title",
    [
        (DeleteChannelResult(ok=True), "LFG Channel settings removed!"),
        (DeleteChannelResult(ok=False, reason="not_configured"), "Unable to delete LFG channel."),
        (DeleteChannelResult(ok=False, reason="db_failed"), "Something went wrong..."),
        (DeleteChannelResult(ok=False, reason="missing_ids"), "Something went wrong..."),
    ],
)
def test_delete_channel_embeds(result, title):
    assert delete_channel_embed(result, BOT_NAME).title == title


def test_info_embed_counts():
    embed = info_embed(BOT_NAME, "1.0.0", configured_channels=3, managed_channels=1)

    assert embed.title == "Group Up v1.0.0"
    assert [field.value for field in embed.fields] == ["3", "1"]
