from services.results import OpResult
from services.setup_service import (
    SetupRequest,
    SetupResult,
    SetupState,
    delete_channel_setup,
    parse_setup_request,
    partition_messages,
    run_channel_setup,
)

__all__ = [
    "OpResult",
    "SetupRequest",
    "SetupResult",
    "SetupState",
    "delete_channel_setup",
    "parse_setup_request",
    "partition_messages",
    "run_channel_setup",
]
