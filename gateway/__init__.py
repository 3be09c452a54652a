from gateway.safety import (
    InteractionAcker,
    safe_defer,
    safe_delete_message,
    safe_edit_message,
    safe_edit_response,
    safe_fetch_message,
    safe_followup,
    safe_send_channel_message,
    safe_send_initial,
    safe_send_modal,
)

__all__ = [
    "InteractionAcker",
    "safe_defer",
    "safe_delete_message",
    "safe_edit_message",
    "safe_edit_response",
    "safe_fetch_message",
    "safe_followup",
    "safe_send_channel_message",
    "safe_send_initial",
    "safe_send_modal",
]
