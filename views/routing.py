from __future__ import annotations

from enum import Enum, unique
import logging
from typing import TYPE_CHECKING, Any, Awaitable, Callable

if TYPE_CHECKING:
    from bot.runtime import GroupUpBot


log = logging.getLogger("groupup.wizard")

ARG_SEPARATOR = "@"
MAX_CUSTOM_ID_LENGTH = 100


@unique
class ComponentId(str, Enum):
    GAME_SELECTION = "gameSel"
    CREATE_CUSTOM_EVENT = "createCustomEvent"
    VERIFY_CUSTOM_ACTIVITY = "verifyCustomActivity"
    FINALIZE = "finalize"
    CREATE_EVENT = "createEvent"
    JOIN_EVENT = "joinEvent"
    ALTERNATE_EVENT = "alternateEvent"
    LEAVE_EVENT = "leaveEvent"
    DELETE_EVENT = "deleteEvent"


ComponentHandler = Callable[["GroupUpBot", Any, str], Awaitable[None]]


def build_custom_id(component_id: ComponentId, arg: str = "") -> str:
    if ARG_SEPARATOR in component_id.value:
        raise ValueError(f"Component id {component_id.value!r} must not contain {ARG_SEPARATOR!r}")
    custom_id = component_id.value if not arg else f"{component_id.value}{ARG_SEPARATOR}{arg}"
    if len(custom_id) > MAX_CUSTOM_ID_LENGTH:
        raise ValueError(f"custom_id too long: {custom_id!r}")
    return custom_id


def split_custom_id(custom_id: str | None) -> tuple[str, str]:
    base, _, arg = (custom_id or "").partition(ARG_SEPARATOR)
    return base, arg


class ComponentRouter:
    """Exact-match table from component id to handler."""

    def __init__(self) -> None:
        self._handlers: dict[ComponentId, ComponentHandler] = {}

    def register(self, component_id: ComponentId, handler: ComponentHandler) -> None:
        if component_id in self._handlers:
            raise ValueError(f"Duplicate handler for component id {component_id.value!r}")
        self._handlers[component_id] = handler

    def missing(self) -> list[ComponentId]:
        return [component_id for component_id in ComponentId if component_id not in self._handlers]

    def validate(self) -> None:
        missing = self.missing()
        if missing:
            raise RuntimeError(
                "Component ids without handler: " + ", ".join(component_id.value for component_id in missing)
            )

    def resolve(self, custom_id: str | None) -> tuple[ComponentId, str, ComponentHandler] | None:
        base, arg = split_custom_id(custom_id)
        try:
            component_id = ComponentId(base)
        except ValueError:
            return None
        handler = self._handlers.get(component_id)
        if handler is None:
            return None
        return component_id, arg, handler

    async def dispatch(self, bot: "GroupUpBot", interaction: Any) -> bool:
        custom_id = (getattr(interaction, "data", None) or {}).get("custom_id")
        resolved = self.resolve(custom_id)
        if resolved is None:
            log.debug("Ignoring interaction with unknown custom_id=%r", custom_id)
            return False

        component_id, arg, handler = resolved
        try:
            await handler(bot, interaction, arg)
        except Exception:
            log.exception(
                "Component handler failed custom_id=%s user_id=%s",
                custom_id,
                getattr(getattr(interaction, "user", None), "id", None),
            )
            await bot.reply_error_code(interaction, f"{component_id.value}Unhandled")
        await bot.track_usage(f"btn-{component_id.value}")
        return True
