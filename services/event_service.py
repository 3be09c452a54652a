from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from services.activities import ResolvedActivity


EVENT_FOOTER_MARKER = "Created by:"
MAX_ALTERNATES = 40


class RosterAction(str, Enum):
    JOIN = "join"
    ALTERNATE = "alternate"
    LEAVE = "leave"


@dataclass(slots=True)
class EventDraft:
    activity_title: str
    activity_subtitle: str
    max_members: int
    start: datetime | None = None
    description: str = ""
    creator_id: int | None = None
    creator_name: str | None = None
    members: list[int] = field(default_factory=list)
    alternates: list[int] = field(default_factory=list)

    @classmethod
    def from_activity(
        cls,
        activity: ResolvedActivity,
        *,
        start: datetime | None,
        description: str,
        creator_id: int,
        creator_name: str,
    ) -> "EventDraft":
        return cls(
            activity_title=activity.title,
            activity_subtitle=activity.subtitle,
            max_members=activity.max_members,
            start=start,
            description=(description or "").strip(),
            creator_id=int(creator_id),
            creator_name=creator_name,
            members=[int(creator_id)],
        )

    @property
    def is_full(self) -> bool:
        return self.max_members > 0 and len(self.members) >= self.max_members

    def activity(self) -> ResolvedActivity:
        return ResolvedActivity(
            title=self.activity_title,
            subtitle=self.activity_subtitle,
            max_members=self.max_members,
        )


@dataclass(slots=True)
class RosterChange:
    changed: bool
    action: RosterAction
    reason: str | None = None


def join_event(draft: EventDraft, user_id: int) -> RosterChange:
    user_id = int(user_id)
    if user_id in draft.members:
        return RosterChange(changed=False, action=RosterAction.JOIN, reason="already_member")
    if draft.is_full:
        if user_id in draft.alternates:
            return RosterChange(changed=False, action=RosterAction.JOIN, reason="event_full")
        if len(draft.alternates) >= MAX_ALTERNATES:
            return RosterChange(changed=False, action=RosterAction.JOIN, reason="alternates_full")
        draft.alternates.append(user_id)
        return RosterChange(changed=True, action=RosterAction.ALTERNATE, reason="event_full")
    if user_id in draft.alternates:
        draft.alternates.remove(user_id)
    draft.members.append(user_id)
    return RosterChange(changed=True, action=RosterAction.JOIN)


def join_as_alternate(draft: EventDraft, user_id: int) -> RosterChange:
    user_id = int(user_id)
    if user_id in draft.alternates:
        return RosterChange(changed=False, action=RosterAction.ALTERNATE, reason="already_alternate")
    if len(draft.alternates) >= MAX_ALTERNATES:
        return RosterChange(changed=False, action=RosterAction.ALTERNATE, reason="alternates_full")
    if user_id in draft.members:
        draft.members.remove(user_id)
    draft.alternates.append(user_id)
    return RosterChange(changed=True, action=RosterAction.ALTERNATE)


def leave_event(draft: EventDraft, user_id: int) -> RosterChange:
    user_id = int(user_id)
    if user_id in draft.members:
        draft.members.remove(user_id)
        return RosterChange(changed=True, action=RosterAction.LEAVE)
    if user_id in draft.alternates:
        draft.alternates.remove(user_id)
        return RosterChange(changed=True, action=RosterAction.LEAVE)
    return RosterChange(changed=False, action=RosterAction.LEAVE, reason="not_joined")


def apply_roster_action(draft: EventDraft, action: RosterAction, user_id: int) -> RosterChange:
    if action is RosterAction.JOIN:
        return join_event(draft, user_id)
    if action is RosterAction.ALTERNATE:
        return join_as_alternate(draft, user_id)
    return leave_event(draft, user_id)


def can_delete_event(
    draft: EventDraft,
    *,
    user_id: int,
    user_role_ids: set[int],
    can_manage_messages: bool,
    manager_role_id: int = 0,
) -> bool:
    if draft.creator_id is not None and int(user_id) == draft.creator_id:
        return True
    if manager_role_id and int(manager_role_id) in user_role_ids:
        return True
    return can_manage_messages
