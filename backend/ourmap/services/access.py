"""Private-event access control.

A public event is visible to everyone.  A private event is visible only to
its creator, to users holding a pending or accepted invite, and to users
with any attendance row for it.

The rule lives in one place, ``visibility_condition``, a SQL expression
used as-is by the listing queries; ``can_access`` evaluates the very same
expression against a single event row so both paths always agree.
"""
from typing import Optional

from sqlalchemy import exists
from sqlalchemy.orm import Session
from sqlalchemy.sql.elements import ColumnElement

from ourmap.models.attendee import EventAttendee
from ourmap.models.event import Event
from ourmap.models.invite import EventInvite, InviteStatus
from ourmap.services.conditions import any_of

VISIBLE_INVITE_STATUSES = (InviteStatus.pending, InviteStatus.accepted)


def is_public() -> ColumnElement:
    return Event.is_private.is_(False)


def is_creator(viewer_id: str) -> ColumnElement:
    return Event.creator_id == viewer_id


def is_invited(viewer_id: str) -> ColumnElement:
    return exists().where(
        EventInvite.event_id == Event.event_id,
        EventInvite.user_id == viewer_id,
        EventInvite.status.in_(VISIBLE_INVITE_STATUSES),
    )


def is_attendee(viewer_id: str) -> ColumnElement:
    return exists().where(
        EventAttendee.event_id == Event.event_id,
        EventAttendee.user_id == viewer_id,
    )


def visibility_condition(viewer_id: Optional[str]) -> ColumnElement:
    """SQL condition selecting the events ``viewer_id`` may see."""
    if not viewer_id:
        return is_public()
    return any_of(
        is_public(),
        is_creator(viewer_id),
        is_invited(viewer_id),
        is_attendee(viewer_id),
    )


def can_access(db: Session, event: Event, viewer_id: Optional[str]) -> bool:
    """Single-event form of ``visibility_condition``."""
    if event is None:
        return False
    row = (
        db.query(Event.event_id)
        .filter(Event.event_id == event.event_id, visibility_condition(viewer_id))
        .first()
    )
    return row is not None


def get_visible_event(db: Session, event_id: str, viewer_id: Optional[str]) -> Optional[Event]:
    """Fetch an event only if ``viewer_id`` may see it.

    Missing and invisible events are indistinguishable: both return None.
    """
    return (
        db.query(Event)
        .filter(Event.event_id == event_id, visibility_condition(viewer_id))
        .first()
    )
