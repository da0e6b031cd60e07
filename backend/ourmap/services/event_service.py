"""Event mutations — create, update, delete, attendance and invites.

Responsibilities:
- Authorization: only the creator may update, delete or invite
- Geocoding: the location must resolve to coordinates (hard fail)
- Duplicate guard on (title, location, date_time)
- Attendance upsert on the unique (event, user) pair
- Domain events for the notification subscribers
"""
import logging
from datetime import datetime
from typing import Any, Iterable, Optional

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from ourmap.models.attendee import AttendanceStatus, EventAttendee
from ourmap.models.event import Event
from ourmap.models.invite import EventInvite, InviteStatus
from ourmap.models.user import User
from ourmap.services.access import get_visible_event
from ourmap.services.domain_events import AttendanceChanged, EventCreated, publish
from ourmap.services.geocoding import Geocoder, GeocodingError
from ourmap.utils import as_utc

logger = logging.getLogger(__name__)

# Fields a creator may change through update_event.
UPDATABLE_FIELDS = {
    "title", "description", "category", "date_time", "end_time", "location",
    "max_attendees", "image_url", "icon_emoji", "is_private", "price_type",
    "price", "fundraising_goal", "minimum_contribution", "is_recurring",
    "recurrence_type", "recurrence_interval", "recurrence_end_date",
}

_DATETIME_FIELDS = ("date_time", "end_time", "recurrence_end_date")

# Columns that cannot be cleared once set.
_REQUIRED_FIELDS = {"title", "category", "date_time", "location", "is_private", "price_type", "is_recurring"}


def _check_authorization(event: Event, actor_user_id: str) -> None:
    if event.creator_id != actor_user_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only the creator may modify this event",
        )


def _geocode_location(geocoder: Geocoder, location: str):
    try:
        return geocoder.geocode(location)
    except GeocodingError as exc:
        logger.warning("Could not geocode event location '%s': %s", location, exc)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Could not find coordinates for location '{location}'",
        )


def _check_duplicate(db: Session, title: str, location: str, date_time: datetime,
                     exclude_event_id: Optional[str] = None) -> None:
    query = db.query(Event.event_id).filter(
        Event.title == title,
        Event.location == location,
        Event.date_time == date_time,
    )
    if exclude_event_id:
        query = query.filter(Event.event_id != exclude_event_id)
    if query.first():
        raise HTTPException(status_code=400, detail="An identical event already exists")


def _add_invites(db: Session, event: Event, user_ids: Iterable[str]) -> list[EventInvite]:
    """Invite each known user once; the creator and existing invitees are skipped."""
    wanted = {uid for uid in user_ids if uid and uid != event.creator_id}
    if not wanted:
        return []
    existing = {
        uid for (uid,) in
        db.query(EventInvite.user_id).filter(EventInvite.event_id == event.event_id).all()
    }
    known = {uid for (uid,) in db.query(User.user_id).filter(User.user_id.in_(wanted)).all()}

    invites = [EventInvite(event_id=event.event_id, user_id=uid) for uid in sorted(known - existing)]
    db.add_all(invites)
    return invites


def create_event(
    db: Session,
    geocoder: Geocoder,
    creator_id: str,
    data: dict[str, Any],
    invitee_ids: Iterable[str] = (),
) -> Event:
    """Create an event, geocoding its location first."""
    if not db.query(User.user_id).filter(User.user_id == creator_id).first():
        raise HTTPException(status_code=404, detail="Creator not found")

    # Unset optional fields fall back to the column defaults.
    data = {k: v for k, v in data.items() if v is not None}
    for field in _DATETIME_FIELDS:
        if data.get(field) is not None:
            data[field] = as_utc(data[field])

    _check_duplicate(db, data["title"], data["location"], data["date_time"])
    coords = _geocode_location(geocoder, data["location"])

    event = Event(creator_id=creator_id, latitude=coords.lat, longitude=coords.lng, **data)
    db.add(event)
    db.flush()

    invites = _add_invites(db, event, invitee_ids) if event.is_private else []
    db.commit()
    db.refresh(event)
    logger.info("Created event '%s' (%s) by %s with %d invites", event.title, event.event_id, creator_id, len(invites))

    publish(db, EventCreated(
        actor_id=creator_id,
        event_id=event.event_id,
        title=event.title,
        is_private=event.is_private,
    ))
    return event


def update_event(
    db: Session,
    geocoder: Geocoder,
    event_id: str,
    actor_user_id: str,
    updates: dict[str, Any],
) -> Event:
    event = get_visible_event(db, event_id, actor_user_id)
    if not event:
        raise HTTPException(status_code=404, detail="Event not found")
    _check_authorization(event, actor_user_id)

    updates = {
        k: v for k, v in updates.items()
        if k in UPDATABLE_FIELDS and not (v is None and k in _REQUIRED_FIELDS)
    }
    for field in _DATETIME_FIELDS:
        if updates.get(field) is not None:
            updates[field] = as_utc(updates[field])

    if updates.get("location") and updates["location"] != event.location:
        coords = _geocode_location(geocoder, updates["location"])
        event.latitude, event.longitude = coords.lat, coords.lng

    if {"title", "location", "date_time"} & updates.keys():
        _check_duplicate(
            db,
            updates.get("title", event.title),
            updates.get("location", event.location),
            updates.get("date_time", event.date_time),
            exclude_event_id=event_id,
        )

    for field, value in updates.items():
        setattr(event, field, value)
    db.commit()
    db.refresh(event)
    logger.info("Updated event %s fields %s", event_id, sorted(updates))
    return event


def delete_event(db: Session, event_id: str, actor_user_id: str) -> None:
    """Hard-delete an event owned by the actor; anything else is a 404."""
    event = (
        db.query(Event)
        .filter(Event.event_id == event_id, Event.creator_id == actor_user_id)
        .first()
    )
    if not event:
        raise HTTPException(status_code=404, detail="Event not found")
    db.delete(event)
    db.commit()
    logger.info("Deleted event %s by %s", event_id, actor_user_id)


def set_attendance(db: Session, event_id: str, user_id: str, attendance_status: str) -> EventAttendee:
    """Insert or update the user's RSVP for a visible event."""
    event = get_visible_event(db, event_id, user_id)
    if not event:
        raise HTTPException(status_code=404, detail="Event not found")
    new_status = AttendanceStatus(attendance_status)

    attendance = (
        db.query(EventAttendee)
        .filter(EventAttendee.event_id == event_id, EventAttendee.user_id == user_id)
        .first()
    )
    if attendance:
        attendance.status = new_status
    else:
        attendance = EventAttendee(event_id=event_id, user_id=user_id, status=new_status)
        db.add(attendance)

    # An RSVP answers any outstanding invite.
    invite = (
        db.query(EventInvite)
        .filter(EventInvite.event_id == event_id, EventInvite.user_id == user_id)
        .first()
    )
    if invite and invite.status == InviteStatus.pending:
        invite.status = InviteStatus.declined if new_status == AttendanceStatus.not_going else InviteStatus.accepted

    db.commit()
    db.refresh(attendance)
    logger.info("User %s is now '%s' for event %s", user_id, new_status.value, event_id)

    publish(db, AttendanceChanged(actor_id=user_id, event_id=event_id, status=new_status.value))
    return attendance


def invite_users(db: Session, event_id: str, actor_user_id: str, user_ids: Iterable[str]) -> list[EventInvite]:
    event = get_visible_event(db, event_id, actor_user_id)
    if not event:
        raise HTTPException(status_code=404, detail="Event not found")
    _check_authorization(event, actor_user_id)

    invites = _add_invites(db, event, user_ids)
    db.commit()
    for invite in invites:
        db.refresh(invite)
    logger.info("Invited %d users to event %s", len(invites), event_id)
    return invites


def get_user_invites(db: Session, user_id: str) -> list[EventInvite]:
    """Pending invites for ``user_id``, newest first."""
    return (
        db.query(EventInvite)
        .filter(EventInvite.user_id == user_id, EventInvite.status == InviteStatus.pending)
        .order_by(EventInvite.created_at.desc())
        .all()
    )
