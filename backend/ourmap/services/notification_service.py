"""Notification inbox and the subscribers that fill it.

Notifications are only ever written here, in reaction to domain events.
Each kind is gated on one of the recipient's preference flags, and the
actor never notifies themself.
"""
import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session, joinedload

from ourmap.models.event import Event
from ourmap.models.invite import EventInvite
from ourmap.models.notification import Notification, NotificationType
from ourmap.models.attendee import AttendanceStatus
from ourmap.models.user import User, NOTIFICATION_PREFERENCES
from ourmap.services import aggregates, contacts
from ourmap.services.domain_events import (
    AttendanceChanged,
    EventCreated,
    EventRated,
    FriendRequested,
    UserJoined,
    subscribe,
)

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 20


def _display_name(user: User) -> str:
    full = " ".join(part for part in (user.first_name, user.last_name) if part)
    return full or user.username


def create_notification_if_enabled(
    db: Session,
    recipient: User,
    preference: str,
    kind: NotificationType,
    title: str,
    message: str,
    actor_id: Optional[str] = None,
    event_id: Optional[str] = None,
    action_url: Optional[str] = None,
) -> Optional[Notification]:
    """Add a notification unless the recipient opted out or is the actor.

    The caller commits.
    """
    if recipient is None or recipient.user_id == actor_id:
        return None
    if not getattr(recipient, preference):
        logger.debug("User %s has %s disabled; skipping %s", recipient.user_id, preference, kind.value)
        return None

    notification = Notification(
        user_id=recipient.user_id,
        type=kind,
        title=title,
        message=message,
        related_user_id=actor_id,
        related_event_id=event_id,
        action_url=action_url,
    )
    db.add(notification)
    return notification


# ── Inbox ──────────────────────────────────────────────────────────

def list_notifications(db: Session, user_id: str, limit: int = DEFAULT_LIMIT) -> list[Notification]:
    return (
        db.query(Notification)
        .options(joinedload(Notification.related_user), joinedload(Notification.related_event))
        .filter(Notification.user_id == user_id)
        .order_by(Notification.created_at.desc())
        .limit(limit)
        .all()
    )


def count_unread(db: Session, user_id: str) -> int:
    return (
        db.query(Notification)
        .filter(Notification.user_id == user_id, Notification.is_read.is_(False))
        .count()
    )


def mark_read(db: Session, notification_id: str, user_id: str) -> Notification:
    notification = (
        db.query(Notification)
        .filter(Notification.notification_id == notification_id, Notification.user_id == user_id)
        .first()
    )
    if not notification:
        raise HTTPException(status_code=404, detail="Notification not found")
    notification.is_read = True
    db.commit()
    db.refresh(notification)
    logger.info("Marked notification %s read for %s", notification_id, user_id)
    return notification


def mark_all_read(db: Session, user_id: str) -> int:
    updated = (
        db.query(Notification)
        .filter(Notification.user_id == user_id, Notification.is_read.is_(False))
        .update({Notification.is_read: True}, synchronize_session=False)
    )
    db.commit()
    logger.info("Marked %d notifications read for %s", updated, user_id)
    return updated


# ── Preferences ────────────────────────────────────────────────────

def _get_user(db: Session, user_id: str) -> User:
    user = db.query(User).filter(User.user_id == user_id).first()
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


def get_preferences(db: Session, user_id: str) -> dict[str, bool]:
    user = _get_user(db, user_id)
    return {key: getattr(user, key) for key in NOTIFICATION_PREFERENCES}


def update_preference(db: Session, user_id: str, key: str, value: bool) -> dict[str, bool]:
    if key not in NOTIFICATION_PREFERENCES:
        raise HTTPException(status_code=400, detail=f"Unknown notification preference '{key}'")
    user = _get_user(db, user_id)
    setattr(user, key, value)
    db.commit()
    logger.info("Set %s=%s for user %s", key, value, user_id)
    return {k: getattr(user, k) for k in NOTIFICATION_PREFERENCES}


# ── Subscribers ────────────────────────────────────────────────────

@subscribe(FriendRequested)
def notify_friend_request(db: Session, event: FriendRequested) -> None:
    actor = db.get(User, event.actor_id)
    addressee = db.get(User, event.addressee_id)
    created = create_notification_if_enabled(
        db, addressee, "notify_friend_request", NotificationType.friend_invite,
        title="New friend request",
        message=f"{_display_name(actor)} wants to be your friend",
        actor_id=event.actor_id,
        action_url="/friends",
    )
    if created:
        db.commit()


@subscribe(EventCreated)
def notify_friends_of_new_event(db: Session, event: EventCreated) -> None:
    """Tell the creator's friends; for private events only invited friends."""
    actor = db.get(User, event.actor_id)
    friends = aggregates.get_friends(db, event.actor_id)
    if event.is_private:
        invited = {
            user_id for (user_id,) in
            db.query(EventInvite.user_id).filter(EventInvite.event_id == event.event_id).all()
        }
        friends = [f for f in friends if f.user_id in invited]

    sent = 0
    for friend in friends:
        if create_notification_if_enabled(
            db, friend, "notify_friend_event", NotificationType.event_created,
            title="New event from a friend",
            message=f"{_display_name(actor)} created '{event.title}'",
            actor_id=event.actor_id,
            event_id=event.event_id,
            action_url=f"/events/{event.event_id}",
        ):
            sent += 1
    if sent:
        db.commit()
        logger.info("Notified %d friends of event %s", sent, event.event_id)


@subscribe(AttendanceChanged)
def notify_organizer_of_attendance(db: Session, event: AttendanceChanged) -> None:
    """Tell the organizer when someone confirms or cancels."""
    if event.status == AttendanceStatus.attending.value:
        title, verb = "New attendee", "is going to"
    elif event.status == AttendanceStatus.not_going.value:
        title, verb = "Attendance cancelled", "is no longer going to"
    else:
        return
    target = db.get(Event, event.event_id)
    if target is None:
        return
    actor = db.get(User, event.actor_id)
    created = create_notification_if_enabled(
        db, target.organizer, "notify_attendance", NotificationType.event_attendance,
        title=title,
        message=f"{_display_name(actor)} {verb} '{target.title}'",
        actor_id=event.actor_id,
        event_id=event.event_id,
        action_url=f"/events/{event.event_id}",
    )
    if created:
        db.commit()


@subscribe(EventRated)
def notify_event_rated(db: Session, event: EventRated) -> None:
    """Tell the organizer and, for public events, the rater's friends."""
    target = db.get(Event, event.event_id)
    if target is None:
        return
    actor = db.get(User, event.actor_id)
    name = _display_name(actor)

    sent = 0
    if create_notification_if_enabled(
        db, target.organizer, "notify_event_rated", NotificationType.event_rating,
        title="Your event was rated",
        message=f"{name} rated '{target.title}'",
        actor_id=event.actor_id,
        event_id=event.event_id,
        action_url=f"/events/{event.event_id}",
    ):
        sent += 1
    friends = [] if target.is_private else aggregates.get_friends(db, event.actor_id)
    for friend in friends:
        if friend.user_id == target.creator_id:
            continue
        if create_notification_if_enabled(
            db, friend, "notify_friend_rating", NotificationType.event_rating,
            title="A friend rated an event",
            message=f"{name} rated '{target.title}'",
            actor_id=event.actor_id,
            event_id=event.event_id,
            action_url=f"/events/{event.event_id}",
        ):
            sent += 1
    if sent:
        db.commit()


@subscribe(UserJoined)
def notify_contacts_of_join(db: Session, event: UserJoined) -> None:
    """Tell everyone who had the new user's number in their contacts."""
    actor = db.get(User, event.actor_id)
    sent = 0
    for owner in contacts.contact_owners(db, event.phone_e164):
        if create_notification_if_enabled(
            db, owner, "notify_contact_joined", NotificationType.contact_joined,
            title="A contact joined OurMap",
            message=f"{_display_name(actor)} from your contacts is now on OurMap",
            actor_id=event.actor_id,
            action_url=f"/users/{event.actor_id}",
        ):
            sent += 1
    if sent:
        db.commit()
        logger.info("Told %d contacts that user %s joined", sent, event.actor_id)
