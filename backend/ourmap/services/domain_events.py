"""In-process domain events.

Mutating services publish what happened; side effects (notifications) are
registered as subscribers with the ``subscribe`` decorator, in the spirit
of model signals::

    @subscribe(EventCreated)
    def notify_friends(db, event): ...

A failing subscriber is logged and skipped; it never fails the mutation
that published the event.
"""
import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Callable, Optional

from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DomainEvent:
    actor_id: str


@dataclass(frozen=True)
class FriendRequested(DomainEvent):
    addressee_id: str
    friendship_id: str


@dataclass(frozen=True)
class EventCreated(DomainEvent):
    event_id: str
    title: str
    is_private: bool


@dataclass(frozen=True)
class AttendanceChanged(DomainEvent):
    event_id: str
    status: str


@dataclass(frozen=True)
class EventRated(DomainEvent):
    event_id: str
    rating_id: str


@dataclass(frozen=True)
class UserJoined(DomainEvent):
    phone_e164: str


Handler = Callable[[Session, DomainEvent], None]

_subscribers: dict[type, list[Handler]] = defaultdict(list)


def subscribe(event_type: type) -> Callable[[Handler], Handler]:
    def decorator(handler: Handler) -> Handler:
        if handler not in _subscribers[event_type]:
            _subscribers[event_type].append(handler)
        return handler
    return decorator


def unsubscribe(event_type: type, handler: Optional[Handler] = None) -> None:
    """Remove one handler, or every handler for ``event_type``."""
    if handler is None:
        _subscribers.pop(event_type, None)
    elif handler in _subscribers.get(event_type, []):
        _subscribers[event_type].remove(handler)


def publish(db: Session, event: DomainEvent) -> int:
    """Run every subscriber for ``event``; returns how many succeeded."""
    delivered = 0
    for handler in list(_subscribers.get(type(event), [])):
        try:
            handler(db, event)
            delivered += 1
        except Exception:
            logger.exception("Subscriber %s failed for %s", getattr(handler, "__name__", handler), event)
            db.rollback()
    return delivered
