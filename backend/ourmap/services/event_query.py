"""Event query engine — discovery listings, search, and single-event details.

Every listing composes the same pieces: a time window, the private-event
visibility condition, and optional category / text / location filters.
Rows are then enriched with attendance counts, the viewer's own RSVP and,
when the viewer's coordinates are known, the distance to the event.

Listing failures never propagate: they are logged and an empty list is
returned so the public discovery pages keep rendering.
"""
import logging
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Optional

from sqlalchemy.orm import Session, contains_eager

from ourmap.config import settings
from ourmap.models.attendee import EventAttendee
from ourmap.models.event import Event
from ourmap.models.user import User
from ourmap.services import aggregates
from ourmap.services.access import get_visible_event, visibility_condition
from ourmap.services.categories import expand_category
from ourmap.services.conditions import all_of, any_of, contains_ci
from ourmap.services.distance import haversine_km
from ourmap.utils import as_utc, utcnow

logger = logging.getLogger(__name__)


@dataclass
class EventFilters:
    category: Optional[str] = None
    user_lat: Optional[float] = None
    user_lng: Optional[float] = None
    user_city: Optional[str] = None
    viewer_id: Optional[str] = None

    @property
    def has_coordinates(self) -> bool:
        return self.user_lat is not None and self.user_lng is not None


@dataclass
class EndedEventFilters:
    city_name: Optional[str] = None
    days_back: Optional[int] = None
    search_query: Optional[str] = None
    viewer_id: Optional[str] = None


@dataclass
class EventDetails:
    """An event plus the values derived for a particular viewer."""

    event: Event
    attendance_count: int = 0
    user_attendance: Optional[EventAttendee] = None
    distance: Optional[float] = None
    friends_going: list[User] = field(default_factory=list)


# ── Condition builders ─────────────────────────────────────────────

def category_condition(db: Session, category: Optional[str]):
    """``category IN (expanded values)``, or None when there is no filter."""
    values = expand_category(db, category)
    if not values:
        return None
    return Event.category.in_(values)


def text_condition(query: Optional[str]):
    """Title/description/location contains ``query`` (case-insensitive)."""
    query = (query or "").strip()
    if len(query) < settings.SEARCH_MIN_QUERY_LENGTH:
        return None
    return any_of(
        contains_ci(Event.title, query),
        contains_ci(Event.description, query),
        contains_ci(Event.location, query),
    )


def city_condition(city_name: Optional[str]):
    city_name = (city_name or "").strip()
    if not city_name:
        return None
    return contains_ci(Event.location, city_name)


def _fetch(db: Session, where, *order_by) -> list[Event]:
    return (
        db.query(Event)
        .join(User, User.user_id == Event.creator_id)
        .options(contains_eager(Event.organizer))
        .filter(where)
        .order_by(*order_by)
        .all()
    )


def _enrich(db: Session, events: list[Event], viewer_id: Optional[str]) -> list[EventDetails]:
    ids = [e.event_id for e in events]
    counts = aggregates.attendance_counts(db, ids)
    mine = aggregates.viewer_attendances(db, ids, viewer_id)
    return [
        EventDetails(
            event=e,
            attendance_count=counts.get(e.event_id, 0),
            user_attendance=mine.get(e.event_id),
        )
        for e in events
    ]


def _created_desc_key(details: EventDetails):
    created = as_utc(details.event.created_at)
    return -created.timestamp() if created else 0.0


def apply_proximity(results: list[EventDetails], user_lat: float, user_lng: float,
                    radius_km: Optional[float] = None) -> list[EventDetails]:
    """Annotate distance, drop events beyond ``radius_km``, sort nearest first.

    Events without coordinates cannot be placed and are dropped.  Ties on
    distance are broken by most recently created.
    """
    radius_km = settings.NEARBY_RADIUS_KM if radius_km is None else radius_km
    nearby = []
    for details in results:
        event = details.event
        if event.latitude is None or event.longitude is None:
            continue
        details.distance = haversine_km(user_lat, user_lng, event.latitude, event.longitude)
        if details.distance <= radius_km:
            nearby.append(details)
    nearby.sort(key=lambda d: (d.distance, _created_desc_key(d)))
    return nearby


# ── Listings ───────────────────────────────────────────────────────

def list_events(db: Session, filters: EventFilters) -> list[EventDetails]:
    """Upcoming events visible to the viewer, optionally near them."""
    try:
        where = all_of(
            Event.date_time >= utcnow(),
            visibility_condition(filters.viewer_id),
            category_condition(db, filters.category),
        )
        results = _enrich(db, _fetch(db, where, Event.created_at.desc()), filters.viewer_id)

        if filters.has_coordinates:
            return apply_proximity(results, filters.user_lat, filters.user_lng)

        if filters.user_city:
            # City names are not matched against free-text locations; coordinates drive proximity.
            logger.info("City filter '%s' requested without coordinates; returning all events", filters.user_city)

        return results
    except Exception:
        logger.exception("Failed to list events with filters %s", filters)
        db.rollback()
        return []


def search_events(db: Session, query: str, viewer_id: Optional[str] = None) -> list[EventDetails]:
    """Upcoming visible events whose text matches ``query`` (min 2 chars)."""
    condition = text_condition(query)
    if condition is None:
        return []
    try:
        where = all_of(
            Event.date_time >= utcnow(),
            visibility_condition(viewer_id),
            condition,
        )
        return _enrich(db, _fetch(db, where, Event.created_at.desc()), viewer_id)
    except Exception:
        logger.exception("Failed to search events for '%s'", query)
        db.rollback()
        return []


def search_ended_events(db: Session, filters: EndedEventFilters) -> list[EventDetails]:
    """Past events, most recent first."""
    try:
        now = utcnow()
        where = all_of(
            Event.date_time <= now,
            Event.date_time >= now - timedelta(days=filters.days_back)
            if filters.days_back and filters.days_back > 0 else None,
            city_condition(filters.city_name),
            text_condition(filters.search_query),
            visibility_condition(filters.viewer_id),
        )
        return _enrich(db, _fetch(db, where, Event.date_time.desc()), filters.viewer_id)
    except Exception:
        logger.exception("Failed to search ended events with filters %s", filters)
        db.rollback()
        return []


def get_user_events(db: Session, user_id: str) -> list[EventDetails]:
    """Events created by ``user_id``, newest first."""
    try:
        return _enrich(db, _fetch(db, Event.creator_id == user_id, Event.created_at.desc()), None)
    except Exception:
        logger.exception("Failed to list events created by %s", user_id)
        db.rollback()
        return []


def get_event_with_details(db: Session, event_id: str, viewer_id: Optional[str] = None) -> Optional[EventDetails]:
    """One event with details, or None when missing or not visible."""
    event = get_visible_event(db, event_id, viewer_id)
    if event is None:
        return None

    return EventDetails(
        event=event,
        attendance_count=aggregates.attendance_count(db, event_id),
        user_attendance=aggregates.get_attendance(db, event_id, viewer_id) if viewer_id else None,
        friends_going=aggregates.friends_going(db, event_id, viewer_id),
    )
