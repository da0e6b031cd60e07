"""Event API routes — discovery, CRUD, attendance, invites and ratings.

Reads take the viewer as ``viewer_id``; mutations take ``actor_user_id``.
A private event the caller may not see is reported as 404, never 403.
"""
import logging
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.orm import Session

from ourmap.database import get_db
from ourmap.schemas.event import (
    AttendanceOut,
    AttendPayload,
    EventCreate,
    EventOut,
    EventUpdate,
    EventWithDetailsOut,
    InviteOut,
    InvitePayload,
)
from ourmap.schemas.rating import RatingCreate, RatingEligibilityOut, RatingOut, RatingsAverageOut
from ourmap.schemas.user import UserPublicOut
from ourmap.services import aggregates, event_query, event_service, rating_service
from ourmap.services.access import get_visible_event
from ourmap.services.geocoding import Geocoder, get_geocoder

logger = logging.getLogger(__name__)
router = APIRouter()


def _visible_or_404(db: Session, event_id: str, viewer_id: Optional[str]):
    event = get_visible_event(db, event_id, viewer_id)
    if not event:
        raise HTTPException(status_code=404, detail="Event not found")
    return event


def _details_out(results) -> list[EventWithDetailsOut]:
    return [EventWithDetailsOut.model_validate(details) for details in results]


@router.get("/events", response_model=list[EventWithDetailsOut])
def list_events(
    category: Optional[str] = Query(None),
    lat: Optional[float] = Query(None, ge=-90, le=90),
    lng: Optional[float] = Query(None, ge=-180, le=180),
    city: Optional[str] = Query(None),
    viewer_id: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    """Upcoming events; nearest first within the radius when lat/lng are given."""
    filters = event_query.EventFilters(
        category=category,
        user_lat=lat,
        user_lng=lng,
        user_city=city,
        viewer_id=viewer_id,
    )
    return _details_out(event_query.list_events(db, filters))


@router.post("/events", response_model=EventOut, status_code=status.HTTP_201_CREATED)
def create_event(
    payload: EventCreate,
    actor_user_id: str = Query(..., description="ID of the user creating the event"),
    db: Session = Depends(get_db),
    geocoder: Geocoder = Depends(get_geocoder),
):
    """Create an event; the location must geocode."""
    return event_service.create_event(
        db=db,
        geocoder=geocoder,
        creator_id=actor_user_id,
        data=payload.model_dump(exclude={"invitee_ids"}),
        invitee_ids=payload.invitee_ids,
    )


@router.get("/events/mine", response_model=list[EventWithDetailsOut])
def my_events(actor_user_id: str = Query(...), db: Session = Depends(get_db)):
    """Events created by the caller."""
    return _details_out(event_query.get_user_events(db, actor_user_id))


@router.get("/events/{event_id}", response_model=EventWithDetailsOut)
def get_event(event_id: str, viewer_id: Optional[str] = Query(None), db: Session = Depends(get_db)):
    details = event_query.get_event_with_details(db, event_id, viewer_id)
    if details is None:
        raise HTTPException(status_code=404, detail="Event not found")
    return EventWithDetailsOut.model_validate(details)


@router.put("/events/{event_id}", response_model=EventOut)
def update_event(
    event_id: str,
    payload: EventUpdate,
    actor_user_id: str = Query(..., description="ID of the user performing the update"),
    db: Session = Depends(get_db),
    geocoder: Geocoder = Depends(get_geocoder),
):
    """Update an event (creator only)."""
    return event_service.update_event(
        db=db,
        geocoder=geocoder,
        event_id=event_id,
        actor_user_id=actor_user_id,
        updates=payload.model_dump(exclude_unset=True),
    )


@router.delete("/events/{event_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_event(event_id: str, actor_user_id: str = Query(...), db: Session = Depends(get_db)):
    event_service.delete_event(db, event_id, actor_user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ── Attendance & invites ───────────────────────────────────────────

@router.post("/events/{event_id}/attend", response_model=AttendanceOut)
def attend_event(
    event_id: str,
    payload: AttendPayload,
    actor_user_id: str = Query(...),
    db: Session = Depends(get_db),
):
    """Set the caller's RSVP (attending / interested / not_going)."""
    return event_service.set_attendance(db, event_id, actor_user_id, payload.status.value)


@router.get("/events/{event_id}/attendees", response_model=list[UserPublicOut])
def list_attendees(event_id: str, viewer_id: Optional[str] = Query(None), db: Session = Depends(get_db)):
    _visible_or_404(db, event_id, viewer_id)
    return aggregates.get_event_attendees(db, event_id)


@router.post("/events/{event_id}/invites", response_model=list[InviteOut], status_code=status.HTTP_201_CREATED)
def invite_to_event(
    event_id: str,
    payload: InvitePayload,
    actor_user_id: str = Query(...),
    db: Session = Depends(get_db),
):
    """Invite users to an event (creator only)."""
    return event_service.invite_users(db, event_id, actor_user_id, payload.user_ids)


@router.get("/invites", response_model=list[InviteOut])
def my_invites(actor_user_id: str = Query(...), db: Session = Depends(get_db)):
    """Pending invites addressed to the caller."""
    return event_service.get_user_invites(db, actor_user_id)


# ── Ratings ────────────────────────────────────────────────────────

@router.post("/events/{event_id}/rate", response_model=RatingOut, status_code=status.HTTP_201_CREATED)
def rate_event(
    event_id: str,
    payload: RatingCreate,
    actor_user_id: str = Query(...),
    db: Session = Depends(get_db),
):
    _visible_or_404(db, event_id, actor_user_id)
    return rating_service.create_rating(
        db,
        event_id=event_id,
        user_id=actor_user_id,
        organizer_rating=payload.organizer_rating,
        event_rating=payload.event_rating,
        comment=payload.comment,
    )


@router.get("/events/{event_id}/ratings", response_model=list[RatingOut])
def list_ratings(event_id: str, viewer_id: Optional[str] = Query(None), db: Session = Depends(get_db)):
    _visible_or_404(db, event_id, viewer_id)
    return rating_service.list_event_ratings(db, event_id)


@router.get("/events/{event_id}/ratings/average", response_model=RatingsAverageOut)
def ratings_average(event_id: str, viewer_id: Optional[str] = Query(None), db: Session = Depends(get_db)):
    _visible_or_404(db, event_id, viewer_id)
    return aggregates.get_event_ratings_average(db, event_id)


@router.get("/events/{event_id}/can-rate", response_model=RatingEligibilityOut)
def can_rate(event_id: str, actor_user_id: str = Query(...), db: Session = Depends(get_db)):
    if get_visible_event(db, event_id, actor_user_id) is None:
        return RatingEligibilityOut(can_rate=False, reason=rating_service.REASON_NOT_FOUND)
    return rating_service.can_user_rate_event(db, event_id, actor_user_id)


@router.get("/events/{event_id}/my-rating", response_model=Optional[RatingOut])
def my_rating(event_id: str, actor_user_id: str = Query(...), db: Session = Depends(get_db)):
    _visible_or_404(db, event_id, actor_user_id)
    return rating_service.get_user_event_rating(db, event_id, actor_user_id)
