"""Search API routes — upcoming events, ended events and users."""
import logging
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ourmap.config import settings
from ourmap.database import get_db
from ourmap.models.user import User
from ourmap.schemas.event import EventWithDetailsOut
from ourmap.schemas.user import UserPublicOut
from ourmap.services import event_query
from ourmap.services.conditions import any_of, contains_ci

logger = logging.getLogger(__name__)
router = APIRouter()

USER_SEARCH_LIMIT = 20


@router.get("/events", response_model=list[EventWithDetailsOut])
def search_events(
    query: str = Query(""),
    viewer_id: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    results = event_query.search_events(db, query, viewer_id)
    return [EventWithDetailsOut.model_validate(d) for d in results]


@router.get("/ended-events", response_model=list[EventWithDetailsOut])
def search_ended_events(
    city_name: Optional[str] = Query(None, alias="cityName"),
    days_back: Optional[int] = Query(None, alias="daysBack", ge=0),
    search_query: Optional[str] = Query(None, alias="searchQuery"),
    viewer_id: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    """Past events, most recent first, for the "what happened" views."""
    filters = event_query.EndedEventFilters(
        city_name=city_name,
        days_back=days_back,
        search_query=search_query,
        viewer_id=viewer_id,
    )
    results = event_query.search_ended_events(db, filters)
    return [EventWithDetailsOut.model_validate(d) for d in results]


@router.get("/users", response_model=list[UserPublicOut])
def search_users(query: str = Query(""), db: Session = Depends(get_db)):
    query = query.strip()
    if len(query) < settings.SEARCH_MIN_QUERY_LENGTH:
        return []
    return (
        db.query(User)
        .filter(any_of(
            contains_ci(User.username, query),
            contains_ci(User.first_name, query),
            contains_ci(User.last_name, query),
        ))
        .order_by(User.username)
        .limit(USER_SEARCH_LIMIT)
        .all()
    )
