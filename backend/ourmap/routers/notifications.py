"""Notification API routes."""
import logging
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ourmap.database import get_db
from ourmap.schemas.notification import NotificationOut, PreferenceUpdate, UnreadCountOut
from ourmap.services import notification_service

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("", response_model=list[NotificationOut])
def list_notifications(
    actor_user_id: str = Query(...),
    limit: int = Query(notification_service.DEFAULT_LIMIT, ge=1, le=100),
    db: Session = Depends(get_db),
):
    return notification_service.list_notifications(db, actor_user_id, limit)


@router.get("/unread-count", response_model=UnreadCountOut)
def unread_count(actor_user_id: str = Query(...), db: Session = Depends(get_db)):
    return UnreadCountOut(count=notification_service.count_unread(db, actor_user_id))


@router.patch("/read-all")
def mark_all_read(actor_user_id: str = Query(...), db: Session = Depends(get_db)):
    updated = notification_service.mark_all_read(db, actor_user_id)
    return {"status": "ok", "updated": updated}


@router.get("/preferences", response_model=dict[str, bool])
def get_preferences(actor_user_id: str = Query(...), db: Session = Depends(get_db)):
    return notification_service.get_preferences(db, actor_user_id)


@router.patch("/preferences", response_model=dict[str, bool])
def update_preference(payload: PreferenceUpdate, actor_user_id: str = Query(...), db: Session = Depends(get_db)):
    """Toggle one preference flag, e.g. ``{"key": "notify_attendance", "value": false}``."""
    return notification_service.update_preference(db, actor_user_id, payload.key, payload.value)


@router.patch("/{notification_id}/read", response_model=NotificationOut)
def mark_read(notification_id: str, actor_user_id: str = Query(...), db: Session = Depends(get_db)):
    return notification_service.mark_read(db, notification_id, actor_user_id)
