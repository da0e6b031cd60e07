"""Friendship API routes."""
import logging
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from ourmap.database import get_db
from ourmap.schemas.friendship import (
    ContactMatchOut,
    ContactsMatchPayload,
    FriendRequestCreate,
    FriendRequestRespond,
    FriendshipOut,
)
from ourmap.schemas.user import UserPublicOut
from ourmap.services import aggregates, contacts, friendship_service

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/friends", response_model=list[UserPublicOut])
def list_friends(actor_user_id: str = Query(...), db: Session = Depends(get_db)):
    return aggregates.get_friends(db, actor_user_id)


@router.post("/friends/contacts", response_model=list[ContactMatchOut])
def match_contacts(payload: ContactsMatchPayload, actor_user_id: str = Query(...), db: Session = Depends(get_db)):
    """Find registered users in the caller's address book."""
    matches = contacts.match_contacts(db, actor_user_id, payload.contacts)
    return [
        ContactMatchOut(
            **UserPublicOut.model_validate(match.user).model_dump(),
            friendship_status=match.friendship_status,
        )
        for match in matches
    ]


@router.get("/friend-requests", response_model=list[FriendshipOut])
def pending_requests(actor_user_id: str = Query(...), db: Session = Depends(get_db)):
    """Requests waiting on the caller's answer."""
    return friendship_service.get_pending_requests(db, actor_user_id)


@router.post("/friend-requests", response_model=FriendshipOut, status_code=status.HTTP_201_CREATED)
def send_request(payload: FriendRequestCreate, actor_user_id: str = Query(...), db: Session = Depends(get_db)):
    """Send a friend request by user id or username."""
    return friendship_service.send_friend_request(
        db,
        requester_id=actor_user_id,
        addressee_id=payload.addressee_id,
        username=payload.username,
    )


@router.put("/friend-requests/{friendship_id}", response_model=FriendshipOut)
def respond_to_request(
    friendship_id: str,
    payload: FriendRequestRespond,
    actor_user_id: str = Query(...),
    db: Session = Depends(get_db),
):
    return friendship_service.respond_to_friend_request(db, friendship_id, actor_user_id, payload.status)
