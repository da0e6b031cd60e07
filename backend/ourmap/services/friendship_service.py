"""Friend requests — send, respond, list."""
import logging
from typing import Optional

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from ourmap.models.friendship import Friendship, FriendshipStatus
from ourmap.models.user import User
from ourmap.services import aggregates
from ourmap.services.domain_events import FriendRequested, publish

logger = logging.getLogger(__name__)


def _resolve_addressee(db: Session, addressee_id: Optional[str], username: Optional[str]) -> User:
    if addressee_id:
        user = db.query(User).filter(User.user_id == addressee_id).first()
    elif username:
        user = db.query(User).filter(User.username == username.strip()).first()
    else:
        raise HTTPException(status_code=400, detail="addressee_id or username is required")
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


def send_friend_request(
    db: Session,
    requester_id: str,
    addressee_id: Optional[str] = None,
    username: Optional[str] = None,
) -> Friendship:
    addressee = _resolve_addressee(db, addressee_id, username)
    if addressee.user_id == requester_id:
        raise HTTPException(status_code=400, detail="You cannot send a friend request to yourself")
    if aggregates.are_friends(db, requester_id, addressee.user_id):
        raise HTTPException(status_code=400, detail="You are already friends")
    if aggregates.has_pending_friend_request(db, requester_id, addressee.user_id):
        raise HTTPException(status_code=400, detail="A friend request is already pending")

    # A declined request in the same direction is reopened rather than duplicated.
    friendship = (
        db.query(Friendship)
        .filter(Friendship.requester_id == requester_id, Friendship.addressee_id == addressee.user_id)
        .first()
    )
    if friendship:
        friendship.status = FriendshipStatus.pending
    else:
        friendship = Friendship(requester_id=requester_id, addressee_id=addressee.user_id)
        db.add(friendship)
    db.commit()
    db.refresh(friendship)
    logger.info("Friend request %s from %s to %s", friendship.friendship_id, requester_id, addressee.user_id)

    publish(db, FriendRequested(
        actor_id=requester_id,
        addressee_id=addressee.user_id,
        friendship_id=friendship.friendship_id,
    ))
    return friendship


def respond_to_friend_request(db: Session, friendship_id: str, actor_user_id: str, new_status: str) -> Friendship:
    """Accept or decline; only the addressee may respond."""
    friendship = db.query(Friendship).filter(Friendship.friendship_id == friendship_id).first()
    if not friendship:
        raise HTTPException(status_code=404, detail="Friend request not found")
    if friendship.addressee_id != actor_user_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only the recipient may respond to this friend request",
        )
    if friendship.status != FriendshipStatus.pending:
        raise HTTPException(status_code=400, detail=f"Friend request is already {friendship.status.value}")
    if new_status not in (FriendshipStatus.accepted.value, FriendshipStatus.declined.value):
        raise HTTPException(status_code=400, detail="Status must be 'accepted' or 'declined'")

    friendship.status = FriendshipStatus(new_status)
    db.commit()
    db.refresh(friendship)
    logger.info("Friend request %s %s by %s", friendship_id, new_status, actor_user_id)
    return friendship


def get_pending_requests(db: Session, user_id: str) -> list[Friendship]:
    """Requests awaiting ``user_id``'s answer, newest first."""
    return (
        db.query(Friendship)
        .filter(Friendship.addressee_id == user_id, Friendship.status == FriendshipStatus.pending)
        .order_by(Friendship.created_at.desc())
        .all()
    )
