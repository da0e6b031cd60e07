"""Phone normalization and address-book matching.

Uploaded numbers are normalized to E.164 and kept only as keyed digests,
which is enough to tell an uploader when one of their contacts signs up.
"""
import hashlib
import hmac
import logging
from dataclasses import dataclass
from typing import Iterable, Optional

import phonenumbers
from fastapi import HTTPException
from sqlalchemy.orm import Session

from ourmap.config import settings
from ourmap.models.contact import UserContact
from ourmap.models.user import User
from ourmap.services import aggregates

logger = logging.getLogger(__name__)

MAX_CONTACTS = 1000


@dataclass
class ContactMatch:
    user: User
    friendship_status: str  # "friends" | "pending" | "none"


def normalize_phone(raw: str, region: Optional[str] = None) -> Optional[str]:
    """E.164 form of ``raw``, or None when it is not a valid number."""
    try:
        parsed = phonenumbers.parse(raw, region or settings.PHONE_DEFAULT_REGION)
    except phonenumbers.NumberParseException:
        return None
    if not phonenumbers.is_valid_number(parsed):
        return None
    return phonenumbers.format_number(parsed, phonenumbers.PhoneNumberFormat.E164)


def phone_digest(phone_e164: str) -> str:
    key = settings.CONTACT_HASH_SECRET.encode()
    return hmac.new(key, phone_e164.encode(), hashlib.sha256).hexdigest()


def _remember(db: Session, owner_id: str, phones: set[str]) -> None:
    digests = {phone_digest(phone) for phone in phones}
    known = {
        digest for (digest,) in
        db.query(UserContact.phone_digest)
        .filter(UserContact.owner_id == owner_id, UserContact.phone_digest.in_(digests))
        .all()
    }
    for digest in digests - known:
        db.add(UserContact(owner_id=owner_id, phone_digest=digest))
    db.commit()


def match_contacts(db: Session, owner_id: str, contacts: Iterable[str]) -> list[ContactMatch]:
    """Registered users among ``contacts``, with the owner's friendship status for each.

    Entries that do not parse as phone numbers are skipped.
    """
    if not db.query(User.user_id).filter(User.user_id == owner_id).first():
        raise HTTPException(status_code=404, detail="User not found")

    phones = {phone for phone in (normalize_phone(raw) for raw in contacts) if phone}
    if not phones:
        return []
    _remember(db, owner_id, phones)

    users = (
        db.query(User)
        .filter(User.phone_e164.in_(phones), User.user_id != owner_id)
        .order_by(User.username)
        .all()
    )
    matches = []
    for user in users:
        if aggregates.are_friends(db, owner_id, user.user_id):
            status = "friends"
        elif aggregates.has_pending_friend_request(db, owner_id, user.user_id):
            status = "pending"
        else:
            status = "none"
        matches.append(ContactMatch(user=user, friendship_status=status))
    logger.info("Matched %d of %d contacts for user %s", len(matches), len(phones), owner_id)
    return matches


def contact_owners(db: Session, phone_e164: str) -> list[User]:
    """Users who have ``phone_e164`` in an uploaded address book."""
    return (
        db.query(User)
        .join(UserContact, UserContact.owner_id == User.user_id)
        .filter(UserContact.phone_digest == phone_digest(phone_e164))
        .all()
    )
