"""
Identity Resolver: map a verified external identity to a local user.

First sight of an external id provisions a user. Derived username/email
collisions are surfaced as ValidationFailedError; no automatic renaming.
"""

import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from spearo.models.user import User
from spearo.services.errors import ValidationFailedError
from spearo.services.user_service import ensure_unique, normalize_email, normalize_username

logger = logging.getLogger(__name__)


def find_by_external_id(session: Session, external_id: str) -> Optional[User]:
    return session.exec(select(User).where(User.auth0_id == external_id)).first()


def derive_username(email: Optional[str], nickname: Optional[str] = None) -> str:
    """Nickname if present, else the local part of the email"""
    if nickname and nickname.strip():
        return nickname.strip()
    if not email or not email.strip():
        raise ValidationFailedError("email claim is required to provision a user")
    return email.strip().split("@")[0]


def resolve_user(session: Session, external_id: str, email: Optional[str], nickname: Optional[str] = None) -> User:
    if not external_id or not external_id.strip():
        raise ValidationFailedError("external identity is required")

    user = find_by_external_id(session, external_id)
    if user:
        return user

    username = normalize_username(derive_username(email, nickname))
    email_norm = normalize_email(email)
    ensure_unique(session, "username", username)
    ensure_unique(session, "email", email_norm)

    user = User(auth0_id=external_id, username=username, email=email_norm)
    session.add(user)
    try:
        session.commit()
    except IntegrityError as e:
        session.rollback()
        # A concurrent request may have provisioned the same identity first
        existing = find_by_external_id(session, external_id)
        if existing:
            return existing
        raise ValidationFailedError("username or email is already taken") from e
    session.refresh(user)
    logger.info("Provisioned user %d (%s) for external identity", user.id, user.username)
    return user
