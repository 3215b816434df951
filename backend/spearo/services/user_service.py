"""
User Service: profile read/update, follow graph, profile stats.

Follow/unfollow write the actor's `following` and the target's `followers`
as two independent commits. There is no cross-row transaction: if the
second write fails the graph is left asymmetric and the error propagates.
"""

import logging
from collections import Counter
from typing import Any, Dict, Mapping, Optional, Union

from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from spearo.models.dive_session import DiveSession
from spearo.models.user import User
from spearo.schemas import ProfileUpdate
from spearo.services.errors import AlreadyFollowingError, NotFoundError, ValidationFailedError
from spearo.services.projections import expand_follow_lists, user_to_dict

logger = logging.getLogger(__name__)

MIN_USERNAME_LENGTH = 3


def describe_validation_error(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()))
        parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return "; ".join(parts)


def normalize_username(value: Optional[str]) -> str:
    username = (value or "").strip()
    if not username:
        raise ValidationFailedError("username is required")
    if len(username) < MIN_USERNAME_LENGTH:
        raise ValidationFailedError(f"username must be at least {MIN_USERNAME_LENGTH} characters")
    return username


def normalize_email(value: Optional[str]) -> str:
    email = (value or "").strip().lower()
    if not email:
        raise ValidationFailedError("email is required")
    return email


def ensure_unique(session: Session, field: str, value: str, exclude_user_id: Optional[int] = None) -> None:
    """Raise ValidationFailedError if another user already holds `value` in `field`"""
    column = getattr(User, field)
    query = select(User).where(column == value)
    if exclude_user_id is not None:
        query = query.where(User.id != exclude_user_id)
    if session.exec(query).first() is not None:
        raise ValidationFailedError(f"{field} '{value}' is already taken")


def get_user_or_404(session: Session, user_id: int) -> User:
    user = session.get(User, user_id)
    if not user:
        raise NotFoundError("User not found")
    return user


def lock_user(session: Session, user_id: int) -> User:
    """Re-read a user row for a single-row mutation (row lock where the backend supports it)"""
    user = session.exec(
        select(User).where(User.id == user_id).with_for_update().execution_options(populate_existing=True)
    ).first()
    if not user:
        raise NotFoundError("User not found")
    return user


def get_profile(session: Session, user_id: int) -> Dict[str, Any]:
    """User with followers/following expanded to summaries"""
    user = get_user_or_404(session, user_id)
    return expand_follow_lists(session, user_to_dict(user))


def update_profile(
    session: Session, user_id: int, changes: Union[ProfileUpdate, Mapping[str, Any]]
) -> Dict[str, Any]:
    """Partial update of username, bio and profile_picture only"""
    if not isinstance(changes, ProfileUpdate):
        try:
            changes = ProfileUpdate.model_validate(dict(changes))
        except ValidationError as e:
            raise ValidationFailedError(describe_validation_error(e)) from e

    user = get_user_or_404(session, user_id)
    update_data = changes.model_dump(exclude_unset=True)

    if "username" in update_data:
        username = normalize_username(update_data["username"])
        ensure_unique(session, "username", username, exclude_user_id=user.id)
        update_data["username"] = username
    for field in ("bio", "profile_picture"):
        if field in update_data and update_data[field] is None:
            update_data[field] = ""

    for field, value in update_data.items():
        setattr(user, field, value)
    session.add(user)
    try:
        session.commit()
    except IntegrityError as e:
        session.rollback()
        raise ValidationFailedError("username is already taken") from e
    session.refresh(user)
    return user_to_dict(user)


def _add_member(session: Session, user_id: int, field: str, member_id: int) -> None:
    user = lock_user(session, user_id)
    current = list(getattr(user, field) or [])
    if member_id not in current:
        setattr(user, field, [*current, member_id])
        session.add(user)
    session.commit()


def _remove_member(session: Session, user_id: int, field: str, member_id: int) -> None:
    user = lock_user(session, user_id)
    current = list(getattr(user, field) or [])
    if member_id in current:
        setattr(user, field, [uid for uid in current if uid != member_id])
        session.add(user)
    session.commit()


def follow_user(session: Session, actor_id: int, target_id: int) -> None:
    target = session.get(User, target_id)
    actor = session.get(User, actor_id)
    if not target or not actor:
        raise NotFoundError("User not found")

    if target_id in (actor.following or []):
        raise AlreadyFollowingError("Already following this user")

    _add_member(session, actor_id, "following", target_id)
    _add_member(session, target_id, "followers", actor_id)
    logger.info("User %d followed user %d", actor_id, target_id)


def unfollow_user(session: Session, actor_id: int, target_id: int) -> None:
    """Removing an edge that does not exist is a no-op"""
    target = session.get(User, target_id)
    actor = session.get(User, actor_id)
    if not target or not actor:
        raise NotFoundError("User not found")

    _remove_member(session, actor_id, "following", target_id)
    _remove_member(session, target_id, "followers", actor_id)
    logger.info("User %d unfollowed user %d", actor_id, target_id)


def get_user_stats(session: Session, user_id: int) -> Dict[str, Any]:
    """
    Derived profile statistics over a user's sessions.

    Does not read or write the stored total_catches column. Favourites break
    ties by first appearance in newest-first session order.
    """
    get_user_or_404(session, user_id)
    dives = session.exec(
        select(DiveSession)
        .where(DiveSession.user_id == user_id)
        .order_by(DiveSession.date.desc(), DiveSession.id.desc())
    ).all()

    catches = [c for dive in dives for c in dive.catches or []]
    species_counts = Counter(c.get("species") for c in catches if c.get("species"))
    spot_counts = Counter(
        dive.location.get("name") for dive in dives if dive.location and dive.location.get("name")
    )

    return {
        "total_sessions": len(dives),
        "total_catches": len(catches),
        "favorite_species": species_counts.most_common(1)[0][0] if species_counts else None,
        "best_spot": spot_counts.most_common(1)[0][0] if spot_counts else None,
    }
