"""
Session Service: create/read dive sessions, toggle likes, append comments.

A session is created whole by its owner and afterwards only mutated by
like toggles and comment appends. The owner is always the authenticated
caller, never a value from the payload.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Mapping, Union

from pydantic import ValidationError
from sqlmodel import Session, select

from spearo.models.dive_session import DiveSession
from spearo.schemas import SessionCreate
from spearo.services.errors import NotFoundError, ValidationFailedError
from spearo.services.projections import (
    expand_comment_authors,
    expand_likes,
    expand_session_owner,
    session_to_dict,
)
from spearo.services.user_service import describe_validation_error

logger = logging.getLogger(__name__)


def validate_session_payload(payload: Union[SessionCreate, Mapping[str, Any]]) -> SessionCreate:
    if isinstance(payload, SessionCreate):
        return payload
    try:
        return SessionCreate.model_validate(dict(payload))
    except ValidationError as e:
        raise ValidationFailedError(describe_validation_error(e)) from e


def lock_session(session: Session, session_id: int) -> DiveSession:
    """Re-read a session row for a single-row mutation (row lock where the backend supports it)"""
    dive = session.exec(
        select(DiveSession)
        .where(DiveSession.id == session_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    ).first()
    if not dive:
        raise NotFoundError("Session not found")
    return dive


def create_session(
    session: Session, owner_id: int, payload: Union[SessionCreate, Mapping[str, Any]]
) -> Dict[str, Any]:
    data = validate_session_payload(payload)
    dive = DiveSession(
        user_id=owner_id,
        date=data.date,
        location=data.location.model_dump(exclude_none=True) if data.location else None,
        catches=[c.model_dump(exclude_none=True) for c in data.catches],
        conditions=data.conditions.model_dump(exclude_none=True) if data.conditions else None,
        notes=data.notes,
    )
    session.add(dive)
    session.commit()
    session.refresh(dive)
    logger.info("User %d created session %d with %d catches", owner_id, dive.id, len(dive.catches))
    return session_to_dict(dive)


def get_session_detail(session: Session, session_id: int) -> Dict[str, Any]:
    """Session with owner, likes and comment authors expanded"""
    dive = session.get(DiveSession, session_id)
    if not dive:
        raise NotFoundError("Session not found")
    view = expand_session_owner(session, [session_to_dict(dive)])[0]
    expand_likes(session, view)
    expand_comment_authors(session, view)
    return view


def get_user_sessions(session: Session, user_id: int) -> List[Dict[str, Any]]:
    """All sessions owned by user_id, newest date first"""
    dives = session.exec(
        select(DiveSession)
        .where(DiveSession.user_id == user_id)
        .order_by(DiveSession.date.desc(), DiveSession.id.desc())
    ).all()
    return expand_session_owner(session, [session_to_dict(d) for d in dives])


def toggle_like(session: Session, session_id: int, actor_id: int) -> Dict[str, Any]:
    """Flip actor's like state: remove if present, append otherwise"""
    dive = lock_session(session, session_id)
    likes = list(dive.likes or [])
    if actor_id in likes:
        dive.likes = [uid for uid in likes if uid != actor_id]
        liked = False
    else:
        dive.likes = [*likes, actor_id]
        liked = True
    session.add(dive)
    session.commit()
    session.refresh(dive)
    logger.info("User %d %s session %d", actor_id, "liked" if liked else "unliked", session_id)
    return session_to_dict(dive)


def add_comment(session: Session, session_id: int, actor_id: int, text: str) -> Dict[str, Any]:
    """Append a comment verbatim; returns the session with comment authors expanded"""
    dive = lock_session(session, session_id)
    comment = {"user": actor_id, "text": text, "created_at": datetime.utcnow().isoformat()}
    dive.comments = [*(dive.comments or []), comment]
    session.add(dive)
    session.commit()
    session.refresh(dive)
    logger.info("User %d commented on session %d", actor_id, session_id)
    return expand_comment_authors(session, session_to_dict(dive))
