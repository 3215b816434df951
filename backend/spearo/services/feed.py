"""
Feed Composer: newest sessions from the actor's followees plus the actor.

Read-only. No cursor; the same call returns the same top FEED_LIMIT until
new sessions are created.
"""

from typing import Any, Dict, List

from sqlmodel import Session, select

from spearo.models.dive_session import DiveSession
from spearo.services.projections import expand_session_owner, session_to_dict
from spearo.services.user_service import get_user_or_404

FEED_LIMIT = 20


def feed_authors(session: Session, actor_id: int) -> List[int]:
    """The actor's followees plus the actor, following order preserved"""
    actor = get_user_or_404(session, actor_id)
    authors = list(actor.following or [])
    if actor_id not in authors:
        authors.append(actor_id)
    return authors


def get_feed(session: Session, actor_id: int, limit: int = FEED_LIMIT) -> List[Dict[str, Any]]:
    authors = feed_authors(session, actor_id)
    dives = session.exec(
        select(DiveSession)
        .where(DiveSession.user_id.in_(authors))
        .order_by(DiveSession.date.desc(), DiveSession.id.desc())
        .limit(limit)
    ).all()
    return expand_session_owner(session, [session_to_dict(d) for d in dives])
