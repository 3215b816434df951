"""
Typed projections of stored rows into response dicts.

Reference fields (owner, likes, comment authors, follow lists) are stored
as bare user ids; each expand_* helper swaps ids for user summaries with a
single batched lookup. A dangling id expands to None for single references
and is dropped from lists.
"""

from typing import Any, Dict, Iterable, List, Optional

from sqlmodel import Session, select

from spearo.models.dive_session import DiveSession
from spearo.models.user import User


def user_summary(user: Optional[User]) -> Optional[Dict[str, Any]]:
    if user is None:
        return None
    return {"id": user.id, "username": user.username, "profile_picture": user.profile_picture}


def load_user_summaries(session: Session, user_ids: Iterable[Any]) -> Dict[int, Dict[str, Any]]:
    """Fetch summaries for the given ids in one query, keyed by id"""
    ids = {uid for uid in user_ids if isinstance(uid, int)}
    if not ids:
        return {}
    users = session.exec(select(User).where(User.id.in_(ids))).all()
    return {u.id: user_summary(u) for u in users}


def session_to_dict(dive: DiveSession) -> Dict[str, Any]:
    """Unexpanded view: references stay as user ids"""
    return {
        "id": dive.id,
        "user": dive.user_id,
        "date": dive.date,
        "location": dive.location,
        "catches": [dict(c) for c in dive.catches or []],
        "conditions": dive.conditions,
        "notes": dive.notes,
        "likes": list(dive.likes or []),
        "comments": [dict(c) for c in dive.comments or []],
        "created_at": dive.created_at,
        "updated_at": dive.updated_at,
    }


def expand_session_owner(session: Session, views: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    summaries = load_user_summaries(session, (v["user"] for v in views))
    for view in views:
        view["user"] = summaries.get(view["user"])
    return views


def expand_likes(session: Session, view: Dict[str, Any]) -> Dict[str, Any]:
    summaries = load_user_summaries(session, view["likes"])
    view["likes"] = [summaries[uid] for uid in view["likes"] if uid in summaries]
    return view


def expand_comment_authors(session: Session, view: Dict[str, Any]) -> Dict[str, Any]:
    summaries = load_user_summaries(session, (c.get("user") for c in view["comments"]))
    for comment in view["comments"]:
        comment["user"] = summaries.get(comment.get("user"))
    return view


def user_to_dict(user: User) -> Dict[str, Any]:
    return {
        "id": user.id,
        "username": user.username,
        "email": user.email,
        "profile_picture": user.profile_picture,
        "bio": user.bio,
        "total_catches": user.total_catches,
        "favorite_spots": [dict(s) for s in user.favorite_spots or []],
        "followers": list(user.followers or []),
        "following": list(user.following or []),
        "created_at": user.created_at,
        "updated_at": user.updated_at,
    }


def expand_follow_lists(session: Session, view: Dict[str, Any]) -> Dict[str, Any]:
    summaries = load_user_summaries(session, [*view["followers"], *view["following"]])
    view["followers"] = [summaries[uid] for uid in view["followers"] if uid in summaries]
    view["following"] = [summaries[uid] for uid in view["following"] if uid in summaries]
    return view
