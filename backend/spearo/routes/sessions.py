from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlmodel import Session

from spearo.auth import get_current_user
from spearo.database import get_session
from spearo.models.user import User
from spearo.routes.common import to_http_exception, unclassified_failure
from spearo.schemas import CommentCreate, SessionCreate
from spearo.services import feed as feed_service
from spearo.services import session_service
from spearo.services.errors import SpearoError

router = APIRouter()


class UserSummary(BaseModel):
    id: int
    username: str
    profile_picture: str = ""


class CommentResponse(BaseModel):
    user: Union[UserSummary, int, None] = None
    text: Optional[str] = None
    created_at: Optional[datetime] = None


class SessionResponse(BaseModel):
    id: int
    user: Union[UserSummary, int, None] = None
    date: datetime
    location: Optional[Dict[str, Any]] = None
    catches: List[Dict[str, Any]] = []
    conditions: Optional[Dict[str, Any]] = None
    notes: Optional[str] = None
    likes: List[Union[UserSummary, int]] = []
    comments: List[CommentResponse] = []
    created_at: datetime
    updated_at: datetime


@router.post("/sessions", response_model=SessionResponse, status_code=201)
def create_session(
    session_data: SessionCreate,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    """Log a new session owned by the caller"""
    try:
        return session_service.create_session(session, current_user.id, session_data)
    except SpearoError as e:
        raise to_http_exception(e)
    except Exception:
        raise unclassified_failure(session, "creating session")


# Registered before /sessions/{session_id} so "feed" is not parsed as an id
@router.get("/sessions/feed", response_model=List[SessionResponse])
def get_feed(current_user: User = Depends(get_current_user), session: Session = Depends(get_session)):
    """Newest sessions from followed users and the caller"""
    try:
        return feed_service.get_feed(session, current_user.id)
    except SpearoError as e:
        raise to_http_exception(e)
    except Exception:
        raise unclassified_failure(session, "building feed")


@router.get("/sessions/user/{user_id}", response_model=List[SessionResponse])
def get_user_sessions(
    user_id: int, current_user: User = Depends(get_current_user), session: Session = Depends(get_session)
):
    try:
        return session_service.get_user_sessions(session, user_id)
    except Exception:
        raise unclassified_failure(session, "listing user sessions")


@router.get("/sessions/{session_id}", response_model=SessionResponse)
def get_session_detail(
    session_id: int, current_user: User = Depends(get_current_user), session: Session = Depends(get_session)
):
    try:
        return session_service.get_session_detail(session, session_id)
    except SpearoError as e:
        raise to_http_exception(e)
    except Exception:
        raise unclassified_failure(session, "loading session")


@router.post("/sessions/{session_id}/like", response_model=SessionResponse)
def toggle_like(
    session_id: int, current_user: User = Depends(get_current_user), session: Session = Depends(get_session)
):
    """Like or unlike, depending on the caller's current state"""
    try:
        return session_service.toggle_like(session, session_id, current_user.id)
    except SpearoError as e:
        raise to_http_exception(e)
    except Exception:
        raise unclassified_failure(session, "toggling like")


@router.post("/sessions/{session_id}/comment", response_model=SessionResponse)
def add_comment(
    session_id: int,
    comment: CommentCreate,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    try:
        return session_service.add_comment(session, session_id, current_user.id, comment.text)
    except SpearoError as e:
        raise to_http_exception(e)
    except Exception:
        raise unclassified_failure(session, "adding comment")
