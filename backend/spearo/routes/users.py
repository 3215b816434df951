from datetime import datetime
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlmodel import Session

from spearo.auth import get_current_user
from spearo.database import get_session
from spearo.models.user import User
from spearo.routes.common import to_http_exception, unclassified_failure
from spearo.routes.sessions import UserSummary
from spearo.schemas import ProfileUpdate
from spearo.services import user_service
from spearo.services.errors import SpearoError
from spearo.services.projections import user_to_dict

router = APIRouter()


class UserResponse(BaseModel):
    id: int
    username: str
    email: str
    profile_picture: str
    bio: str
    total_catches: int
    favorite_spots: List[Dict[str, Any]] = []
    followers: List[int] = []
    following: List[int] = []
    created_at: datetime
    updated_at: datetime


class ProfileResponse(UserResponse):
    followers: List[UserSummary] = []
    following: List[UserSummary] = []


class UserStatsResponse(BaseModel):
    total_sessions: int
    total_catches: int
    favorite_species: Optional[str] = None
    best_spot: Optional[str] = None


class MessageResponse(BaseModel):
    message: str


@router.get("/users/me", response_model=UserResponse)
def get_me(current_user: User = Depends(get_current_user)):
    """The caller's own user record (provisioned on first request)"""
    return user_to_dict(current_user)


@router.get("/users/profile/{user_id}", response_model=ProfileResponse)
def get_profile(user_id: int, current_user: User = Depends(get_current_user), session: Session = Depends(get_session)):
    try:
        return user_service.get_profile(session, user_id)
    except SpearoError as e:
        raise to_http_exception(e)
    except Exception:
        raise unclassified_failure(session, "loading profile")


@router.get("/users/profile/{user_id}/stats", response_model=UserStatsResponse)
def get_user_stats(
    user_id: int, current_user: User = Depends(get_current_user), session: Session = Depends(get_session)
):
    """Session/catch counts plus favourite species and spot"""
    try:
        return user_service.get_user_stats(session, user_id)
    except SpearoError as e:
        raise to_http_exception(e)
    except Exception:
        raise unclassified_failure(session, "computing profile stats")


@router.put("/users/profile/{user_id}", response_model=UserResponse)
def update_profile(
    user_id: int,
    changes: ProfileUpdate,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    try:
        return user_service.update_profile(session, user_id, changes)
    except SpearoError as e:
        raise to_http_exception(e)
    except Exception:
        raise unclassified_failure(session, "updating profile")


@router.post("/users/follow/{user_id}", response_model=MessageResponse)
def follow_user(user_id: int, current_user: User = Depends(get_current_user), session: Session = Depends(get_session)):
    try:
        user_service.follow_user(session, current_user.id, user_id)
    except SpearoError as e:
        raise to_http_exception(e)
    except Exception:
        raise unclassified_failure(session, "following user")
    return {"message": "Successfully followed user"}


@router.post("/users/unfollow/{user_id}", response_model=MessageResponse)
def unfollow_user(
    user_id: int, current_user: User = Depends(get_current_user), session: Session = Depends(get_session)
):
    try:
        user_service.unfollow_user(session, current_user.id, user_id)
    except SpearoError as e:
        raise to_http_exception(e)
    except Exception:
        raise unclassified_failure(session, "unfollowing user")
    return {"message": "Successfully unfollowed user"}
