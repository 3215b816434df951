from spearo.models.dive_session import DiveSession
from spearo.models.user import User

__all__ = [
    "User",
    "DiveSession",
]
