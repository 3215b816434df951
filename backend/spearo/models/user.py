from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import JSON
from sqlmodel import Column, Field, SQLModel


class User(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    auth0_id: str = Field(unique=True, index=True)  # "sub" claim from the identity provider
    username: str = Field(unique=True, index=True)
    email: str = Field(unique=True, index=True)
    profile_picture: str = Field(default="")
    bio: str = Field(default="")

    # Declared for profile display; nothing increments it server-side.
    total_catches: int = Field(default=0)

    # [{"name": str, "coordinates": {"lat": float, "lng": float}}]
    favorite_spots: List[Dict[str, Any]] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))

    # Ordered lists of user ids, treated as sets (dedup on insert)
    followers: List[int] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    following: List[int] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow, sa_column_kwargs={"onupdate": datetime.utcnow})
