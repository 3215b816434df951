from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import JSON
from sqlmodel import Column, Field, SQLModel


class DiveSession(SQLModel, table=True):
    """One logged spearfishing outing."""

    __tablename__ = "dive_session"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", index=True)  # owner, never reassigned
    date: datetime = Field(index=True)

    # {"name": str, "coordinates": {"lat": float, "lng": float}}
    location: Optional[Dict[str, Any]] = Field(default=None, sa_column=Column(JSON, nullable=True))
    # [{"species": str, "size": cm, "weight": kg, "photo": url}]
    catches: List[Dict[str, Any]] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    # {"visibility": 1-5, "water_temp": C, "tide": low|rising|high|falling, "weather": str}
    conditions: Optional[Dict[str, Any]] = Field(default=None, sa_column=Column(JSON, nullable=True))
    notes: Optional[str] = None

    likes: List[int] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    # Append-only: [{"user": user_id, "text": str, "created_at": iso8601}]
    comments: List[Dict[str, Any]] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow, sa_column_kwargs={"onupdate": datetime.utcnow})
