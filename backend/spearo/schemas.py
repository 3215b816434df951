"""
Request payload schemas

Pydantic models that validate incoming session/profile/comment payloads.
Services accept either these models or plain mappings (validated here).
"""

from datetime import datetime, timezone
from typing import List, Literal, Optional

from pydantic import AliasChoices, BaseModel, Field, field_validator


class Coordinates(BaseModel):
    lat: Optional[float] = None
    lng: Optional[float] = None


class LocationIn(BaseModel):
    name: Optional[str] = None
    coordinates: Optional[Coordinates] = None


class CatchIn(BaseModel):
    species: str
    size: Optional[float] = Field(default=None, description="cm")
    weight: Optional[float] = Field(default=None, description="kg")
    photo: Optional[str] = Field(default=None, description="photo URL")

    @field_validator("species")
    @classmethod
    def validate_species(cls, v):
        if not v or not v.strip():
            raise ValueError("species is required")
        return v.strip()


class ConditionsIn(BaseModel):
    visibility: Optional[float] = Field(default=None, ge=1, le=5, description="1-5 scale")
    water_temp: Optional[float] = Field(
        default=None,
        validation_alias=AliasChoices("water_temp", "waterTemp"),
        description="Celsius",
    )
    tide: Optional[Literal["low", "rising", "high", "falling"]] = None
    weather: Optional[str] = None


class SessionCreate(BaseModel):
    """New session payload. Any caller-supplied owner is ignored."""

    date: datetime
    location: Optional[LocationIn] = None
    catches: List[CatchIn] = Field(default_factory=list)
    conditions: Optional[ConditionsIn] = None
    notes: Optional[str] = None

    @field_validator("date")
    @classmethod
    def normalize_date(cls, v: datetime) -> datetime:
        # Stored as naive UTC so feed ordering compares like with like
        if v.tzinfo is not None:
            return v.astimezone(timezone.utc).replace(tzinfo=None)
        return v


class ProfileUpdate(BaseModel):
    username: Optional[str] = None
    bio: Optional[str] = None
    profile_picture: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("profile_picture", "profilePicture"),
    )


class CommentCreate(BaseModel):
    text: str
