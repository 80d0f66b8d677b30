from datetime import datetime
from pydantic import BaseModel, Field
from typing import Literal, Optional

from .base import BaseGolfModel

DEFAULT_TEE = "Regular"


class NotificationPreferences(BaseModel):
    email: bool = True
    push: bool = True


class UserPreferences(BaseModel):
    default_tee: str = Field(DEFAULT_TEE, min_length=1)
    score_display_mode: Literal["stroke", "net"] = "stroke"
    notifications: NotificationPreferences = Field(default_factory=NotificationPreferences)


class User(BaseGolfModel):
    """Represents a golfer. Handicap is stored as entered, never computed."""

    id: Optional[str] = None
    email: str = Field(..., pattern=r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
    name: str = Field(..., min_length=1, max_length=50)
    handicap: float = Field(0, ge=-10, le=54)
    avatar: Optional[str] = None
    preferences: UserPreferences = Field(default_factory=UserPreferences)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
