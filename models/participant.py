from pydantic import Field
from typing import Literal, Optional

from .base import BaseGolfModel


class Participant(BaseGolfModel):
    """A player in a round: a registered user or a named guest."""
    user_id: Optional[str] = None
    name: str = Field(..., min_length=1, max_length=50)
    type: Literal["registered", "guest"] = "guest"
    handicap: Optional[float] = Field(None, ge=-10, le=54)
    total_score: Optional[int] = Field(None, ge=18)
