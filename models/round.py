from datetime import date, datetime, time
from pydantic import Field, field_validator
from typing import List, Optional

from .base import BaseGolfModel
from .hole_score import HoleScore
from .participant import Participant

MAX_PARTICIPANTS = 4
HOLES_PER_ROUND = 18


class Round(BaseGolfModel):
    """One completed round of golf, owned by the user who recorded it."""
    id: Optional[str] = None
    user_id: Optional[str] = None
    course_id: str
    course_name: Optional[str] = None  # denormalized, display only
    play_date: date
    start_time: Optional[time] = None
    weather: Optional[str] = None
    temperature: Optional[float] = Field(None, ge=-20, le=50)
    wind_speed: Optional[float] = Field(None, ge=0, le=100)
    tee_name: Optional[str] = None
    scores: List[HoleScore] = Field(default_factory=list)
    participants: List[Participant] = Field(default_factory=list, max_length=MAX_PARTICIPANTS)
    memo: Optional[str] = Field(None, max_length=500)
    is_completed: bool = False

    # Stored totals - populated at submission, recalculated from scores when absent
    total_score: Optional[int] = None
    total_par: Optional[int] = None

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator('scores')
    @classmethod
    def validate_hole_numbers(cls, v):
        numbers = [s.hole_number for s in v]
        if len(numbers) != len(set(numbers)):
            raise ValueError("Each hole can only be scored once")
        return sorted(v, key=lambda s: s.hole_number)

    def get_total_score(self) -> Optional[int]:
        """Stored total, or calculated from the hole scores."""
        if self.total_score is not None:
            return self.total_score
        return self.calculate_total_score()

    def get_total_par(self) -> Optional[int]:
        if self.total_par is not None:
            return self.total_par
        return self.calculate_total_par()

    def calculate_total_score(self) -> Optional[int]:
        """Calculate total strokes for the round."""
        return sum(s.strokes for s in self.scores) if self.scores else None

    def calculate_total_par(self) -> Optional[int]:
        return sum(s.par for s in self.scores) if self.scores else None

    def calculate_front_nine(self) -> Optional[int]:
        """Calculate total strokes for holes 1-9."""
        front = [s.strokes for s in self.scores if s.hole_number <= 9]
        return sum(front) if front else None

    def calculate_back_nine(self) -> Optional[int]:
        """Calculate total strokes for holes 10-18."""
        back = [s.strokes for s in self.scores if s.hole_number >= 10]
        return sum(back) if back else None

    def front_nine_par(self) -> Optional[int]:
        front = [s.par for s in self.scores if s.hole_number <= 9]
        return sum(front) if front else None

    def back_nine_par(self) -> Optional[int]:
        back = [s.par for s in self.scores if s.hole_number >= 10]
        return sum(back) if back else None

    def total_to_par(self) -> Optional[int]:
        total = self.get_total_score()
        par = self.get_total_par()
        if total is None or par is None:
            return None
        return total - par

    def get_total_putts(self) -> Optional[int]:
        putts = [s.putts for s in self.scores if s.putts is not None]
        return sum(putts) if putts else None

    def get_total_gir(self) -> Optional[int]:
        girs = [s.green_in_regulation for s in self.scores
                if s.green_in_regulation is not None]
        return sum(girs) if girs else None

    def get_fairways_hit(self) -> Optional[int]:
        fairways = [s.fairway_hit for s in self.scores if s.fairway_hit is not None]
        return sum(fairways) if fairways else None

    def get_fairway_opportunities(self) -> int:
        """Holes where a fairway could be hit (everything but par 3s)."""
        return len([s for s in self.scores if s.par != 3])

    def get_total_penalties(self) -> int:
        return sum(s.penalties or 0 for s in self.scores)

    def get_hole_score(self, hole_number: int) -> Optional[HoleScore]:
        for score in self.scores:
            if score.hole_number == hole_number:
                return score
        return None

    def is_complete(self) -> bool:
        """Check if all 18 holes have scores."""
        return len(self.scores) == HOLES_PER_ROUND
