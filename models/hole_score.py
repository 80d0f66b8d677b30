from pydantic import Field, model_validator
from typing import Optional

from .base import BaseGolfModel
from .score_type import ScoreCategory, classify_to_par, score_color, score_label


class HoleScore(BaseGolfModel):
    """Represents a player's score on a single hole."""

    hole_number: int = Field(..., ge=1, le=18)
    par: int = Field(4, ge=3, le=5)
    strokes: int = Field(..., ge=1, le=20)
    putts: Optional[int] = Field(None, ge=0, le=10)
    fairway_hit: Optional[bool] = None
    green_in_regulation: Optional[bool] = None
    penalties: Optional[int] = Field(None, ge=0, le=10)

    @model_validator(mode='after')
    def validate_score_consistency(self):
        # Putts cannot exceed strokes
        if self.putts is not None and self.putts > self.strokes:
            raise ValueError(f"Putts ({self.putts}) cannot exceed strokes ({self.strokes})")

        # There is no fairway to hit on a par 3
        if self.par == 3 and self.fairway_hit is not None:
            raise ValueError("Fairway hit should be None for par 3 holes")

        return self

    def to_par(self) -> int:
        """Score relative to par (+2, -1, etc.)."""
        return self.strokes - self.par

    def get_score_type(self) -> ScoreCategory:
        return classify_to_par(self.to_par())

    def get_score_label(self) -> str:
        """E / B / P / +1 / +n."""
        return score_label(self.to_par())

    def get_score_color(self) -> str:
        return score_color(self.to_par())
