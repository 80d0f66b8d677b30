from datetime import datetime
from pydantic import BaseModel, Field, field_validator
from typing import Dict, List, Literal, Optional

from .base import BaseGolfModel
from .hole import CourseHole

DEFAULT_HOLE_PAR = 4


class TeeSet(BaseModel):
    """Tee box option at a course."""
    name: str
    color: Optional[str] = None
    gender: Literal["men", "women", "unisex"] = "unisex"


class TeeRating(BaseModel):
    course_rating: float = Field(..., ge=55.0, le=85.0)
    slope_rating: float = Field(..., ge=55, le=155)


class Course(BaseGolfModel):
    """Golf facility with its tee sets, ratings and holes. Read-mostly reference data."""

    id: Optional[str] = None
    name: str
    name_kana: Optional[str] = None
    address: Optional[str] = None
    prefecture: Optional[str] = None
    city: Optional[str] = None
    postal_code: Optional[str] = None
    phone: Optional[str] = None
    website: Optional[str] = None
    holes_count: Literal[18, 27, 36] = 18
    par_total: Optional[int] = Field(None, ge=54, le=80)
    yardage_total: Optional[int] = Field(None, ge=0)
    tees: List[TeeSet] = Field(default_factory=list)
    rating: Dict[str, TeeRating] = Field(default_factory=dict)
    facilities: List[str] = Field(default_factory=list)
    is_active: bool = True
    holes: List[CourseHole] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator('rating')
    @classmethod
    def validate_rated_tees(cls, v, info):
        tee_names = {t.name for t in info.data.get('tees', [])}
        for tee_name in v:
            if tee_names and tee_name not in tee_names:
                raise ValueError(f"Rating given for unknown tee '{tee_name}'")
        return v

    def get_tee(self, name: str) -> Optional[TeeSet]:
        """Get a tee by its name (case-insensitive)."""
        for tee in self.tees:
            if tee.name.lower() == name.lower():
                return tee
        return None

    def get_hole(self, number: int) -> Optional[CourseHole]:
        """Get a hole by its number (1-18)."""
        for hole in self.holes:
            if hole.number == number:
                return hole
        return None

    def get_pars(self) -> List[int]:
        """Par for holes 1-18, falling back to par 4 where the hole is unknown."""
        pars = []
        for number in range(1, 19):
            hole = self.get_hole(number)
            pars.append(hole.par if hole else DEFAULT_HOLE_PAR)
        return pars

    @property
    def front_nine_par(self) -> Optional[int]:
        """Calculate par for holes 1-9."""
        front = [h for h in self.holes if 1 <= h.number <= 9]
        if len(front) != 9:
            return None
        return sum(h.par for h in front)

    @property
    def back_nine_par(self) -> Optional[int]:
        """Calculate par for holes 10-18."""
        back = [h for h in self.holes if 10 <= h.number <= 18]
        if len(back) != 9:
            return None
        return sum(h.par for h in back)

    def get_par(self) -> Optional[int]:
        """Stored par total, or the sum of the hole pars when all 18 are known."""
        if self.par_total is not None:
            return self.par_total
        if self.front_nine_par is None or self.back_nine_par is None:
            return None
        return self.front_nine_par + self.back_nine_par
