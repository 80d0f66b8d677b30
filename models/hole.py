from pydantic import Field, field_validator
from typing import Dict, List, Optional

from .base import BaseGolfModel


class CourseHole(BaseGolfModel):
    """Represents a single hole on a golf course."""

    course_id: Optional[str] = None
    number: int = Field(..., ge=1, le=18)
    par: int = Field(4, ge=3, le=5)
    handicap: Optional[int] = Field(None, ge=1, le=18)
    yardage: Dict[str, int] = Field(default_factory=dict)  # {"Regular": 385, "Back": 410}
    description: Optional[str] = None
    hazards: List[str] = Field(default_factory=list)

    @field_validator('yardage')
    @classmethod
    def validate_yardage(cls, v):
        for tee_name, yards in v.items():
            if yards < 0:
                raise ValueError(f"Yardage for tee '{tee_name}' cannot be negative")
            if yards > 700:
                raise ValueError(f"Yardage {yards} for tee '{tee_name}' seems too high. Please verify.")
        return v

    def get_yardage(self, tee_name: str) -> Optional[int]:
        return self.yardage.get(tee_name)
