from datetime import datetime
from pydantic import BaseModel, Field
from typing import Dict, List, Optional


class RollingWindowStats(BaseModel):
    """Average over the N most recent rounds."""
    average_score: float = 0
    improvement: float = 0
    dates: List[str] = Field(default_factory=list)


class YearStats(BaseModel):
    rounds: int = 0
    average_score: float = 0


class CourseStats(BaseModel):
    course_name: Optional[str] = None
    rounds: int = 0
    average_score: float = 0
    best_score: int = 0


class MonthlyStats(BaseModel):
    rounds: int = 0
    average_score: float = 0


class UserStatsSummary(BaseModel):
    """Per-user aggregate. A disposable projection of the user's rounds."""
    user_id: Optional[str] = None
    total_rounds: int = 0
    average_score: float = 0
    best_score: int = 0
    worst_score: int = 0
    current_handicap: float = 0
    last5_rounds: RollingWindowStats = Field(default_factory=RollingWindowStats)
    last10_rounds: RollingWindowStats = Field(default_factory=RollingWindowStats)
    this_year: YearStats = Field(default_factory=YearStats)
    course_stats: Dict[str, CourseStats] = Field(default_factory=dict)
    monthly_stats: Dict[str, MonthlyStats] = Field(default_factory=dict)
    updated_at: Optional[datetime] = None

    @classmethod
    def empty(cls, user_id: Optional[str] = None) -> "UserStatsSummary":
        """Default summary for a user with no rounds yet."""
        return cls(user_id=user_id)
