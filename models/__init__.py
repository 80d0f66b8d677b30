from .base import BaseGolfModel
from .course import Course, TeeRating, TeeSet
from .hole import CourseHole
from .hole_score import HoleScore
from .participant import Participant
from .round import Round
from .round_query import Pagination, RoundFilters, RoundPage
from .score_type import ScoreCategory
from .stats import (
    CourseStats,
    MonthlyStats,
    RollingWindowStats,
    UserStatsSummary,
    YearStats,
)
from .user import NotificationPreferences, User, UserPreferences

__all__ = [
    "BaseGolfModel",
    "Course",
    "CourseHole",
    "CourseStats",
    "HoleScore",
    "MonthlyStats",
    "NotificationPreferences",
    "Pagination",
    "Participant",
    "RollingWindowStats",
    "Round",
    "RoundFilters",
    "RoundPage",
    "ScoreCategory",
    "TeeRating",
    "TeeSet",
    "User",
    "UserPreferences",
    "UserStatsSummary",
    "YearStats",
]
