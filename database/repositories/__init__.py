from .course_repo import CourseRepositoryDB
from .user_repo import UserRepositoryDB
from .round_repo import RoundRepositoryDB
from .stats_repo import StatsRepositoryDB

__all__ = ["CourseRepositoryDB", "UserRepositoryDB", "RoundRepositoryDB", "StatsRepositoryDB"]
