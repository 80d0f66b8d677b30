from database.connection import DatabasePool, db
from database.db_manager import DatabaseManager
from database.repositories import (
    CourseRepositoryDB,
    RoundRepositoryDB,
    StatsRepositoryDB,
    UserRepositoryDB,
)
from database.exceptions import (
    DatabaseError,
    DuplicateError,
    IntegrityError,
    NotFoundError,
    PermissionDeniedError,
    RateLimitedError,
    RequestTimeoutError,
    ServiceUnavailableError,
    TransientError,
)
from database.retry import RetryPolicy, with_retry

__all__ = [
    "DatabasePool",
    "db",
    "DatabaseManager",
    "CourseRepositoryDB",
    "UserRepositoryDB",
    "RoundRepositoryDB",
    "StatsRepositoryDB",
    "DatabaseError",
    "NotFoundError",
    "DuplicateError",
    "IntegrityError",
    "PermissionDeniedError",
    "TransientError",
    "ServiceUnavailableError",
    "RequestTimeoutError",
    "RateLimitedError",
    "RetryPolicy",
    "with_retry",
]
