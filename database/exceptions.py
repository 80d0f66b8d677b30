import asyncio
import functools
import logging

import asyncpg

logger = logging.getLogger(__name__)


class DatabaseError(Exception):
    """Base for all database errors."""
    code = "internal"
    retryable = False


class NotFoundError(DatabaseError):
    """Entity not found."""
    code = "not-found"


class DuplicateError(DatabaseError):
    """Unique constraint violation."""
    code = "already-exists"


class IntegrityError(DatabaseError):
    """Foreign key or check constraint violation."""
    code = "failed-precondition"


class PermissionDeniedError(DatabaseError):
    """The caller may not read or change this entity."""
    code = "permission-denied"


class TransientError(DatabaseError):
    """Failures worth retrying with backoff."""
    retryable = True


class ServiceUnavailableError(TransientError):
    code = "unavailable"


class RequestTimeoutError(TransientError):
    code = "timeout"


class RateLimitedError(TransientError):
    code = "resource-exhausted"


def is_retryable(exc: BaseException) -> bool:
    """Only classified transient failures are retried."""
    return isinstance(exc, DatabaseError) and exc.retryable


def translate_error(exc: BaseException) -> DatabaseError:
    """Map a driver/network exception onto the error taxonomy above."""
    if isinstance(exc, DatabaseError):
        return exc
    if isinstance(exc, asyncpg.UniqueViolationError):
        return DuplicateError(str(exc))
    if isinstance(exc, (asyncpg.ForeignKeyViolationError, asyncpg.CheckViolationError,
                        asyncpg.NotNullViolationError)):
        return IntegrityError(str(exc))
    if isinstance(exc, asyncpg.InsufficientPrivilegeError):
        return PermissionDeniedError(str(exc))
    if isinstance(exc, asyncpg.TooManyConnectionsError):
        return RateLimitedError(str(exc))
    if isinstance(exc, (asyncpg.QueryCanceledError, asyncio.TimeoutError)):
        return RequestTimeoutError(str(exc) or "Query timed out")
    if isinstance(exc, (asyncpg.CannotConnectNowError, asyncpg.PostgresConnectionError,
                        asyncpg.InterfaceError, ConnectionError, OSError)):
        return ServiceUnavailableError(str(exc) or "Database unavailable")
    return DatabaseError(str(exc))


def translate_db_errors(func):
    """Decorator for async repository methods: re-raise driver errors as DatabaseError."""

    @functools.wraps(func)
    async def wrapper(*args, **kwargs):
        try:
            return await func(*args, **kwargs)
        except DatabaseError:
            raise
        except (asyncpg.PostgresError, asyncpg.InterfaceError,
                asyncio.TimeoutError, OSError) as e:
            translated = translate_error(e)
            logger.warning("%s failed: %s (%s)", func.__qualname__, type(e).__name__, translated.code)
            raise translated from e

    return wrapper
