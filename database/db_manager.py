"""Facade bundling the repositories that share one connection pool."""

import logging
from typing import Awaitable, Callable, Optional, TypeVar

import asyncpg

from models import Round
from database.exceptions import DatabaseError
from database.repositories import (
    CourseRepositoryDB,
    RoundRepositoryDB,
    StatsRepositoryDB,
    UserRepositoryDB,
)
from database.retry import RetryPolicy, with_retry

logger = logging.getLogger(__name__)

T = TypeVar("T")


class DatabaseManager:
    """
    Data-access entry point handed to the API layer.

    Notes:
    - Repositories use raw SQL (no ORM) to keep behavior explicit.
    - `call()` is the request layer: it applies the retry policy to one
      repository operation.
    - Round writes go through this class so the owner's cached stats are
      rebuilt afterwards.
    """

    def __init__(self, pool: asyncpg.Pool, retry_policy: Optional[RetryPolicy] = None) -> None:
        self.pool = pool
        self.retry_policy = retry_policy or RetryPolicy()
        self.courses = CourseRepositoryDB(pool)
        self.users = UserRepositoryDB(pool)
        self.rounds = RoundRepositoryDB(pool)
        self.stats = StatsRepositoryDB(pool, self.rounds)

    async def call(self, operation: Callable[[], Awaitable[T]]) -> T:
        """Run a repository coroutine factory under the retry policy."""
        return await with_retry(operation, self.retry_policy)

    async def _refresh_stats(self, user_id: Optional[str]) -> None:
        # Stats are a rebuildable cache; a failed refresh must not undo the write
        if not user_id:
            return
        try:
            await self.stats.refresh_stats(user_id)
        except DatabaseError as e:
            logger.warning("Stats refresh for user %s failed: %s", user_id, e)

    async def create_round(self, round_: Round, user_id: Optional[str] = None) -> Round:
        created = await self.rounds.create_round(round_, user_id=user_id)
        await self._refresh_stats(created.user_id)
        return created

    async def update_round(self, round_id: str, round_: Round) -> Optional[Round]:
        updated = await self.rounds.update_round(round_id, round_)
        if updated:
            await self._refresh_stats(updated.user_id)
        return updated

    async def delete_round(self, round_id: str) -> bool:
        existing = await self.rounds.get_round(round_id)
        if not existing:
            return False
        deleted = await self.rounds.delete_round(round_id)
        if deleted:
            await self._refresh_stats(existing.user_id)
        return deleted
