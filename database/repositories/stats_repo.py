"""Cached per-user statistics (users.user_stats).

The cache is a disposable projection: it is always rebuilt from the user's
rounds and never updated incrementally.
"""

import logging
from datetime import date
from typing import Optional

import asyncpg

from analytics.stats import compute_user_stats
from models import UserStatsSummary
from database.converters import stats_from_row, stats_to_json
from database.exceptions import translate_db_errors
from database.repositories.round_repo import RoundRepositoryDB, parse_id

logger = logging.getLogger(__name__)


class StatsRepositoryDB:
    """Read, store and rebuild UserStatsSummary documents."""

    def __init__(self, pool: asyncpg.Pool, round_repo: RoundRepositoryDB):
        self._pool = pool
        self._round_repo = round_repo

    @translate_db_errors
    async def get_stats(self, user_id: str) -> UserStatsSummary:
        """Cached summary, or the empty default when none has been computed yet."""
        async with self._pool.acquire() as conn:
            row = await conn.fetchrow(
                "SELECT * FROM users.user_stats WHERE user_id = $1",
                parse_id(user_id, "User"),
            )
        if not row:
            return UserStatsSummary.empty(user_id)
        return stats_from_row(row)

    @translate_db_errors
    async def save_stats(self, summary: UserStatsSummary) -> UserStatsSummary:
        async with self._pool.acquire() as conn:
            row = await conn.fetchrow(
                """INSERT INTO users.user_stats (user_id, summary, updated_at)
                   VALUES ($1, $2::jsonb, NOW())
                   ON CONFLICT (user_id)
                   DO UPDATE SET summary = EXCLUDED.summary, updated_at = NOW()
                   RETURNING *""",
                parse_id(summary.user_id, "User"), stats_to_json(summary),
            )
        return stats_from_row(row)

    async def refresh_stats(
        self, user_id: str, *, today: Optional[date] = None
    ) -> UserStatsSummary:
        """Recompute the user's summary from all of their rounds and cache it."""
        rounds = await self._round_repo.get_rounds_for_user(user_id)
        summary = compute_user_stats(rounds, user_id=user_id, today=today)
        saved = await self.save_stats(summary)
        logger.info("Refreshed stats for user %s (%d rounds)", user_id, summary.total_rounds)
        return saved
