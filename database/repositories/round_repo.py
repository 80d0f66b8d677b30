"""CRUD operations for rounds, hole_scores, and round_participants."""

import logging
from typing import Dict, List, Optional
from uuid import UUID

import asyncpg

from models import Pagination, Round, RoundFilters, RoundPage
from database.converters import (
    hole_score_to_row,
    participant_to_row,
    round_from_rows,
    round_to_row,
)
from database.exceptions import IntegrityError, NotFoundError, translate_db_errors

logger = logging.getLogger(__name__)

_INSERT_SCORES = """INSERT INTO users.hole_scores
    (round_id, hole_number, par, strokes, putts,
     fairway_hit, green_in_regulation, penalties)
    VALUES ($1, $2, $3, $4, $5, $6, $7, $8)"""

_INSERT_PARTICIPANTS = """INSERT INTO users.round_participants
    (round_id, position, user_id, name, type, handicap, total_score)
    VALUES ($1, $2, $3, $4, $5, $6, $7)"""


def parse_id(value: str, entity: str = "Round") -> UUID:
    """Malformed ids can never match a row, so treat them as not found."""
    try:
        return UUID(value)
    except (TypeError, ValueError):
        raise NotFoundError(f"{entity} {value} not found")


class RoundRepositoryDB:
    """Async CRUD for rounds and their child tables."""

    def __init__(self, pool: asyncpg.Pool):
        self._pool = pool

    # ================================================================
    # Private helpers
    # ================================================================

    async def _load_children(self, conn, round_ids: List[UUID]) -> tuple:
        """Batch-load hole scores and participants for several rounds (avoid N+1).

        Returns (scores_by_round, participants_by_round).
        """
        scores_by_round: Dict[UUID, list] = {}
        participants_by_round: Dict[UUID, list] = {}
        if not round_ids:
            return scores_by_round, participants_by_round

        score_rows = await conn.fetch(
            """SELECT * FROM users.hole_scores
               WHERE round_id = ANY($1::uuid[]) ORDER BY hole_number""",
            round_ids,
        )
        for r in score_rows:
            scores_by_round.setdefault(r["round_id"], []).append(r)

        participant_rows = await conn.fetch(
            """SELECT * FROM users.round_participants
               WHERE round_id = ANY($1::uuid[]) ORDER BY position""",
            round_ids,
        )
        for r in participant_rows:
            participants_by_round.setdefault(r["round_id"], []).append(r)

        return scores_by_round, participants_by_round

    async def _assemble_rounds(self, conn, round_rows) -> List[Round]:
        """Build Round models from round rows plus their children."""
        ids = [r["id"] for r in round_rows]
        scores, participants = await self._load_children(conn, ids)
        return [
            round_from_rows(r, scores.get(r["id"], []), participants.get(r["id"], []))
            for r in round_rows
        ]

    async def _insert_children(self, conn, round_id: UUID, round_: Round) -> None:
        if round_.scores:
            await conn.executemany(
                _INSERT_SCORES,
                [hole_score_to_row(hs, round_id) for hs in round_.scores],
            )
        if round_.participants:
            await conn.executemany(
                _INSERT_PARTICIPANTS,
                [participant_to_row(p, round_id, i) for i, p in enumerate(round_.participants)],
            )

    # ================================================================
    # Read
    # ================================================================

    @translate_db_errors
    async def get_round(self, round_id: str) -> Optional[Round]:
        """Get a round with its hole scores and participants."""
        async with self._pool.acquire() as conn:
            row = await conn.fetchrow(
                "SELECT * FROM users.rounds WHERE id = $1", parse_id(round_id)
            )
            if not row:
                return None
            return (await self._assemble_rounds(conn, [row]))[0]

    @translate_db_errors
    async def list_rounds(self, user_id: str, filters: RoundFilters) -> RoundPage:
        """One page of a user's rounds, newest play date first, plus pagination totals."""
        clauses = ["user_id = $1"]
        params: list = [parse_id(user_id, "User")]
        if filters.date_from:
            params.append(filters.date_from)
            clauses.append(f"play_date >= ${len(params)}")
        if filters.date_to:
            params.append(filters.date_to)
            clauses.append(f"play_date <= ${len(params)}")
        if filters.course_id:
            params.append(parse_id(filters.course_id, "Course"))
            clauses.append(f"course_id = ${len(params)}")
        where = " AND ".join(clauses)

        async with self._pool.acquire() as conn:
            total = await conn.fetchval(
                f"SELECT COUNT(*) FROM users.rounds WHERE {where}", *params
            )
            rows = await conn.fetch(
                f"""SELECT * FROM users.rounds WHERE {where}
                    ORDER BY play_date DESC, created_at DESC
                    LIMIT ${len(params) + 1} OFFSET ${len(params) + 2}""",
                *params, filters.limit, filters.offset,
            )
            items = await self._assemble_rounds(conn, rows)

        return RoundPage(items=items, pagination=Pagination.build(filters, total))

    @translate_db_errors
    async def get_rounds_for_user(
        self, user_id: str, *, limit: Optional[int] = None
    ) -> List[Round]:
        """Get a user's rounds ordered by play date DESC (all of them when limit is None)."""
        async with self._pool.acquire() as conn:
            rows = await conn.fetch(
                """SELECT * FROM users.rounds
                   WHERE user_id = $1
                   ORDER BY play_date DESC, created_at DESC
                   LIMIT $2""",
                parse_id(user_id, "User"), limit,
            )
            return await self._assemble_rounds(conn, rows)

    async def get_recent_rounds(self, user_id: str, count: int = 5) -> List[Round]:
        return await self.get_rounds_for_user(user_id, limit=count)

    # ================================================================
    # Create
    # ================================================================

    @translate_db_errors
    async def create_round(self, round_: Round, user_id: Optional[str] = None) -> Round:
        """Create a round with all hole scores and participants in a transaction."""
        owner = user_id or round_.user_id
        if not owner:
            raise IntegrityError("A round must have an owner")

        data = round_to_row(round_, parse_id(owner, "User"))
        async with self._pool.acquire() as conn:
            async with conn.transaction():
                round_row = await conn.fetchrow(
                    """INSERT INTO users.rounds
                       (user_id, course_id, course_name, play_date, start_time,
                        weather, temperature, wind_speed, tee_name,
                        total_score, total_par, memo, is_completed)
                       VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10, $11, $12, $13)
                       RETURNING *""",
                    data["user_id"], data["course_id"], data["course_name"],
                    data["play_date"], data["start_time"],
                    data["weather"], data["temperature"], data["wind_speed"],
                    data["tee_name"], data["total_score"], data["total_par"],
                    data["memo"], data["is_completed"],
                )
                await self._insert_children(conn, round_row["id"], round_)
                # Read back on the same connection, before commit
                created = (await self._assemble_rounds(conn, [round_row]))[0]

        logger.info("Created round %s for user %s (score %s)", created.id, owner, data["total_score"])
        return created

    # ================================================================
    # Update
    # ================================================================

    @translate_db_errors
    async def update_round(self, round_id: str, round_: Round) -> Optional[Round]:
        """Replace a round as a whole: metadata, hole scores and participants.

        Concurrent edits are last-write-wins.
        """
        rid = parse_id(round_id)
        async with self._pool.acquire() as conn:
            async with conn.transaction():
                existing = await conn.fetchrow(
                    "SELECT user_id FROM users.rounds WHERE id = $1", rid
                )
                if not existing:
                    return None
                data = round_to_row(round_, existing["user_id"])
                await conn.execute(
                    """UPDATE users.rounds
                       SET course_id = $2, course_name = $3, play_date = $4,
                           start_time = $5, weather = $6, temperature = $7,
                           wind_speed = $8, tee_name = $9, total_score = $10,
                           total_par = $11, memo = $12, is_completed = $13,
                           updated_at = NOW()
                       WHERE id = $1""",
                    rid, data["course_id"], data["course_name"], data["play_date"],
                    data["start_time"], data["weather"], data["temperature"],
                    data["wind_speed"], data["tee_name"], data["total_score"],
                    data["total_par"], data["memo"], data["is_completed"],
                )
                await conn.execute("DELETE FROM users.hole_scores WHERE round_id = $1", rid)
                await conn.execute("DELETE FROM users.round_participants WHERE round_id = $1", rid)
                await self._insert_children(conn, rid, round_)
                row = await conn.fetchrow("SELECT * FROM users.rounds WHERE id = $1", rid)
                return (await self._assemble_rounds(conn, [row]))[0]

    # ================================================================
    # Delete
    # ================================================================

    @translate_db_errors
    async def delete_round(self, round_id: str) -> bool:
        """Delete round and its children (CASCADE). Returns True if deleted."""
        async with self._pool.acquire() as conn:
            result = await conn.execute(
                "DELETE FROM users.rounds WHERE id = $1", parse_id(round_id)
            )
            return result == "DELETE 1"
