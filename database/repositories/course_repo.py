"""CRUD operations for the courses schema (courses, course_holes)."""

import logging
from typing import Dict, List, Optional
from uuid import UUID

import asyncpg

from models import Course, CourseHole
from database.converters import (
    course_from_rows,
    course_hole_from_row,
    course_hole_to_row,
    course_to_row,
)
from database.exceptions import translate_db_errors
from database.repositories.round_repo import parse_id

logger = logging.getLogger(__name__)


class CourseRepositoryDB:
    """Async access to course reference data. End users never mutate courses."""

    def __init__(self, pool: asyncpg.Pool):
        self._pool = pool

    # ================================================================
    # Private helpers
    # ================================================================

    async def _assemble_many(self, conn, course_rows) -> List[Course]:
        """Build Course models, batch-loading all holes at once (avoid N+1)."""
        ids = [r["id"] for r in course_rows]
        holes_by_course: Dict[UUID, list] = {}
        if ids:
            hole_rows = await conn.fetch(
                """SELECT * FROM courses.course_holes
                   WHERE course_id = ANY($1::uuid[]) ORDER BY hole_number""",
                ids,
            )
            for hr in hole_rows:
                holes_by_course.setdefault(hr["course_id"], []).append(hr)
        return [course_from_rows(r, holes_by_course.get(r["id"], [])) for r in course_rows]

    # ================================================================
    # Read
    # ================================================================

    @translate_db_errors
    async def get_course(self, course_id: str) -> Optional[Course]:
        """Get a fully-populated Course by ID."""
        async with self._pool.acquire() as conn:
            row = await conn.fetchrow(
                "SELECT * FROM courses.courses WHERE id = $1",
                parse_id(course_id, "Course"),
            )
            if not row:
                return None
            return (await self._assemble_many(conn, [row]))[0]

    @translate_db_errors
    async def list_courses(self, *, limit: int = 100, offset: int = 0) -> List[Course]:
        """Active courses ordered by name."""
        async with self._pool.acquire() as conn:
            rows = await conn.fetch(
                """SELECT * FROM courses.courses
                   WHERE is_active
                   ORDER BY name
                   LIMIT $1 OFFSET $2""",
                limit, offset,
            )
            return await self._assemble_many(conn, rows)

    @translate_db_errors
    async def search_courses(self, term: str, *, limit: int = 20) -> List[Course]:
        """Case-insensitive partial match on the name or its kana reading."""
        async with self._pool.acquire() as conn:
            rows = await conn.fetch(
                """SELECT * FROM courses.courses
                   WHERE is_active AND (name ILIKE $1 OR name_kana ILIKE $1)
                   ORDER BY name
                   LIMIT $2""",
                f"%{term}%", limit,
            )
            return await self._assemble_many(conn, rows)

    @translate_db_errors
    async def find_course_by_name(self, name: str) -> Optional[Course]:
        """Exact case-insensitive lookup, used to skip duplicates when seeding."""
        async with self._pool.acquire() as conn:
            row = await conn.fetchrow(
                "SELECT * FROM courses.courses WHERE LOWER(name) = LOWER($1) LIMIT 1",
                name,
            )
            if not row:
                return None
            return (await self._assemble_many(conn, [row]))[0]

    @translate_db_errors
    async def get_course_holes(self, course_id: str) -> List[CourseHole]:
        async with self._pool.acquire() as conn:
            rows = await conn.fetch(
                """SELECT * FROM courses.course_holes
                   WHERE course_id = $1 ORDER BY hole_number""",
                parse_id(course_id, "Course"),
            )
            return [course_hole_from_row(r) for r in rows]

    # ================================================================
    # Create
    # ================================================================

    @translate_db_errors
    async def create_course(self, course: Course) -> Course:
        """Insert a course and its holes in one transaction (reference-data loading)."""
        data = course_to_row(course)
        async with self._pool.acquire() as conn:
            async with conn.transaction():
                row = await conn.fetchrow(
                    """INSERT INTO courses.courses
                       (name, name_kana, address, prefecture, city, postal_code,
                        phone, website, holes_count, par_total, yardage_total,
                        tees, rating, facilities, is_active)
                       VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10, $11,
                               $12::jsonb, $13::jsonb, $14::jsonb, $15)
                       RETURNING *""",
                    data["name"], data["name_kana"], data["address"],
                    data["prefecture"], data["city"], data["postal_code"],
                    data["phone"], data["website"], data["holes_count"],
                    data["par_total"], data["yardage_total"], data["tees"],
                    data["rating"], data["facilities"], data["is_active"],
                )
                if course.holes:
                    await conn.executemany(
                        """INSERT INTO courses.course_holes
                           (course_id, hole_number, par, handicap, yardage, description, hazards)
                           VALUES ($1, $2, $3, $4, $5::jsonb, $6, $7::jsonb)""",
                        [course_hole_to_row(h, row["id"]) for h in course.holes],
                    )
                created = (await self._assemble_many(conn, [row]))[0]

        logger.info("Created course %s (%s)", created.name, created.id)
        return created
