"""CRUD operations for the users.users table."""

import json
from typing import Optional

import asyncpg

from models import User, UserPreferences
from database.converters import user_from_row, user_to_row
from database.exceptions import DuplicateError, NotFoundError, translate_db_errors
from database.repositories.round_repo import parse_id


class UserRepositoryDB:
    """Async CRUD for users. Users are never hard-deleted in-app."""

    def __init__(self, pool: asyncpg.Pool):
        self._pool = pool

    # ================================================================
    # Read
    # ================================================================

    @translate_db_errors
    async def get_user(self, user_id: str) -> Optional[User]:
        """Get user by ID."""
        async with self._pool.acquire() as conn:
            row = await conn.fetchrow(
                "SELECT * FROM users.users WHERE id = $1", parse_id(user_id, "User")
            )
            return user_from_row(row) if row else None

    @translate_db_errors
    async def get_user_by_email(self, email: str) -> Optional[User]:
        """Get user by email."""
        async with self._pool.acquire() as conn:
            row = await conn.fetchrow(
                "SELECT * FROM users.users WHERE LOWER(email) = LOWER($1)", email
            )
            return user_from_row(row) if row else None

    # ================================================================
    # Create
    # ================================================================

    @translate_db_errors
    async def create_user(self, user: User) -> User:
        """Create a new user at signup. Returns User with DB-generated id."""
        data = user_to_row(user)
        try:
            async with self._pool.acquire() as conn:
                row = await conn.fetchrow(
                    """INSERT INTO users.users (email, name, handicap, avatar, preferences)
                       VALUES ($1, $2, $3, $4, $5::jsonb) RETURNING *""",
                    data["email"], data["name"], data["handicap"],
                    data["avatar"], data["preferences"],
                )
                return user_from_row(row)
        except asyncpg.UniqueViolationError as e:
            raise DuplicateError(f"Email already in use: {e}") from e

    # ================================================================
    # Update
    # ================================================================

    @translate_db_errors
    async def update_user(self, user_id: str, **fields) -> User:
        """Update profile fields (name, handicap, avatar, preferences)."""
        allowed = {"name", "handicap", "avatar", "preferences"}
        updates = {k: v for k, v in fields.items() if k in allowed}
        if not updates:
            user = await self.get_user(user_id)
            if not user:
                raise NotFoundError(f"User {user_id} not found")
            return user

        if "preferences" in updates:
            prefs = updates["preferences"]
            if isinstance(prefs, UserPreferences):
                prefs = prefs.model_dump()
            updates["preferences"] = json.dumps(prefs)

        set_clause = ", ".join(
            f"{k} = ${i + 2}::jsonb" if k == "preferences" else f"{k} = ${i + 2}"
            for i, k in enumerate(updates)
        )
        values = [parse_id(user_id, "User")] + list(updates.values())

        async with self._pool.acquire() as conn:
            row = await conn.fetchrow(
                f"""UPDATE users.users SET {set_clause}, updated_at = NOW()
                    WHERE id = $1 RETURNING *""",
                *values,
            )
            if not row:
                raise NotFoundError(f"User {user_id} not found")
            return user_from_row(row)
