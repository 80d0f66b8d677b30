"""Conversion between asyncpg database rows and Pydantic domain models.

Centralizes all mapping logic between the normalized DB schema
and the nested Pydantic models.
"""

import json
from typing import Any, Optional
from uuid import UUID

from models import (
    Course,
    CourseHole,
    HoleScore,
    Participant,
    Round,
    TeeRating,
    TeeSet,
    User,
    UserPreferences,
    UserStatsSummary,
)
from database.exceptions import IntegrityError


def _row_id(value: str, field: str) -> UUID:
    """Ids written to a row must be UUIDs; anything else can never satisfy the foreign key."""
    try:
        return UUID(value)
    except (TypeError, ValueError):
        raise IntegrityError(f"{field} {value!r} is not a valid id")


def _load_json(value: Any, default: Any) -> Any:
    """JSONB columns come back as text unless a codec is registered."""
    if value is None:
        return default
    if isinstance(value, str):
        return json.loads(value)
    return value


def _str_or_none(value) -> Optional[str]:
    return str(value) if value is not None else None


def _float_or_none(value) -> Optional[float]:
    return float(value) if value is not None else None


# ================================================================
# Row -> Model (reads)
# ================================================================

def course_hole_from_row(row) -> CourseHole:
    """courses.course_holes row -> CourseHole model."""
    return CourseHole(
        course_id=_str_or_none(row["course_id"]),
        number=row["hole_number"],
        par=row["par"],
        handicap=row["handicap"],
        yardage=_load_json(row["yardage"], {}),
        description=row["description"],
        hazards=_load_json(row["hazards"], []),
    )


def course_from_rows(course_row, hole_rows: list) -> Course:
    """Assemble a full Course from its row and its hole rows."""
    holes = sorted(
        [course_hole_from_row(r) for r in hole_rows],
        key=lambda h: h.number,
    )
    rating = {
        tee_name: TeeRating(**values)
        for tee_name, values in _load_json(course_row["rating"], {}).items()
    }
    return Course(
        id=str(course_row["id"]),
        name=course_row["name"],
        name_kana=course_row["name_kana"],
        address=course_row["address"],
        prefecture=course_row["prefecture"],
        city=course_row["city"],
        postal_code=course_row["postal_code"],
        phone=course_row["phone"],
        website=course_row["website"],
        holes_count=course_row["holes_count"],
        par_total=course_row["par_total"],
        yardage_total=course_row["yardage_total"],
        tees=[TeeSet(**t) for t in _load_json(course_row["tees"], [])],
        rating=rating,
        facilities=_load_json(course_row["facilities"], []),
        is_active=course_row["is_active"],
        holes=holes,
        created_at=course_row["created_at"],
        updated_at=course_row["updated_at"],
    )


def hole_score_from_row(row) -> HoleScore:
    """users.hole_scores row -> HoleScore model."""
    return HoleScore(
        hole_number=row["hole_number"],
        par=row["par"],
        strokes=row["strokes"],
        putts=row["putts"],
        fairway_hit=row["fairway_hit"],
        green_in_regulation=row["green_in_regulation"],
        penalties=row["penalties"],
    )


def participant_from_row(row) -> Participant:
    """users.round_participants row -> Participant model."""
    return Participant(
        user_id=_str_or_none(row["user_id"]),
        name=row["name"],
        type=row["type"],
        handicap=_float_or_none(row["handicap"]),
        total_score=row["total_score"],
    )


def round_from_rows(round_row, score_rows: list, participant_rows: list) -> Round:
    """Assemble a Round from its row plus hole score and participant rows."""
    participants = [
        participant_from_row(r)
        for r in sorted(participant_rows, key=lambda r: r["position"])
    ]
    return Round(
        id=str(round_row["id"]),
        user_id=str(round_row["user_id"]),
        course_id=str(round_row["course_id"]),
        course_name=round_row["course_name"],
        play_date=round_row["play_date"],
        start_time=round_row["start_time"],
        weather=round_row["weather"],
        temperature=_float_or_none(round_row["temperature"]),
        wind_speed=_float_or_none(round_row["wind_speed"]),
        tee_name=round_row["tee_name"],
        total_score=round_row["total_score"],
        total_par=round_row["total_par"],
        scores=[hole_score_from_row(r) for r in score_rows],
        participants=participants,
        memo=round_row["memo"],
        is_completed=round_row["is_completed"],
        created_at=round_row["created_at"],
        updated_at=round_row["updated_at"],
    )


def user_from_row(user_row) -> User:
    """users.users row -> User model."""
    preferences = _load_json(user_row["preferences"], {})
    return User(
        id=str(user_row["id"]),
        email=user_row["email"],
        name=user_row["name"],
        handicap=float(user_row["handicap"]) if user_row["handicap"] is not None else 0,
        avatar=user_row["avatar"],
        preferences=UserPreferences(**preferences),
        created_at=user_row["created_at"],
        updated_at=user_row["updated_at"],
    )


def stats_from_row(row) -> UserStatsSummary:
    """users.user_stats row -> UserStatsSummary (the summary JSONB is the document)."""
    summary = UserStatsSummary.model_validate(_load_json(row["summary"], {}))
    summary.user_id = str(row["user_id"])
    summary.updated_at = row["updated_at"]
    return summary


# ================================================================
# Model -> Row dict (writes)
# ================================================================

def course_to_row(course: Course) -> dict:
    """Course -> dict for courses.courses INSERT."""
    return {
        "name": course.name,
        "name_kana": course.name_kana,
        "address": course.address,
        "prefecture": course.prefecture,
        "city": course.city,
        "postal_code": course.postal_code,
        "phone": course.phone,
        "website": course.website,
        "holes_count": course.holes_count,
        "par_total": course.get_par(),
        "yardage_total": course.yardage_total,
        "tees": json.dumps([t.model_dump() for t in course.tees]),
        "rating": json.dumps({k: v.model_dump() for k, v in course.rating.items()}),
        "facilities": json.dumps(course.facilities),
        "is_active": course.is_active,
    }


def course_hole_to_row(hole: CourseHole, course_id: UUID) -> tuple:
    """CourseHole -> tuple for courses.course_holes INSERT (for executemany)."""
    return (
        course_id, hole.number, hole.par, hole.handicap,
        json.dumps(hole.yardage), hole.description, json.dumps(hole.hazards),
    )


def hole_score_to_row(hs: HoleScore, round_id: UUID) -> tuple:
    """HoleScore -> tuple for users.hole_scores INSERT."""
    return (
        round_id, hs.hole_number, hs.par, hs.strokes, hs.putts,
        hs.fairway_hit, hs.green_in_regulation, hs.penalties,
    )


def participant_to_row(p: Participant, round_id: UUID, position: int) -> tuple:
    """Participant -> tuple for users.round_participants INSERT."""
    return (
        round_id, position,
        _row_id(p.user_id, "user_id") if p.user_id else None,
        p.name, p.type, p.handicap, p.total_score,
    )


def round_to_row(round_: Round, user_id: UUID) -> dict:
    """Round -> dict for users.rounds INSERT/UPDATE. Totals are always recomputed from scores."""
    return {
        "user_id": user_id,
        "course_id": _row_id(round_.course_id, "course_id"),
        "course_name": round_.course_name or round_.course_id,
        "play_date": round_.play_date,
        "start_time": round_.start_time,
        "weather": round_.weather,
        "temperature": round_.temperature,
        "wind_speed": round_.wind_speed,
        "tee_name": round_.tee_name,
        "total_score": round_.calculate_total_score(),
        "total_par": round_.calculate_total_par(),
        "memo": round_.memo,
        "is_completed": round_.is_completed,
    }


def user_to_row(user: User) -> dict:
    """User -> dict for users.users INSERT."""
    return {
        "email": user.email,
        "name": user.name,
        "handicap": user.handicap,
        "avatar": user.avatar,
        "preferences": user.preferences.model_dump_json(),
    }


def stats_to_json(summary: UserStatsSummary) -> str:
    """UserStatsSummary -> JSONB text; user_id/updated_at live in their own columns."""
    return summary.model_dump_json(exclude={"user_id", "updated_at"})
