"""Round API endpoints."""

from datetime import date, time
from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import Field
from typing import List, Optional
from database.db_manager import DatabaseManager
from api.dependencies import get_db
from api.schemas import (
    HoleScoreDetail,
    RoundDetailResponse,
    RoundListResponse,
    RoundSummaryResponse,
)
from analytics import round_summary
from entry.steps import CourseId, ParticipantsForm, ScoresForm
from models import Round, RoundFilters
from config.settings import get_config

_cfg = get_config()

router = APIRouter()


class RoundWriteRequest(ParticipantsForm, ScoresForm):
    """A whole round as submitted by the client; totals are always recomputed.

    Checked like the entry steps: 18 hole scores and 1 to 4 participants.
    """
    course_id: CourseId
    course_name: Optional[str] = None
    play_date: date
    start_time: Optional[time] = None
    weather: Optional[str] = None
    temperature: Optional[float] = None
    wind_speed: Optional[float] = None
    tee_name: Optional[str] = None
    memo: Optional[str] = Field(None, max_length=500)

    def to_round(self, user_id: Optional[str] = None) -> Round:
        round_ = Round(user_id=user_id, is_completed=True, **self.model_dump())
        round_.total_score = round_.calculate_total_score()
        round_.total_par = round_.calculate_total_par()
        return round_


def summarize_round(r: Round) -> RoundSummaryResponse:
    """Project a full Round model into a lightweight summary."""
    return RoundSummaryResponse(**_summary_fields(r))


def _summary_fields(r: Round) -> dict:
    return dict(
        id=r.id,
        course_id=r.course_id,
        course_name=r.course_name or r.course_id,
        play_date=r.play_date,
        tee_name=r.tee_name,
        total_score=r.get_total_score(),
        total_par=r.get_total_par(),
        to_par=r.total_to_par(),
        front_nine=r.calculate_front_nine(),
        back_nine=r.calculate_back_nine(),
        total_putts=r.get_total_putts(),
        total_gir=r.get_total_gir(),
        fairways_hit=r.get_fairways_hit(),
        participant_count=len(r.participants),
        memo=r.memo,
    )


def round_detail(r: Round) -> RoundDetailResponse:
    """Full view: every hole carries its score-to-par label and colour."""
    scores = [
        HoleScoreDetail(
            **s.model_dump(),
            to_par=s.to_par(),
            score_type=s.get_score_type().value,
            label=s.get_score_label(),
            color=s.get_score_color(),
        )
        for s in r.scores
    ]
    return RoundDetailResponse(
        **_summary_fields(r),
        user_id=r.user_id,
        start_time=r.start_time,
        weather=r.weather,
        temperature=r.temperature,
        wind_speed=r.wind_speed,
        front_nine_par=r.front_nine_par(),
        back_nine_par=r.back_nine_par(),
        total_penalties=r.get_total_penalties(),
        is_completed=r.is_completed,
        metrics=round_summary(r),
        scores=scores,
        participants=r.participants,
        created_at=r.created_at,
        updated_at=r.updated_at,
    )


@router.get("/user/{user_id}", response_model=RoundListResponse)
async def list_rounds_for_user(
    user_id: str,
    page: int = Query(1, ge=1),
    limit: int = Query(_cfg.ROUNDS_PAGE_SIZE, ge=1, le=_cfg.ROUNDS_MAX_PAGE_SIZE),
    date_from: Optional[date] = Query(None, alias="from"),
    date_to: Optional[date] = Query(None, alias="to"),
    course_id: Optional[str] = Query(None),
    db: DatabaseManager = Depends(get_db),
):
    """Rounds newest first, with a pagination envelope."""
    filters = RoundFilters(
        page=page, limit=limit, date_from=date_from, date_to=date_to, course_id=course_id
    )
    result = await db.call(lambda: db.rounds.list_rounds(user_id, filters))
    return RoundListResponse(
        items=[summarize_round(r) for r in result.items],
        pagination=result.pagination,
    )


@router.get("/user/{user_id}/recent", response_model=List[RoundSummaryResponse])
async def recent_rounds_for_user(
    user_id: str,
    count: int = Query(5, ge=1, le=20),
    db: DatabaseManager = Depends(get_db),
):
    rounds = await db.call(lambda: db.rounds.get_recent_rounds(user_id, count))
    return [summarize_round(r) for r in rounds]


@router.post("", response_model=RoundDetailResponse, status_code=201)
async def create_round(
    req: RoundWriteRequest,
    user_id: str = Query(..., description="Owner of the new round"),
    db: DatabaseManager = Depends(get_db),
):
    created = await db.call(lambda: db.create_round(req.to_round(user_id), user_id=user_id))
    return round_detail(created)


@router.get("/{round_id}", response_model=RoundDetailResponse)
async def get_round(round_id: str, db: DatabaseManager = Depends(get_db)):
    round_ = await db.call(lambda: db.rounds.get_round(round_id))
    if not round_:
        raise HTTPException(404, "Round not found")
    return round_detail(round_)


@router.put("/{round_id}", response_model=RoundDetailResponse)
async def update_round(
    round_id: str,
    req: RoundWriteRequest,
    db: DatabaseManager = Depends(get_db),
):
    """Replace a round as a whole. Last write wins."""
    updated = await db.call(lambda: db.update_round(round_id, req.to_round()))
    if not updated:
        raise HTTPException(404, "Round not found")
    return round_detail(updated)


@router.delete("/{round_id}", status_code=204)
async def delete_round(round_id: str, db: DatabaseManager = Depends(get_db)):
    deleted = await db.call(lambda: db.delete_round(round_id))
    if not deleted:
        raise HTTPException(404, "Round not found")
