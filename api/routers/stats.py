"""Stats/dashboard API endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Response
from database.db_manager import DatabaseManager
from api.dependencies import get_db
from api.schemas import DashboardResponse
from api.routers.rounds import summarize_round
from analytics import (
    figure_to_png,
    gir_per_round,
    plot_course_averages,
    plot_score_trend,
    putts_per_round,
    score_type_distribution_per_round,
    scoring_by_par,
)
from models import UserStatsSummary

router = APIRouter()

DASHBOARD_RECENT_ROUNDS = 5
TREND_ROUNDS = 20


@router.get("/dashboard/{user_id}", response_model=DashboardResponse)
async def get_dashboard(user_id: str, db: DatabaseManager = Depends(get_db)):
    user = await db.call(lambda: db.users.get_user(user_id))
    if not user:
        raise HTTPException(404, "User not found")

    summary = await db.call(lambda: db.stats.get_stats(user_id))
    all_rounds = await db.call(lambda: db.rounds.get_rounds_for_user(user_id))
    recent = all_rounds[:DASHBOARD_RECENT_ROUNDS]

    putts = [row["total_putts"] for row in putts_per_round(all_rounds) if row["total_putts"] is not None]
    girs = [row["total_gir"] for row in gir_per_round(all_rounds) if row["total_gir"] is not None]

    scored = [r for r in all_rounds if r.get_total_score() is not None]
    best = min(scored, key=lambda r: r.get_total_score()) if scored else None

    return DashboardResponse(
        stats=summary,
        handicap=user.handicap,
        best_round_id=best.id if best else None,
        best_round_course=best.course_name if best else None,
        recent_rounds=[summarize_round(r) for r in recent],
        average_putts=round(sum(putts) / len(putts), 1) if putts else None,
        average_gir=round(sum(girs) / len(girs), 1) if girs else None,
        scoring_by_par=scoring_by_par(all_rounds),
        score_distribution=score_type_distribution_per_round(recent),
    )


@router.get("/{user_id}", response_model=UserStatsSummary)
async def get_stats(user_id: str, db: DatabaseManager = Depends(get_db)):
    """Cached summary, or the empty default when nothing was computed yet."""
    return await db.call(lambda: db.stats.get_stats(user_id))


@router.post("/{user_id}/recalculate", response_model=UserStatsSummary)
async def recalculate_stats(user_id: str, db: DatabaseManager = Depends(get_db)):
    return await db.call(lambda: db.stats.refresh_stats(user_id))


@router.get("/{user_id}/charts/score-trend.png")
async def score_trend_chart(user_id: str, db: DatabaseManager = Depends(get_db)):
    rounds = await db.call(lambda: db.rounds.get_recent_rounds(user_id, TREND_ROUNDS))
    fig, _ = plot_score_trend(rounds)
    return Response(content=figure_to_png(fig), media_type="image/png")


@router.get("/{user_id}/charts/courses.png")
async def course_chart(user_id: str, db: DatabaseManager = Depends(get_db)):
    summary = await db.call(lambda: db.stats.get_stats(user_id))
    fig, _ = plot_course_averages(summary)
    return Response(content=figure_to_png(fig), media_type="image/png")
