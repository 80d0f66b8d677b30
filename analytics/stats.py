from __future__ import annotations

from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Optional, Sequence

from models.round import Round
from models.score_type import ScoreCategory, classify_to_par
from models.stats import (
    CourseStats,
    MonthlyStats,
    RollingWindowStats,
    UserStatsSummary,
    YearStats,
)

SCORE_TYPE_ORDER = [category.value for category in ScoreCategory]

ROLLING_WINDOWS = (5, 10)


def _mean(values: Sequence[int]) -> float:
    return sum(values) / len(values) if values else 0.0


def _rolling_window(scores: Sequence[int], rounds: Sequence[Round], size: int) -> RollingWindowStats:
    """
    Average of the `size` most recent rounds.

    improvement = current window average - previous window average, where the
    previous window is rounds[size:2*size]. Negative means scoring is dropping.
    """
    current = scores[:size]
    previous = scores[size:size * 2]
    average = _mean(current)
    improvement = average - _mean(previous) if previous else 0.0
    return RollingWindowStats(
        average_score=average,
        improvement=improvement,
        dates=[r.play_date.isoformat() for r in rounds[:size]],
    )


def compute_user_stats(
    rounds: Sequence[Round],
    user_id: Optional[str] = None,
    today: Optional[date] = None,
    now: Optional[datetime] = None,
) -> UserStatsSummary:
    """
    Aggregate a user's round history into a UserStatsSummary.

    `rounds` must already be sorted most-recent-first; the order is trusted,
    never re-sorted. Pure: the same rounds always produce the same summary
    (given the same `today` and `now`).
    """
    now = now or datetime.now()
    if not rounds:
        summary = UserStatsSummary.empty(user_id)
        summary.updated_at = now
        return summary

    today = today or date.today()
    scores = [r.get_total_score() or 0 for r in rounds]

    this_year = [s for r, s in zip(rounds, scores) if r.play_date.year == today.year]

    by_course: Dict[str, List[int]] = {}
    course_names: Dict[str, Optional[str]] = {}
    by_month: Dict[str, List[int]] = {}
    for round_obj, score in zip(rounds, scores):
        by_course.setdefault(round_obj.course_id, []).append(score)
        course_names.setdefault(round_obj.course_id, round_obj.course_name)
        by_month.setdefault(round_obj.play_date.strftime("%Y-%m"), []).append(score)

    course_stats = {
        course_id: CourseStats(
            course_name=course_names[course_id],
            rounds=len(values),
            average_score=_mean(values),
            best_score=min(values),
        )
        for course_id, values in by_course.items()
    }
    monthly_stats = {
        month: MonthlyStats(rounds=len(values), average_score=_mean(values))
        for month, values in by_month.items()
    }

    last5, last10 = (_rolling_window(scores, rounds, n) for n in ROLLING_WINDOWS)

    return UserStatsSummary(
        user_id=user_id,
        total_rounds=len(rounds),
        average_score=_mean(scores),
        best_score=min(scores),
        worst_score=max(scores),
        # Handicap index computation is not supported
        current_handicap=0,
        last5_rounds=last5,
        last10_rounds=last10,
        this_year=YearStats(rounds=len(this_year), average_score=_mean(this_year)),
        course_stats=course_stats,
        monthly_stats=monthly_stats,
        updated_at=now,
    )


def round_summary(round_obj: Round) -> Dict[str, Optional[float]]:
    """Compute summary metrics for a single round."""
    holes_played = len(round_obj.scores)
    total_putts = round_obj.get_total_putts()
    total_gir = round_obj.get_total_gir()
    total_strokes = round_obj.get_total_score()
    fairways_hit = round_obj.get_fairways_hit()
    fairway_chances = round_obj.get_fairway_opportunities()

    gir_percentage: Optional[float] = None
    putts_per_hole: Optional[float] = None
    fairway_percentage: Optional[float] = None
    if holes_played:
        gir_percentage = (total_gir / holes_played) * 100 if total_gir is not None else None
        putts_per_hole = total_putts / holes_played if total_putts is not None else None
    if fairway_chances and fairways_hit is not None:
        fairway_percentage = fairways_hit / fairway_chances * 100

    return {
        "holes_played": float(holes_played),
        "total_strokes": float(total_strokes) if total_strokes is not None else None,
        "to_par": round_obj.total_to_par(),
        "front_nine": round_obj.calculate_front_nine(),
        "back_nine": round_obj.calculate_back_nine(),
        "total_putts": float(total_putts) if total_putts is not None else None,
        "total_gir": float(total_gir) if total_gir is not None else None,
        "gir_percentage": gir_percentage,
        "putts_per_hole": putts_per_hole,
        "fairway_percentage": fairway_percentage,
        "total_penalties": round_obj.get_total_penalties(),
    }


def putts_per_round(rounds: Iterable[Round]) -> List[Dict[str, Any]]:
    """Return putt totals by round for plotting/reporting."""
    results: List[Dict[str, Any]] = []
    for index, round_obj in enumerate(rounds, start=1):
        results.append(
            {
                "round_index": index,
                "round_id": round_obj.id,
                "total_putts": round_obj.get_total_putts(),
                "holes_played": len(round_obj.scores),
            }
        )
    return results


def score_trend(rounds: Iterable[Round]) -> List[Dict[str, Any]]:
    """Return total score trend data by round."""
    results: List[Dict[str, Any]] = []
    for index, round_obj in enumerate(rounds, start=1):
        results.append(
            {
                "round_index": index,
                "round_id": round_obj.id,
                "play_date": round_obj.play_date.isoformat(),
                "total_score": round_obj.get_total_score(),
                "to_par": round_obj.total_to_par(),
            }
        )
    return results


def gir_per_round(rounds: Iterable[Round]) -> List[Dict[str, Any]]:
    """Return GIR totals and percentage by round."""
    results: List[Dict[str, Any]] = []
    for index, round_obj in enumerate(rounds, start=1):
        holes_played = len(round_obj.scores)
        total_gir = round_obj.get_total_gir()
        gir_percentage: Optional[float] = None
        if holes_played and total_gir is not None:
            gir_percentage = (total_gir / holes_played) * 100

        results.append(
            {
                "round_index": index,
                "round_id": round_obj.id,
                "total_gir": total_gir,
                "holes_played": holes_played,
                "gir_percentage": gir_percentage,
            }
        )
    return results


def scoring_by_par(rounds: Iterable[Round]) -> List[Dict[str, Any]]:
    """
    Aggregate scoring performance by hole par (3, 4, 5).

    Output rows:
    - par: 3, 4, or 5
    - average_to_par: mean(strokes - par)
    - average_strokes: mean(strokes)
    - sample_size: number of holes included
    """
    by_par: Dict[int, List[int]] = {}
    for round_obj in rounds:
        for hole_score in round_obj.scores:
            by_par.setdefault(hole_score.par, []).append(hole_score.strokes)

    results: List[Dict[str, Any]] = []
    for par in sorted(by_par):
        strokes = by_par[par]
        avg_strokes = sum(strokes) / len(strokes)
        results.append(
            {
                "par": par,
                "average_to_par": avg_strokes - par,
                "average_strokes": avg_strokes,
                "sample_size": len(strokes),
            }
        )
    return results


def score_type_distribution_per_round(rounds: Iterable[Round]) -> List[Dict[str, Any]]:
    """
    Percentage of holes in each score-to-par category, per round.

    Categories follow the detail-view buckets: eagle_or_better, birdie, par,
    bogey, double_bogey_or_worse.
    """
    results: List[Dict[str, Any]] = []

    for index, round_obj in enumerate(rounds, start=1):
        counts = {name: 0 for name in SCORE_TYPE_ORDER}
        for hole_score in round_obj.scores:
            counts[classify_to_par(hole_score.to_par()).value] += 1
        total = len(round_obj.scores)

        row: Dict[str, Any] = {
            "round_index": index,
            "round_id": round_obj.id,
            "holes_counted": total,
        }
        for name in SCORE_TYPE_ORDER:
            row[name] = (counts[name] / total * 100.0) if total else 0.0
        results.append(row)

    return results
