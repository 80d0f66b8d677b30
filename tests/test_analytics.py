from datetime import date, datetime

import matplotlib

matplotlib.use("Agg")

import pytest

from analytics.stats import (
    compute_user_stats,
    gir_per_round,
    putts_per_round,
    round_summary,
    score_trend,
    score_type_distribution_per_round,
    scoring_by_par,
)
from analytics.visualizations import (
    figure_to_png,
    plot_course_averages,
    plot_score_trend,
)
from models.hole_score import HoleScore
from models.round import Round

PARS = [4, 5, 3, 4, 4, 5, 3, 4, 4, 4, 5, 3, 4, 4, 5, 3, 4, 4]
TODAY = date(2024, 6, 15)
NOW = datetime(2024, 6, 15, 12, 0)


def _round(total, play_date, course_id="c1", course_name="Test Golf Club", round_id=None):
    """18-hole round on par-72 holes whose strokes sum to `total`."""
    base, extra = divmod(total, 18)
    strokes = [base + (1 if i < extra else 0) for i in range(18)]
    return Round(
        id=round_id,
        user_id="u1",
        course_id=course_id,
        course_name=course_name,
        play_date=play_date,
        scores=[HoleScore(hole_number=i, strokes=s) for i, s in enumerate(strokes, start=1)],
        total_score=total,
        total_par=72,
        is_completed=True,
    )


def _history():
    """Most-recent-first history across two courses and two years."""
    return [
        _round(80, date(2024, 6, 1), round_id="r1"),
        _round(90, date(2024, 5, 20), course_id="c2", course_name="Sample CC", round_id="r2"),
        _round(85, date(2024, 5, 2), round_id="r3"),
        _round(95, date(2023, 11, 3), course_id="c2", course_name="Sample CC", round_id="r4"),
    ]


# ================================================================
# compute_user_stats
# ================================================================

def test_empty_history_is_all_zero():
    summary = compute_user_stats([], user_id="u1", today=TODAY, now=NOW)

    assert summary.user_id == "u1"
    assert summary.total_rounds == 0
    assert summary.average_score == 0
    assert summary.best_score == 0
    assert summary.worst_score == 0
    assert summary.current_handicap == 0
    assert summary.last5_rounds.average_score == 0
    assert summary.last5_rounds.dates == []
    assert summary.last10_rounds.dates == []
    assert summary.this_year.rounds == 0
    assert summary.course_stats == {}
    assert summary.monthly_stats == {}
    assert summary.updated_at == NOW


def test_overall_stats():
    summary = compute_user_stats(_history(), user_id="u1", today=TODAY, now=NOW)

    assert summary.total_rounds == 4
    assert summary.average_score == pytest.approx(87.5)
    assert summary.best_score == 80
    assert summary.worst_score == 95
    assert summary.best_score <= summary.average_score <= summary.worst_score
    assert summary.current_handicap == 0


def test_average_is_not_rounded():
    rounds = [_round(80, date(2024, 6, 1)), _round(81, date(2024, 5, 1)), _round(81, date(2024, 4, 1))]
    summary = compute_user_stats(rounds, today=TODAY, now=NOW)
    assert summary.average_score == pytest.approx(242 / 3)


def test_this_year_uses_calendar_year():
    summary = compute_user_stats(_history(), today=TODAY, now=NOW)
    assert summary.this_year.rounds == 3
    assert summary.this_year.average_score == pytest.approx(85.0)

    next_year = compute_user_stats(_history(), today=date(2025, 1, 1), now=NOW)
    assert next_year.this_year.rounds == 0
    assert next_year.this_year.average_score == 0


def test_course_stats_grouped_by_course_id():
    rounds = _history()
    summary = compute_user_stats(rounds, today=TODAY, now=NOW)

    assert set(summary.course_stats) == {"c1", "c2"}
    c1 = summary.course_stats["c1"]
    assert c1.course_name == "Test Golf Club"
    assert c1.rounds == 2
    assert c1.average_score == pytest.approx(82.5)
    assert c1.best_score == 80
    assert summary.course_stats["c2"].best_score == 90
    assert sum(c.rounds for c in summary.course_stats.values()) == len(rounds)


def test_monthly_stats():
    summary = compute_user_stats(_history(), today=TODAY, now=NOW)
    assert set(summary.monthly_stats) == {"2024-06", "2024-05", "2023-11"}
    assert summary.monthly_stats["2024-05"].rounds == 2
    assert summary.monthly_stats["2024-05"].average_score == pytest.approx(87.5)


def test_rolling_windows_use_input_order():
    scores = [80, 82, 84, 86, 88, 90, 92, 94, 96, 98, 100, 102]
    rounds = [_round(s, date(2024, 1, 1 + i)) for i, s in enumerate(scores)]
    summary = compute_user_stats(rounds, today=TODAY, now=NOW)

    # First five elements, as given (not re-sorted by date)
    assert summary.last5_rounds.average_score == pytest.approx(84.0)
    assert summary.last5_rounds.dates == [f"2024-01-0{d}" for d in range(1, 6)]
    # Previous five (rounds 6-10) averaged 94
    assert summary.last5_rounds.improvement == pytest.approx(-10.0)

    assert summary.last10_rounds.average_score == pytest.approx(89.0)
    # Only two rounds before the ten-round window: (100 + 102) / 2
    assert summary.last10_rounds.improvement == pytest.approx(89.0 - 101.0)


def test_rolling_window_with_few_rounds():
    rounds = _history()[:3]
    summary = compute_user_stats(rounds, today=TODAY, now=NOW)
    assert summary.last5_rounds.average_score == pytest.approx(85.0)
    assert len(summary.last5_rounds.dates) == 3
    assert summary.last5_rounds.improvement == 0
    assert summary.last10_rounds.average_score == pytest.approx(85.0)


def test_compute_is_reproducible():
    rounds = _history()
    first = compute_user_stats(rounds, user_id="u1", today=TODAY, now=NOW)
    second = compute_user_stats(rounds, user_id="u1", today=TODAY, now=NOW)
    assert first == second


# ================================================================
# Per-round helpers
# ================================================================

def _detailed_round():
    scores = []
    for i, par in enumerate(PARS, start=1):
        scores.append(
            HoleScore(
                hole_number=i,
                par=par,
                strokes=par + (1 if i % 3 == 0 else 0),
                putts=2,
                green_in_regulation=(i % 2 == 0),
                fairway_hit=None if par == 3 else (i % 2 == 1),
            )
        )
    return Round(id="d1", course_id="c1", play_date=date(2024, 6, 1), scores=scores)


def test_round_summary():
    summary = round_summary(_detailed_round())
    assert summary["holes_played"] == 18.0
    assert summary["total_strokes"] == 78.0
    assert summary["to_par"] == 6
    assert summary["total_putts"] == 36.0
    assert summary["total_gir"] == 9.0
    assert summary["gir_percentage"] == pytest.approx(50.0)
    assert summary["putts_per_hole"] == pytest.approx(2.0)
    assert summary["total_penalties"] == 0


def test_putts_and_gir_per_round():
    rounds = [_detailed_round()]
    assert putts_per_round(rounds)[0]["total_putts"] == 36
    gir = gir_per_round(rounds)[0]
    assert gir["total_gir"] == 9
    assert gir["gir_percentage"] == pytest.approx(50.0)


def test_score_trend_rows():
    rows = score_trend(_history())
    assert [row["total_score"] for row in rows] == [80, 90, 85, 95]
    assert rows[0]["to_par"] == 8
    assert rows[0]["play_date"] == "2024-06-01"


def test_scoring_by_par():
    rows = scoring_by_par([_detailed_round()])
    assert [row["par"] for row in rows] == [3, 4, 5]
    assert sum(row["sample_size"] for row in rows) == 18
    for row in rows:
        assert row["average_strokes"] == pytest.approx(row["par"] + row["average_to_par"])


def test_score_type_distribution():
    row = score_type_distribution_per_round([_detailed_round()])[0]
    assert row["holes_counted"] == 18
    assert row["par"] == pytest.approx(12 / 18 * 100)
    assert row["bogey"] == pytest.approx(6 / 18 * 100)
    assert row["birdie"] == 0


# ================================================================
# Charts
# ================================================================

def test_score_trend_chart_renders_png():
    fig, ax = plot_score_trend(_history())
    assert ax.get_title() == "Score Trend"
    png = figure_to_png(fig)
    assert png.startswith(b"\x89PNG")


def test_course_chart_renders_png():
    summary = compute_user_stats(_history(), today=TODAY, now=NOW)
    fig, ax = plot_course_averages(summary)
    assert [t.get_text() for t in ax.get_yticklabels()] == ["Sample CC", "Test Golf Club"]
    assert figure_to_png(fig).startswith(b"\x89PNG")


def test_course_chart_handles_empty_summary():
    fig, _ = plot_course_averages(compute_user_stats([], now=NOW))
    assert figure_to_png(fig).startswith(b"\x89PNG")
