from .stats import (
    compute_user_stats,
    gir_per_round,
    putts_per_round,
    round_summary,
    score_trend,
    score_type_distribution_per_round,
    scoring_by_par,
)
from .visualizations import figure_to_png, plot_course_averages, plot_score_trend

__all__ = [
    "compute_user_stats",
    "round_summary",
    "putts_per_round",
    "gir_per_round",
    "score_trend",
    "scoring_by_par",
    "score_type_distribution_per_round",
    "plot_score_trend",
    "plot_course_averages",
    "figure_to_png",
]
