from __future__ import annotations

import io
from typing import Optional, Sequence

from models.round import Round
from models.stats import UserStatsSummary

from .stats import score_trend


def _load_plt():
    try:
        import matplotlib  # type: ignore

        # Charts are rendered server-side; never open a window
        matplotlib.use("Agg")
        import matplotlib.pyplot as plt  # type: ignore
    except ImportError as exc:
        raise RuntimeError(
            "matplotlib is required for visualizations. Install it with: pip install matplotlib"
        ) from exc
    return plt


def _default_labels(rounds: Sequence[Round]) -> list[str]:
    return [round_obj.play_date.strftime("%Y-%m-%d") for round_obj in rounds]


def _apply_sparse_xticks(ax, labels: Sequence[str], max_labels: int = 12) -> None:
    """
    Keep x-axis readable when there are many rounds.

    Shows at most `max_labels` ticks while preserving order.
    """
    count = len(labels)
    if count <= max_labels:
        ax.set_xticks(range(count))
        ax.set_xticklabels(labels, rotation=45, ha="right")
        return

    step = max(1, count // max_labels)
    tick_positions = list(range(0, count, step))
    if tick_positions[-1] != count - 1:
        tick_positions.append(count - 1)

    ax.set_xticks(tick_positions)
    ax.set_xticklabels([labels[i] for i in tick_positions], rotation=45, ha="right")


def plot_score_trend(rounds: Sequence[Round], labels: Optional[Sequence[str]] = None):
    """
    Line chart: total score per round, oldest on the left.

    `rounds` is the most-recent-first history; it is plotted chronologically.
    """
    plt = _load_plt()
    ordered = list(reversed(rounds))
    rows = score_trend(ordered)
    x_labels = list(labels) if labels is not None else _default_labels(ordered)
    values = [row["total_score"] or 0 for row in rows]
    x = list(range(len(x_labels)))

    fig, ax = plt.subplots(figsize=(10, 5))
    ax.plot(x, values, marker="o")
    ax.set_title("Score Trend")
    ax.set_xlabel("Round")
    ax.set_ylabel("Total Score")
    _apply_sparse_xticks(ax, x_labels)
    ax.grid(axis="y", alpha=0.2)
    fig.tight_layout()
    return fig, ax


def plot_course_averages(summary: UserStatsSummary):
    """Horizontal bars: average and best score per course."""
    plt = _load_plt()
    items = sorted(
        summary.course_stats.items(),
        key=lambda item: (item[1].course_name or item[0]).lower(),
    )
    names = [stats.course_name or course_id for course_id, stats in items]
    averages = [stats.average_score for _, stats in items]
    bests = [stats.best_score for _, stats in items]
    y = list(range(len(names)))

    fig, ax = plt.subplots(figsize=(10, max(3, 0.6 * len(names) + 1.5)))
    ax.barh(y, averages, alpha=0.8, label="Average")
    ax.scatter(bests, y, color="black", zorder=3, label="Best")
    ax.set_yticks(y)
    ax.set_yticklabels(names)
    ax.set_title("Scores By Course")
    ax.set_xlabel("Score")
    if names:
        ax.legend(loc="lower right")
    ax.grid(axis="x", alpha=0.2)
    fig.tight_layout()
    return fig, ax


def figure_to_png(fig) -> bytes:
    """Render a figure to PNG bytes and release it."""
    plt = _load_plt()
    buffer = io.BytesIO()
    try:
        fig.savefig(buffer, format="png", dpi=100)
    finally:
        plt.close(fig)
    return buffer.getvalue()
