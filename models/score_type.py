"""Score-to-par bucketing used by round detail and list views."""

from enum import Enum


class ScoreCategory(str, Enum):
    EAGLE_OR_BETTER = "eagle_or_better"
    BIRDIE = "birdie"
    PAR = "par"
    BOGEY = "bogey"
    DOUBLE_BOGEY_OR_WORSE = "double_bogey_or_worse"


SCORE_COLORS = {
    ScoreCategory.EAGLE_OR_BETTER: "#4caf50",
    ScoreCategory.BIRDIE: "#2196f3",
    ScoreCategory.PAR: "#000000",
    ScoreCategory.BOGEY: "#ff9800",
    ScoreCategory.DOUBLE_BOGEY_OR_WORSE: "#f44336",
}


def classify_to_par(diff: int) -> ScoreCategory:
    """Bucket a strokes-minus-par difference."""
    if diff <= -2:
        return ScoreCategory.EAGLE_OR_BETTER
    if diff == -1:
        return ScoreCategory.BIRDIE
    if diff == 0:
        return ScoreCategory.PAR
    if diff == 1:
        return ScoreCategory.BOGEY
    return ScoreCategory.DOUBLE_BOGEY_OR_WORSE


def score_label(diff: int) -> str:
    """Short label: E, B, P, +1, +2, ..."""
    category = classify_to_par(diff)
    if category is ScoreCategory.EAGLE_OR_BETTER:
        return "E"
    if category is ScoreCategory.BIRDIE:
        return "B"
    if category is ScoreCategory.PAR:
        return "P"
    return f"+{diff}"


def score_color(diff: int) -> str:
    return SCORE_COLORS[classify_to_par(diff)]
