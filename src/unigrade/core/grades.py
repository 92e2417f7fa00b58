from __future__ import annotations

from typing import Mapping

from unigrade.core.models import Category, CourseGradeWeights

LETTER_THRESHOLDS: list[tuple[float, str]] = [
    (97, "A+"),
    (93, "A"),
    (89, "A-"),
    (84, "B+"),
    (80, "B"),
    (76, "B-"),
    (73, "C+"),
    (70, "C"),
    (67, "C-"),
    (64, "D+"),
    (60, "D"),
]

LETTER_GRADES: tuple[str, ...] = tuple(letter for _, letter in LETTER_THRESHOLDS) + ("F",)


def letter_grade(percentage: float) -> str:
    # no clamping: out-of-range input falls into the nearest band
    for lower, letter in LETTER_THRESHOLDS:
        if percentage >= lower:
            return letter
    return "F"


def calc_final_percentage(
    weights: CourseGradeWeights | None,
    averages: Mapping[Category, float | None],
) -> float | None:
    """
    Weighted average of the category percentages that have data.

    final = Σ(pct_X * weight_X) / Σ(weight_X), both sums taken only over
    categories with a percentage, so partial grading is scaled up to the
    weight that is actually available instead of being diluted.
    """
    if weights is None:
        return None

    weighted_sum = 0.0
    total_weight = 0.0
    for category in Category:
        pct = averages.get(category)
        if pct is None:
            continue
        weight = float(weights.weight_for(category))
        weighted_sum += pct * weight
        total_weight += weight

    if total_weight == 0:
        return None
    return weighted_sum / total_weight


def evaluate_final(
    weights: CourseGradeWeights | None,
    averages: Mapping[Category, float | None],
) -> tuple[float | None, str | None]:
    pct = calc_final_percentage(weights, averages)
    if pct is None:
        return None, None
    return pct, letter_grade(pct)
