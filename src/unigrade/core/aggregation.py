from __future__ import annotations

from typing import Iterable

from unigrade.core.models import QuizAttempt, QuizAttemptStatus


def calc_category_percentage(components: Iterable[tuple[float | None, float]]) -> float | None:
    """Reduce ``(points_earned, total_points)`` pairs to one percentage.

    Pairs with no earned score are left out of both sums, so an ungraded item
    never counts as zero. Returns None when nothing has been graded or the
    graded items are worth no points at all.
    """
    obtained = 0.0
    maximum = 0.0
    graded = 0
    for earned, possible in components:
        if earned is None:
            continue
        obtained += earned
        maximum += possible
        graded += 1
    if graded == 0 or maximum <= 0:
        return None
    return (obtained / maximum) * 100


def best_attempt_score(attempts: Iterable[QuizAttempt]) -> float | None:
    best: float | None = None
    for attempt in attempts:
        if attempt.status is not QuizAttemptStatus.COMPLETED or attempt.score is None:
            continue
        if best is None or attempt.score > best:
            best = attempt.score
    return best
