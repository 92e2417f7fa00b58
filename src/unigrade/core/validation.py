from __future__ import annotations

from decimal import Decimal

from unigrade.core.gpa import GRADE_POINTS
from unigrade.core.models import CourseGradeWeights


class ValidationError(ValueError):
    pass


def validate_weights(weights: CourseGradeWeights | None) -> CourseGradeWeights:
    if weights is None:
        raise ValidationError("Grade weights are required")
    parts = {
        "assignments": weights.assignments_weight,
        "quizzes": weights.quizzes_weight,
        "exams": weights.exams_weight,
    }
    for name, value in parts.items():
        if not value.is_finite():
            raise ValidationError(f"The {name} weight must be a finite number")
        if value < 0:
            raise ValidationError(f"The {name} weight cannot be negative (got {value})")
    if weights.total != Decimal(100):
        raise ValidationError(f"Grade weights must sum to 100% (got {weights.total}%)")
    return weights


def validate_letter(letter: str | None) -> str:
    value = (letter or "").strip().upper()
    if value not in GRADE_POINTS:
        raise ValidationError(f"Unsupported letter grade: {letter!r}")
    return value


def parse_id(value) -> int:
    """Turn an identifier from a text field or query string into an int."""
    text = str(value).strip() if value is not None else ""
    if not text.isdecimal():
        raise ValueError(f"Invalid identifier: {value!r}")
    return int(text)
