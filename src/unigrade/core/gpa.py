from __future__ import annotations

import logging
from typing import Iterable

from unigrade.core.models import EnrollmentRecord, EnrollmentStatus, TranscriptEntry

logger = logging.getLogger(__name__)

GRADE_POINTS: dict[str, float] = {
    "A+": 4.0,
    "A": 4.0,
    "A-": 3.7,
    "B+": 3.3,
    "B": 3.0,
    "B-": 2.7,
    "C+": 2.3,
    "C": 2.0,
    "C-": 1.7,
    "D+": 1.3,
    "D": 1.0,
    "D-": 0.7,
    "F": 0.0,
}

TRANSCRIPT_STATUSES = (EnrollmentStatus.COMPLETED, EnrollmentStatus.FAILED)


def grade_points(letter: str | None, *, a_plus_points: float = 4.0) -> float:
    grade = (letter or "").strip().upper()
    if grade == "A+":
        return a_plus_points
    try:
        return GRADE_POINTS[grade]
    except KeyError:
        logger.warning(f"Unknown letter grade {letter!r}, counting it as 0.0 points")
        return 0.0


def is_transcript_eligible(record: EnrollmentRecord) -> bool:
    return record.status in TRANSCRIPT_STATUSES and bool((record.grade or "").strip())


def build_transcript(records: Iterable[EnrollmentRecord]) -> list[TranscriptEntry]:
    """Completed/failed graded enrollments, most recent semester first."""
    entries = [
        TranscriptEntry(
            course_code=r.course_code,
            course_name=r.course_name,
            credits=r.credits,
            grade=r.grade.strip(),
            semester=r.semester,
        )
        for r in records
        if is_transcript_eligible(r)
    ]
    # plain string order, e.g. "Spring 2025" > "Fall 2025"
    entries.sort(key=lambda e: e.semester, reverse=True)
    return entries


def calc_gpa(entries: Iterable[TranscriptEntry], *, a_plus_points: float = 4.0) -> tuple[float, int]:
    """
    entries: transcript entries (letter grade + credits)
    GPA = Σ(credits * grade_points) / Σ(credits)
    Returns (gpa, total_credits); no credits gives 0.0.
    """
    weighted_sum = 0.0
    total_credits = 0

    for entry in entries:
        if not entry.grade:
            continue
        weighted_sum += grade_points(entry.grade, a_plus_points=a_plus_points) * entry.credits
        total_credits += entry.credits

    if total_credits == 0:
        return 0.0, 0
    return weighted_sum / total_credits, total_credits
