from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum


class Category(Enum):
    ASSIGNMENT = "ASSIGNMENT"
    QUIZ = "QUIZ"
    EXAM = "EXAM"


class SubmissionStatus(Enum):
    SUBMITTED = "SUBMITTED"
    GRADED = "GRADED"


class QuizAttemptStatus(Enum):
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    TIMED_OUT = "TIMED_OUT"


class EnrollmentStatus(Enum):
    ENROLLED = "ENROLLED"
    DROPPED = "DROPPED"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


class GradeState(Enum):
    UNGRADED = "UNGRADED"
    CALCULATED = "CALCULATED"
    OVERRIDDEN = "OVERRIDDEN"


@dataclass(frozen=True)
class CourseGradeWeights:
    course_id: int
    assignments_weight: Decimal
    quizzes_weight: Decimal
    exams_weight: Decimal

    @classmethod
    def of(cls, course_id: int, assignments, quizzes, exams) -> "CourseGradeWeights":
        """Build weights from ints, floats, strings or Decimals.

        Floats go through ``str`` first so 33.3 stays 33.3 instead of its
        binary expansion.
        """
        return cls(course_id, _to_decimal(assignments), _to_decimal(quizzes), _to_decimal(exams))

    @property
    def total(self) -> Decimal:
        return self.assignments_weight + self.quizzes_weight + self.exams_weight

    def weight_for(self, category: Category) -> Decimal:
        if category is Category.ASSIGNMENT:
            return self.assignments_weight
        if category is Category.QUIZ:
            return self.quizzes_weight
        return self.exams_weight

    def is_valid(self) -> bool:
        parts = (self.assignments_weight, self.quizzes_weight, self.exams_weight)
        if any(not p.is_finite() or p < 0 for p in parts):
            return False
        return self.total == Decimal(100)


@dataclass(frozen=True)
class GradableItem:
    id: int
    course_id: int
    category: Category
    title: str
    total_points: float


@dataclass(frozen=True)
class ScoreRecord:
    item_id: int
    student_id: int
    points_earned: float | None
    status: SubmissionStatus
    feedback: str | None = None


@dataclass(frozen=True)
class QuizAttempt:
    quiz_id: int
    student_id: int
    attempt_number: int
    score: float | None
    status: QuizAttemptStatus


@dataclass(frozen=True)
class StudentFinalGrade:
    enrollment_id: int
    student_id: int
    student_name: str
    course_id: int
    calculated_percentage: float | None
    calculated_grade: str | None
    current_grade: str | None

    @property
    def is_overridden(self) -> bool:
        # an empty stored grade means nobody has entered one yet
        return bool(self.current_grade) and self.current_grade != self.calculated_grade

    @property
    def state(self) -> GradeState:
        if self.is_overridden:
            return GradeState.OVERRIDDEN
        if self.calculated_grade is None:
            return GradeState.UNGRADED
        return GradeState.CALCULATED


@dataclass(frozen=True)
class EnrollmentRecord:
    enrollment_id: int
    course_code: str
    course_name: str
    credits: int
    grade: str | None
    semester: str
    status: EnrollmentStatus


@dataclass(frozen=True)
class TranscriptEntry:
    course_code: str
    course_name: str
    credits: int
    grade: str
    semester: str


@dataclass(frozen=True)
class GradeEntry:
    category: Category
    title: str
    points_earned: float | None
    total_points: float
    feedback: str | None = None

    @property
    def percentage(self) -> float | None:
        if self.points_earned is None or self.total_points <= 0:
            return None
        return (self.points_earned / self.total_points) * 100.0


def _to_decimal(value) -> Decimal:
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)
