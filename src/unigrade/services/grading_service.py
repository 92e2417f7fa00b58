from __future__ import annotations

import logging
from typing import Dict, List, Mapping, Optional

from unigrade.core.aggregation import best_attempt_score, calc_category_percentage
from unigrade.core.grades import calc_final_percentage, evaluate_final, letter_grade
from unigrade.core.models import (
    Category,
    CourseGradeWeights,
    GradableItem,
    GradeEntry,
    StudentFinalGrade,
)
from unigrade.core.validation import validate_letter, validate_weights
from unigrade.services.storage import Storage

logger = logging.getLogger(__name__)


class EnrollmentNotFoundError(LookupError):
    pass


class GradingService:
    """Final grades for a course, computed fresh from the store on every call."""

    def __init__(self, store: Storage) -> None:
        self.store = store

    @classmethod
    def from_settings(cls) -> "GradingService":
        return cls(Storage.from_settings())

    # weights

    def save_grade_weights(self, weights: CourseGradeWeights) -> bool:
        validate_weights(weights)
        self.store.save_grade_weights(weights)
        logger.info(
            f"Saved grade weights for course {weights.course_id}: "
            f"assignments={weights.assignments_weight}, quizzes={weights.quizzes_weight}, exams={weights.exams_weight}"
        )
        return True

    def get_grade_weights(self, course_id: int) -> Optional[CourseGradeWeights]:
        return self.store.get_grade_weights(course_id)

    # calculation

    def _earned(self, item: GradableItem, student_id: int) -> Optional[float]:
        if item.category is Category.QUIZ:
            return best_attempt_score(self.store.get_quiz_attempts(item.id, student_id))
        record = self.store.get_student_score(item.category, item.id, student_id)
        return record.points_earned if record else None

    def category_average(self, course_id: int, student_id: int, category: Category) -> Optional[float]:
        items = self.store.list_items(course_id, category)
        return calc_category_percentage(
            (self._earned(item, student_id), item.total_points) for item in items
        )

    def category_averages(self, course_id: int, student_id: int) -> Dict[Category, Optional[float]]:
        return {
            category: self.category_average(course_id, student_id, category)
            for category in Category
        }

    def compute_final_grade(self, course_id: int, student_id: int) -> Optional[float]:
        weights = self.store.get_grade_weights(course_id)
        if weights is None:
            logger.warning(f"Course {course_id} has no grade weights configured")
            return None
        averages = self.category_averages(course_id, student_id)
        final = calc_final_percentage(weights, averages)
        logger.debug(f"Course {course_id}, student {student_id}: averages={averages}, final={final}")
        return final

    @staticmethod
    def compute_letter_grade(percentage: float) -> str:
        return letter_grade(percentage)

    def student_final_grades(self, course_id: int) -> List[StudentFinalGrade]:
        weights = self.store.get_grade_weights(course_id)
        if weights is None:
            logger.warning(f"Course {course_id} has no grade weights configured")
        grades: List[StudentFinalGrade] = []
        for row in self.store.list_course_enrollments(course_id):
            student_id = int(row["student_id"])
            averages = self.category_averages(course_id, student_id) if weights is not None else {}
            pct, letter = evaluate_final(weights, averages)
            grades.append(
                StudentFinalGrade(
                    enrollment_id=int(row["enrollment_id"]),
                    student_id=student_id,
                    student_name=row["username"],
                    course_id=course_id,
                    calculated_percentage=pct,
                    calculated_grade=letter,
                    current_grade=row["grade"],
                )
            )
        return grades

    def grade_breakdown(self, course_id: int, student_id: int) -> List[GradeEntry]:
        entries: List[GradeEntry] = []
        for category in Category:
            for item in self.store.list_items(course_id, category):
                feedback = None
                if category is not Category.QUIZ:
                    record = self.store.get_student_score(category, item.id, student_id)
                    earned = record.points_earned if record else None
                    feedback = record.feedback if record else None
                else:
                    earned = self._earned(item, student_id)
                entries.append(
                    GradeEntry(
                        category=category,
                        title=item.title,
                        points_earned=earned,
                        total_points=item.total_points,
                        feedback=feedback,
                    )
                )
        return entries

    # override workflow

    def override_final_grade(self, enrollment_id: int, letter: str) -> str:
        grade = validate_letter(letter)
        if not self.store.update_enrollment_grade(enrollment_id, grade):
            raise EnrollmentNotFoundError(f"Enrollment {enrollment_id} not found")
        logger.info(f"Final grade for enrollment {enrollment_id} set to {grade}")
        return grade

    def publish_calculated_grades(self, course_id: int, overrides: Optional[Mapping[int, str]] = None) -> int:
        """
        Store a final grade on every active enrollment of the course.

        overrides maps enrollment_id -> letter and wins over the calculated
        grade. An override already stored is kept unless overrides names that
        enrollment. Students with neither are left untouched. Returns how many
        enrollments were written.
        """
        overrides = overrides or {}
        saved = 0
        for grade in self.student_final_grades(course_id):
            override = (overrides.get(grade.enrollment_id) or "").strip()
            if override:
                final = validate_letter(override)
            elif grade.is_overridden:
                continue
            else:
                final = grade.calculated_grade
            if not final:
                continue
            if self.store.update_enrollment_grade(grade.enrollment_id, final):
                saved += 1
        logger.info(f"Published {saved} final grades for course {course_id}")
        return saved
