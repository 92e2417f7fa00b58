import unittest
from decimal import Decimal

from unigrade.core.aggregation import best_attempt_score, calc_category_percentage
from unigrade.core.grades import calc_final_percentage, evaluate_final, letter_grade
from unigrade.core.models import Category, CourseGradeWeights, QuizAttempt, QuizAttemptStatus


def _attempt(score, status=QuizAttemptStatus.COMPLETED, number=1):
    return QuizAttempt(quiz_id=1, student_id=7, attempt_number=number, score=score, status=status)


class LetterGradeTests(unittest.TestCase):
    def test_boundaries(self):
        self.assertEqual(letter_grade(92.9), "A-")
        self.assertEqual(letter_grade(93.0), "A")
        self.assertEqual(letter_grade(96.99), "A")
        self.assertEqual(letter_grade(97.0), "A+")

    def test_full_scale(self):
        cases = {
            100: "A+", 89: "A-", 88.99: "B+", 84: "B+", 80: "B", 76: "B-",
            73: "C+", 70: "C", 67: "C-", 64: "D+", 60: "D", 59.99: "F", 0: "F",
        }
        for pct, letter in cases.items():
            self.assertEqual(letter_grade(pct), letter, pct)

    def test_out_of_range_is_not_clamped(self):
        self.assertEqual(letter_grade(-5), "F")
        self.assertEqual(letter_grade(120), "A+")


class CategoryAggregationTests(unittest.TestCase):
    def test_sum_of_points(self):
        pct = calc_category_percentage([(8, 10), (15, 20)])
        self.assertAlmostEqual(pct, 23 / 30 * 100)

    def test_ungraded_items_are_excluded_not_zero(self):
        pct = calc_category_percentage([(9, 10), (None, 90)])
        self.assertAlmostEqual(pct, 90.0)

    def test_nothing_graded_is_undefined(self):
        self.assertIsNone(calc_category_percentage([(None, 10), (None, 20)]))
        self.assertIsNone(calc_category_percentage([]))

    def test_zero_scored_item_counts(self):
        self.assertEqual(calc_category_percentage([(0, 50)]), 0.0)

    def test_best_attempt_takes_maximum(self):
        attempts = [_attempt(40, number=1), _attempt(70, number=2), _attempt(55, number=3)]
        best = best_attempt_score(attempts)
        self.assertEqual(best, 70)
        self.assertEqual(calc_category_percentage([(best, 100)]), 70.0)

    def test_best_attempt_ignores_unfinished_attempts(self):
        attempts = [
            _attempt(90, status=QuizAttemptStatus.IN_PROGRESS),
            _attempt(95, status=QuizAttemptStatus.TIMED_OUT),
            _attempt(None),
            _attempt(30),
        ]
        self.assertEqual(best_attempt_score(attempts), 30)

    def test_no_completed_attempt(self):
        self.assertIsNone(best_attempt_score([_attempt(80, status=QuizAttemptStatus.IN_PROGRESS)]))
        self.assertIsNone(best_attempt_score([]))


class FinalPercentageTests(unittest.TestCase):
    weights = CourseGradeWeights.of(1, 30, 20, 50)

    def test_all_categories(self):
        averages = {Category.ASSIGNMENT: 90.0, Category.QUIZ: 80.0, Category.EXAM: 70.0}
        self.assertAlmostEqual(calc_final_percentage(self.weights, averages), 78.0)

    def test_renormalizes_over_available_categories(self):
        averages = {Category.ASSIGNMENT: 90.0, Category.QUIZ: None, Category.EXAM: 70.0}
        self.assertAlmostEqual(calc_final_percentage(self.weights, averages), (90 * 30 + 70 * 50) / 80)

    def test_single_category_returns_its_percentage(self):
        averages = {Category.ASSIGNMENT: None, Category.QUIZ: 64.5, Category.EXAM: None}
        self.assertAlmostEqual(calc_final_percentage(self.weights, averages), 64.5)

    def test_no_data_is_none_not_zero(self):
        averages = {category: None for category in Category}
        self.assertIsNone(calc_final_percentage(self.weights, averages))

    def test_zero_is_a_real_result(self):
        averages = {Category.ASSIGNMENT: 0.0, Category.QUIZ: None, Category.EXAM: None}
        self.assertEqual(calc_final_percentage(self.weights, averages), 0.0)

    def test_missing_weights(self):
        self.assertIsNone(calc_final_percentage(None, {Category.EXAM: 50.0}))

    def test_only_zero_weight_categories_have_data(self):
        weights = CourseGradeWeights.of(1, 0, 0, 100)
        self.assertIsNone(calc_final_percentage(weights, {Category.ASSIGNMENT: 80.0}))

    def test_decimal_weights(self):
        weights = CourseGradeWeights(1, Decimal("33.3"), Decimal("33.3"), Decimal("33.4"))
        averages = {Category.ASSIGNMENT: 100.0, Category.QUIZ: 0.0, Category.EXAM: 50.0}
        self.assertAlmostEqual(calc_final_percentage(weights, averages), 50.0, places=9)

    def test_no_rounding(self):
        averages = {Category.ASSIGNMENT: 200 / 3, Category.QUIZ: None, Category.EXAM: None}
        result = calc_final_percentage(self.weights, averages)
        self.assertAlmostEqual(result, 200 / 3, places=12)
        self.assertNotEqual(result, round(result, 2))

    def test_evaluate_final(self):
        self.assertEqual(evaluate_final(self.weights, {Category.EXAM: 93.0}), (93.0, "A"))
        self.assertEqual(evaluate_final(self.weights, {}), (None, None))


if __name__ == "__main__":
    unittest.main()
