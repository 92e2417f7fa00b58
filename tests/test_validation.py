import unittest
from decimal import Decimal

from unigrade.core.models import CourseGradeWeights
from unigrade.core.validation import ValidationError, parse_id, validate_letter, validate_weights


class WeightValidationTests(unittest.TestCase):
    def test_weights_summing_to_100_are_valid(self):
        for parts in [(30, 20, 50), (100, 0, 0), (0, 0, 100), ("33.3", "33.3", "33.4"), (33.3, 33.3, 33.4)]:
            weights = CourseGradeWeights.of(1, *parts)
            self.assertTrue(weights.is_valid(), parts)
            self.assertIs(validate_weights(weights), weights)

    def test_other_sums_are_rejected(self):
        for parts in [(30, 20, 40), (50, 50, 1), (0, 0, 0), ("33.33", "33.33", "33.33")]:
            weights = CourseGradeWeights.of(1, *parts)
            self.assertFalse(weights.is_valid(), parts)
            with self.assertRaises(ValidationError):
                validate_weights(weights)

    def test_negative_weight_rejected_even_when_sum_is_100(self):
        weights = CourseGradeWeights.of(1, 120, -20, 0)
        self.assertFalse(weights.is_valid())
        with self.assertRaisesRegex(ValidationError, "negative"):
            validate_weights(weights)

    def test_non_finite_weight_rejected(self):
        weights = CourseGradeWeights(1, Decimal("NaN"), Decimal(50), Decimal(50))
        self.assertFalse(weights.is_valid())
        with self.assertRaises(ValidationError):
            validate_weights(weights)

    def test_missing_weights(self):
        with self.assertRaises(ValidationError):
            validate_weights(None)

    def test_float_input_keeps_decimal_digits(self):
        weights = CourseGradeWeights.of(4, 33.3, 33.3, 33.4)
        self.assertEqual(weights.assignments_weight, Decimal("33.3"))
        self.assertEqual(weights.total, Decimal("100.0"))


class LetterValidationTests(unittest.TestCase):
    def test_normalizes_letters(self):
        self.assertEqual(validate_letter(" b+ "), "B+")
        self.assertEqual(validate_letter("D-"), "D-")

    def test_rejects_unknown(self):
        for bad in ["", None, "E", "A++", "P"]:
            with self.assertRaises(ValidationError):
                validate_letter(bad)


class ParseIdTests(unittest.TestCase):
    def test_parses_digits(self):
        self.assertEqual(parse_id("42"), 42)
        self.assertEqual(parse_id(" 7 "), 7)
        self.assertEqual(parse_id(3), 3)

    def test_rejects_malformed(self):
        for bad in ["abc", "", None, "-1", "1.5", "12a"]:
            with self.assertRaises(ValueError):
                parse_id(bad)


if __name__ == "__main__":
    unittest.main()
