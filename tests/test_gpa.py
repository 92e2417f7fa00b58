import unittest

from unigrade.core.gpa import build_transcript, calc_gpa, grade_points
from unigrade.core.models import EnrollmentRecord, EnrollmentStatus, TranscriptEntry


def _record(code, credits, grade, semester="Fall 2024", status=EnrollmentStatus.COMPLETED):
    return EnrollmentRecord(
        enrollment_id=1,
        course_code=code,
        course_name=f"Course {code}",
        credits=credits,
        grade=grade,
        semester=semester,
        status=status,
    )


class GPATests(unittest.TestCase):
    def test_weighted_gpa(self):
        entries = [
            TranscriptEntry("CS101", "Intro", 3, "A", "Fall 2024"),
            TranscriptEntry("MA201", "Calculus", 4, "C", "Fall 2024"),
        ]
        gpa, credits = calc_gpa(entries)
        self.assertAlmostEqual(gpa, (3 * 4.0 + 4 * 2.0) / 7)
        self.assertAlmostEqual(gpa, 2.857, places=3)
        self.assertEqual(credits, 7)

    def test_no_credits(self):
        self.assertEqual(calc_gpa([]), (0.0, 0))
        self.assertEqual(calc_gpa([TranscriptEntry("X0", "Seminar", 0, "A", "Fall 2024")]), (0.0, 0))

    def test_grade_point_scale(self):
        self.assertEqual(grade_points("A+"), 4.0)
        self.assertEqual(grade_points("a-"), 3.7)
        self.assertEqual(grade_points(" B+ "), 3.3)
        self.assertEqual(grade_points("D-"), 0.7)
        self.assertEqual(grade_points("F"), 0.0)

    def test_a_plus_points_configurable(self):
        self.assertEqual(grade_points("A+", a_plus_points=4.3), 4.3)
        gpa, _ = calc_gpa([TranscriptEntry("CS1", "Intro", 3, "A+", "Fall 2024")], a_plus_points=4.3)
        self.assertAlmostEqual(gpa, 4.3)

    def test_unknown_grade_counts_as_zero(self):
        with self.assertLogs("unigrade.core.gpa", level="WARNING"):
            self.assertEqual(grade_points("P"), 0.0)


class TranscriptTests(unittest.TestCase):
    def test_only_completed_and_failed_with_grades(self):
        records = [
            _record("CS101", 3, "A"),
            _record("MA201", 4, "C"),
            _record("PH100", 4, "F", status=EnrollmentStatus.FAILED),
            _record("HI300", 3, "A", status=EnrollmentStatus.DROPPED),
            _record("EN110", 3, "B", status=EnrollmentStatus.ENROLLED),
            _record("AR120", 2, "", status=EnrollmentStatus.COMPLETED),
            _record("MU130", 2, None, status=EnrollmentStatus.COMPLETED),
        ]
        entries = build_transcript(records)
        self.assertEqual([e.course_code for e in entries], ["CS101", "MA201", "PH100"])

        gpa, credits = calc_gpa(entries)
        self.assertEqual(credits, 11)
        self.assertAlmostEqual(gpa, (3 * 4.0 + 4 * 2.0 + 4 * 0.0) / 11)

    def test_dropped_course_excluded_from_gpa(self):
        records = [
            _record("CS101", 3, "A"),
            _record("MA201", 4, "C"),
            _record("HI300", 3, "F", status=EnrollmentStatus.DROPPED),
        ]
        gpa, credits = calc_gpa(build_transcript(records))
        self.assertAlmostEqual(gpa, 20 / 7)
        self.assertEqual(credits, 7)

    def test_sorted_by_semester_descending(self):
        records = [
            _record("A1", 3, "A", semester="Fall 2023"),
            _record("B1", 3, "B", semester="Spring 2024"),
            _record("C1", 3, "C", semester="Fall 2024"),
        ]
        semesters = [e.semester for e in build_transcript(records)]
        self.assertEqual(semesters, ["Spring 2024", "Fall 2024", "Fall 2023"])


if __name__ == "__main__":
    unittest.main()
