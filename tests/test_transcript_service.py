import unittest

from unigrade.core.models import EnrollmentStatus
from unigrade.services.storage import Storage
from unigrade.services.transcript_service import TranscriptService


class TranscriptServiceTests(unittest.TestCase):
    def setUp(self):
        self.store = Storage(":memory:")
        self.student = self.store.create_user("alice")
        self.service = TranscriptService(self.store)

    def tearDown(self):
        self.store.close()

    def _take(self, code, name, credits, semester, grade, status=EnrollmentStatus.COMPLETED):
        course = self.store.create_course(code, name, credits, semester)
        enrollment = self.store.enroll(course, self.student, status)
        if grade is not None:
            self.store.update_enrollment_grade(enrollment, grade)
        return enrollment

    def test_transcript_gpa_and_credits(self):
        self._take("CS101", "Intro to Programming", 3, "Fall 2024", "A")
        self._take("MA201", "Calculus II", 4, "Spring 2025", "C")
        self._take("HI300", "World History", 3, "Spring 2025", "B", EnrollmentStatus.DROPPED)
        self._take("EN110", "Composition", 3, "Fall 2025", "A", EnrollmentStatus.ENROLLED)

        t = self.service.transcript(self.student)
        self.assertEqual([e.course_code for e in t.entries], ["MA201", "CS101"])
        self.assertAlmostEqual(t.gpa, 20 / 7)
        self.assertEqual(t.total_credits, 7)

    def test_empty_transcript(self):
        t = self.service.transcript(self.student)
        self.assertEqual(t.entries, [])
        self.assertEqual(t.gpa, 0.0)
        self.assertEqual(t.total_credits, 0)

    def test_failed_course_counts(self):
        self._take("PH100", "Physics", 4, "Fall 2024", "F", EnrollmentStatus.FAILED)
        self._take("CS101", "Intro to Programming", 4, "Fall 2024", "B")
        t = self.service.transcript(self.student)
        self.assertAlmostEqual(t.gpa, 1.5)
        self.assertEqual(t.total_credits, 8)

    def test_a_plus_scale(self):
        self._take("CS101", "Intro to Programming", 3, "Fall 2024", "A+")
        self.assertAlmostEqual(TranscriptService(self.store, a_plus_points=4.3).transcript(self.student).gpa, 4.3)

    def test_text_export(self):
        long_name = "Advanced Topics in Distributed Systems and Cloud Computing"
        self._take("CS501", long_name, 3, "Fall 2024", "A-")
        text = self.service.export_transcript_text(self.student, "alice")

        self.assertIn("Student: alice", text)
        self.assertIn("Cumulative GPA: 3.70", text)
        self.assertIn("Total Credits: 3", text)
        self.assertIn(long_name[:37] + "...", text)
        self.assertNotIn(long_name, text)


if __name__ == "__main__":
    unittest.main()
