from __future__ import annotations

import logging
import sqlite3
from contextlib import contextmanager
from datetime import datetime, timezone
from decimal import Decimal
from pathlib import Path
from typing import Iterator

from unigrade.core.models import (
    Category,
    CourseGradeWeights,
    EnrollmentRecord,
    EnrollmentStatus,
    GradableItem,
    QuizAttempt,
    QuizAttemptStatus,
    ScoreRecord,
    SubmissionStatus,
)

logger = logging.getLogger(__name__)

ITEM_TABLES = {
    Category.ASSIGNMENT: "assignments",
    Category.QUIZ: "quizzes",
    Category.EXAM: "exams",
}


class StorageError(Exception):
    pass


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class Storage:
    def __init__(self, db_path: str = "unigrade.db") -> None:
        self.db_path = db_path
        if db_path != ":memory:":
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self.conn = sqlite3.connect(db_path, check_same_thread=False)
        self.conn.row_factory = sqlite3.Row
        self.conn.execute("PRAGMA foreign_keys = ON")
        self._init_schema()

    @classmethod
    def from_settings(cls) -> "Storage":
        from unigrade.config.settings import settings

        return cls(settings.db_path)

    def close(self) -> None:
        self.conn.close()

    @contextmanager
    def _guard(self, action: str) -> Iterator[None]:
        try:
            yield
        except sqlite3.Error as exc:
            logger.error(f"Storage failure while trying to {action}: {exc}")
            raise StorageError(f"Failed to {action}: {exc}") from exc

    def _init_schema(self) -> None:
        with self._guard("initialise the schema"):
            self.conn.executescript(
                """
                CREATE TABLE IF NOT EXISTS users (
                  id INTEGER PRIMARY KEY AUTOINCREMENT,
                  username TEXT UNIQUE NOT NULL,
                  role TEXT NOT NULL DEFAULT 'STUDENT'
                );

                CREATE TABLE IF NOT EXISTS courses (
                  id INTEGER PRIMARY KEY AUTOINCREMENT,
                  code TEXT UNIQUE NOT NULL,
                  name TEXT NOT NULL,
                  credits INTEGER NOT NULL,
                  semester TEXT NOT NULL
                );

                CREATE TABLE IF NOT EXISTS enrollments (
                  id INTEGER PRIMARY KEY AUTOINCREMENT,
                  course_id INTEGER NOT NULL,
                  student_id INTEGER NOT NULL,
                  status TEXT NOT NULL DEFAULT 'ENROLLED',
                  grade TEXT,
                  UNIQUE(course_id, student_id),
                  FOREIGN KEY(course_id) REFERENCES courses(id) ON DELETE CASCADE,
                  FOREIGN KEY(student_id) REFERENCES users(id) ON DELETE CASCADE
                );

                CREATE TABLE IF NOT EXISTS course_grade_weights (
                  course_id INTEGER PRIMARY KEY,
                  assignments_weight TEXT NOT NULL,
                  quizzes_weight TEXT NOT NULL,
                  exams_weight TEXT NOT NULL,
                  updated_at TEXT NOT NULL,
                  FOREIGN KEY(course_id) REFERENCES courses(id) ON DELETE CASCADE
                );

                CREATE TABLE IF NOT EXISTS assignments (
                  id INTEGER PRIMARY KEY AUTOINCREMENT,
                  course_id INTEGER NOT NULL,
                  title TEXT NOT NULL,
                  total_points REAL NOT NULL,
                  FOREIGN KEY(course_id) REFERENCES courses(id) ON DELETE CASCADE
                );

                CREATE TABLE IF NOT EXISTS assignment_submissions (
                  id INTEGER PRIMARY KEY AUTOINCREMENT,
                  assignment_id INTEGER NOT NULL,
                  student_id INTEGER NOT NULL,
                  score REAL,
                  feedback TEXT,
                  status TEXT NOT NULL,
                  submitted_at TEXT NOT NULL,
                  graded_at TEXT,
                  UNIQUE(assignment_id, student_id),
                  FOREIGN KEY(assignment_id) REFERENCES assignments(id) ON DELETE CASCADE,
                  FOREIGN KEY(student_id) REFERENCES users(id) ON DELETE CASCADE
                );

                CREATE TABLE IF NOT EXISTS quizzes (
                  id INTEGER PRIMARY KEY AUTOINCREMENT,
                  course_id INTEGER NOT NULL,
                  title TEXT NOT NULL,
                  total_points REAL NOT NULL,
                  FOREIGN KEY(course_id) REFERENCES courses(id) ON DELETE CASCADE
                );

                CREATE TABLE IF NOT EXISTS quiz_attempts (
                  id INTEGER PRIMARY KEY AUTOINCREMENT,
                  quiz_id INTEGER NOT NULL,
                  student_id INTEGER NOT NULL,
                  attempt_number INTEGER NOT NULL,
                  score REAL,
                  status TEXT NOT NULL,
                  started_at TEXT NOT NULL,
                  UNIQUE(quiz_id, student_id, attempt_number),
                  FOREIGN KEY(quiz_id) REFERENCES quizzes(id) ON DELETE CASCADE,
                  FOREIGN KEY(student_id) REFERENCES users(id) ON DELETE CASCADE
                );

                CREATE TABLE IF NOT EXISTS exams (
                  id INTEGER PRIMARY KEY AUTOINCREMENT,
                  course_id INTEGER NOT NULL,
                  title TEXT NOT NULL,
                  total_points REAL NOT NULL,
                  FOREIGN KEY(course_id) REFERENCES courses(id) ON DELETE CASCADE
                );

                CREATE TABLE IF NOT EXISTS exam_grades (
                  id INTEGER PRIMARY KEY AUTOINCREMENT,
                  exam_id INTEGER NOT NULL,
                  student_id INTEGER NOT NULL,
                  points_earned REAL,
                  comments TEXT,
                  graded_at TEXT NOT NULL,
                  UNIQUE(exam_id, student_id),
                  FOREIGN KEY(exam_id) REFERENCES exams(id) ON DELETE CASCADE,
                  FOREIGN KEY(student_id) REFERENCES users(id) ON DELETE CASCADE
                );
                """
            )
            self.conn.commit()

    # people and courses

    def create_user(self, username: str, role: str = "STUDENT") -> int:
        with self._guard("create user"):
            cur = self.conn.execute(
                "INSERT INTO users(username, role) VALUES(?, ?)",
                (username.strip(), role.upper()),
            )
            self.conn.commit()
            return int(cur.lastrowid)

    def get_user_by_username(self, username: str) -> sqlite3.Row | None:
        with self._guard("load user"):
            cur = self.conn.execute("SELECT * FROM users WHERE username=?", (username.strip(),))
            return cur.fetchone()

    def get_user(self, user_id: int) -> sqlite3.Row | None:
        with self._guard("load user"):
            cur = self.conn.execute("SELECT * FROM users WHERE id=?", (user_id,))
            return cur.fetchone()

    def list_students(self) -> list[sqlite3.Row]:
        with self._guard("list students"):
            cur = self.conn.execute("SELECT * FROM users WHERE role='STUDENT' ORDER BY username")
            return list(cur.fetchall())

    def create_course(self, code: str, name: str, credits: int, semester: str) -> int:
        with self._guard("create course"):
            cur = self.conn.execute(
                "INSERT INTO courses(code, name, credits, semester) VALUES(?,?,?,?)",
                (code.strip(), name.strip(), credits, semester.strip()),
            )
            self.conn.commit()
            return int(cur.lastrowid)

    def list_courses(self) -> list[sqlite3.Row]:
        with self._guard("list courses"):
            cur = self.conn.execute("SELECT * FROM courses ORDER BY semester DESC, code")
            return list(cur.fetchall())

    # enrollments

    def enroll(self, course_id: int, student_id: int, status: EnrollmentStatus = EnrollmentStatus.ENROLLED) -> int:
        with self._guard("enroll student"):
            cur = self.conn.execute(
                "INSERT INTO enrollments(course_id, student_id, status) VALUES(?,?,?)",
                (course_id, student_id, status.value),
            )
            self.conn.commit()
            return int(cur.lastrowid)

    def set_enrollment_status(self, enrollment_id: int, status: EnrollmentStatus) -> bool:
        with self._guard("update enrollment status"):
            cur = self.conn.execute(
                "UPDATE enrollments SET status=? WHERE id=?",
                (status.value, enrollment_id),
            )
            self.conn.commit()
            return cur.rowcount > 0

    def update_enrollment_grade(self, enrollment_id: int, grade: str | None) -> bool:
        with self._guard("update enrollment grade"):
            cur = self.conn.execute(
                "UPDATE enrollments SET grade=? WHERE id=?",
                (grade, enrollment_id),
            )
            self.conn.commit()
            return cur.rowcount > 0

    def get_enrollment(self, enrollment_id: int) -> sqlite3.Row | None:
        with self._guard("load enrollment"):
            cur = self.conn.execute("SELECT * FROM enrollments WHERE id=?", (enrollment_id,))
            return cur.fetchone()

    def list_course_enrollments(
        self,
        course_id: int,
        status: EnrollmentStatus | None = EnrollmentStatus.ENROLLED,
    ) -> list[sqlite3.Row]:
        sql = """SELECT e.id AS enrollment_id, e.student_id, e.grade, e.status, u.username
                 FROM enrollments e JOIN users u ON u.id=e.student_id
                 WHERE e.course_id=?"""
        params: tuple = (course_id,)
        if status is not None:
            sql += " AND e.status=?"
            params = (course_id, status.value)
        with self._guard("list course enrollments"):
            cur = self.conn.execute(sql + " ORDER BY u.username", params)
            return list(cur.fetchall())

    def list_student_courses(self, student_id: int) -> list[sqlite3.Row]:
        with self._guard("list student courses"):
            cur = self.conn.execute(
                """SELECT c.*, e.id AS enrollment_id, e.status, e.grade
                   FROM enrollments e JOIN courses c ON c.id=e.course_id
                   WHERE e.student_id=?
                   ORDER BY c.semester DESC, c.code""",
                (student_id,),
            )
            return list(cur.fetchall())

    def get_completed_enrollments(self, student_id: int) -> list[EnrollmentRecord]:
        """Every enrollment that has left the ENROLLED state, joined to its course."""
        with self._guard("load student enrollments"):
            cur = self.conn.execute(
                """SELECT e.id, e.grade, e.status, c.code, c.name, c.credits, c.semester
                   FROM enrollments e JOIN courses c ON c.id=e.course_id
                   WHERE e.student_id=? AND e.status != ?
                   ORDER BY c.semester DESC, c.code""",
                (student_id, EnrollmentStatus.ENROLLED.value),
            )
            rows = cur.fetchall()
        return [
            EnrollmentRecord(
                enrollment_id=int(r["id"]),
                course_code=r["code"],
                course_name=r["name"],
                credits=int(r["credits"]),
                grade=r["grade"],
                semester=r["semester"],
                status=EnrollmentStatus(r["status"]),
            )
            for r in rows
        ]

    # grade weights

    def save_grade_weights(self, weights: CourseGradeWeights) -> None:
        with self._guard("save grade weights"):
            self.conn.execute(
                """INSERT INTO course_grade_weights(course_id, assignments_weight, quizzes_weight, exams_weight, updated_at)
                   VALUES(?,?,?,?,?)
                   ON CONFLICT(course_id) DO UPDATE SET
                       assignments_weight=excluded.assignments_weight,
                       quizzes_weight=excluded.quizzes_weight,
                       exams_weight=excluded.exams_weight,
                       updated_at=excluded.updated_at""",
                (
                    weights.course_id,
                    str(weights.assignments_weight),
                    str(weights.quizzes_weight),
                    str(weights.exams_weight),
                    _now(),
                ),
            )
            self.conn.commit()

    def get_grade_weights(self, course_id: int) -> CourseGradeWeights | None:
        with self._guard("load grade weights"):
            cur = self.conn.execute(
                "SELECT * FROM course_grade_weights WHERE course_id=?",
                (course_id,),
            )
            row = cur.fetchone()
        if not row:
            return None
        return CourseGradeWeights(
            course_id=int(row["course_id"]),
            assignments_weight=Decimal(row["assignments_weight"]),
            quizzes_weight=Decimal(row["quizzes_weight"]),
            exams_weight=Decimal(row["exams_weight"]),
        )

    # gradable items

    def add_item(self, category: Category, course_id: int, title: str, total_points: float) -> int:
        table = ITEM_TABLES[category]
        with self._guard(f"add {category.value.lower()}"):
            cur = self.conn.execute(
                f"INSERT INTO {table}(course_id, title, total_points) VALUES(?,?,?)",
                (course_id, title.strip(), total_points),
            )
            self.conn.commit()
            return int(cur.lastrowid)

    def delete_item(self, category: Category, item_id: int) -> None:
        table = ITEM_TABLES[category]
        with self._guard(f"delete {category.value.lower()}"):
            self.conn.execute(f"DELETE FROM {table} WHERE id=?", (item_id,))
            self.conn.commit()

    def list_items(self, course_id: int, category: Category) -> list[GradableItem]:
        table = ITEM_TABLES[category]
        with self._guard(f"list {table}"):
            cur = self.conn.execute(
                f"SELECT id, course_id, title, total_points FROM {table} WHERE course_id=? ORDER BY id",
                (course_id,),
            )
            rows = cur.fetchall()
        return [
            GradableItem(
                id=int(r["id"]),
                course_id=int(r["course_id"]),
                category=category,
                title=r["title"],
                total_points=float(r["total_points"]),
            )
            for r in rows
        ]

    # scores

    def submit_assignment(self, assignment_id: int, student_id: int) -> None:
        with self._guard("record submission"):
            self.conn.execute(
                """INSERT INTO assignment_submissions(assignment_id, student_id, status, submitted_at)
                   VALUES(?,?,?,?)
                   ON CONFLICT(assignment_id, student_id) DO UPDATE SET
                       submitted_at=excluded.submitted_at""",
                (assignment_id, student_id, SubmissionStatus.SUBMITTED.value, _now()),
            )
            self.conn.commit()

    def grade_submission(self, assignment_id: int, student_id: int, score: float, feedback: str | None = None) -> None:
        now = _now()
        with self._guard("grade submission"):
            self.conn.execute(
                """INSERT INTO assignment_submissions(assignment_id, student_id, score, feedback, status, submitted_at, graded_at)
                   VALUES(?,?,?,?,?,?,?)
                   ON CONFLICT(assignment_id, student_id) DO UPDATE SET
                       score=excluded.score,
                       feedback=excluded.feedback,
                       status=excluded.status,
                       graded_at=excluded.graded_at""",
                (assignment_id, student_id, score, feedback, SubmissionStatus.GRADED.value, now, now),
            )
            self.conn.commit()

    def record_exam_grade(self, exam_id: int, student_id: int, points_earned: float | None, comments: str | None = None) -> None:
        with self._guard("record exam grade"):
            self.conn.execute(
                """INSERT INTO exam_grades(exam_id, student_id, points_earned, comments, graded_at)
                   VALUES(?,?,?,?,?)
                   ON CONFLICT(exam_id, student_id) DO UPDATE SET
                       points_earned=excluded.points_earned,
                       comments=excluded.comments,
                       graded_at=excluded.graded_at""",
                (exam_id, student_id, points_earned, comments, _now()),
            )
            self.conn.commit()

    def record_quiz_attempt(
        self,
        quiz_id: int,
        student_id: int,
        score: float | None,
        status: QuizAttemptStatus = QuizAttemptStatus.COMPLETED,
    ) -> int:
        with self._guard("record quiz attempt"):
            cur = self.conn.execute(
                "SELECT COALESCE(MAX(attempt_number), 0) + 1 FROM quiz_attempts WHERE quiz_id=? AND student_id=?",
                (quiz_id, student_id),
            )
            attempt_number = int(cur.fetchone()[0])
            self.conn.execute(
                """INSERT INTO quiz_attempts(quiz_id, student_id, attempt_number, score, status, started_at)
                   VALUES(?,?,?,?,?,?)""",
                (quiz_id, student_id, attempt_number, score, status.value, _now()),
            )
            self.conn.commit()
            return attempt_number

    def get_student_score(self, category: Category, item_id: int, student_id: int) -> ScoreRecord | None:
        if category is Category.ASSIGNMENT:
            sql = """SELECT assignment_id AS item_id, student_id, score AS points_earned, status, feedback
                     FROM assignment_submissions WHERE assignment_id=? AND student_id=?"""
        elif category is Category.EXAM:
            sql = """SELECT exam_id AS item_id, student_id, points_earned, comments AS feedback,
                            CASE WHEN points_earned IS NULL THEN 'SUBMITTED' ELSE 'GRADED' END AS status
                     FROM exam_grades WHERE exam_id=? AND student_id=?"""
        else:
            raise ValueError("Quiz scores are read per attempt; use get_quiz_attempts")

        with self._guard(f"load {category.value.lower()} score"):
            cur = self.conn.execute(sql, (item_id, student_id))
            row = cur.fetchone()
        if not row:
            return None
        earned = row["points_earned"]
        return ScoreRecord(
            item_id=int(row["item_id"]),
            student_id=int(row["student_id"]),
            points_earned=float(earned) if earned is not None else None,
            status=SubmissionStatus(row["status"]),
            feedback=row["feedback"],
        )

    def get_quiz_attempts(self, quiz_id: int, student_id: int) -> list[QuizAttempt]:
        with self._guard("load quiz attempts"):
            cur = self.conn.execute(
                """SELECT quiz_id, student_id, attempt_number, score, status
                   FROM quiz_attempts WHERE quiz_id=? AND student_id=?
                   ORDER BY attempt_number""",
                (quiz_id, student_id),
            )
            rows = cur.fetchall()
        return [
            QuizAttempt(
                quiz_id=int(r["quiz_id"]),
                student_id=int(r["student_id"]),
                attempt_number=int(r["attempt_number"]),
                score=float(r["score"]) if r["score"] is not None else None,
                status=QuizAttemptStatus(r["status"]),
            )
            for r in rows
        ]
