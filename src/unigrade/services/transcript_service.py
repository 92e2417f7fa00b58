from __future__ import annotations

from dataclasses import dataclass
from typing import List

from unigrade.core.gpa import build_transcript, calc_gpa
from unigrade.core.models import TranscriptEntry
from unigrade.services.storage import Storage


@dataclass(frozen=True)
class Transcript:
    student_id: int
    entries: List[TranscriptEntry]
    gpa: float
    total_credits: int


class TranscriptService:
    def __init__(self, store: Storage, a_plus_points: float = 4.0) -> None:
        self.store = store
        self.a_plus_points = a_plus_points

    @classmethod
    def from_settings(cls) -> "TranscriptService":
        from unigrade.config.settings import settings

        return cls(Storage.from_settings(), settings.a_plus_points)

    def transcript(self, student_id: int) -> Transcript:
        entries = build_transcript(self.store.get_completed_enrollments(student_id))
        gpa, total_credits = calc_gpa(entries, a_plus_points=self.a_plus_points)
        return Transcript(student_id=student_id, entries=entries, gpa=gpa, total_credits=total_credits)

    def export_transcript_text(self, student_id: int, student_name: str = "") -> str:
        t = self.transcript(student_id)
        lines = [
            "ACADEMIC TRANSCRIPT",
            "===================",
            "",
            f"Student: {student_name}",
            f"Student ID: {student_id}",
            "",
            f"Cumulative GPA: {t.gpa:.2f}",
            f"Total Credits: {t.total_credits}",
            "",
            "COURSE HISTORY",
            "==============",
            "",
            f"{'Semester':<15} {'Code':<12} {'Course Name':<40} {'Credits':<8} {'Grade':<10}",
            "-" * 72,
        ]
        for e in t.entries:
            name = e.course_name if len(e.course_name) <= 40 else e.course_name[:37] + "..."
            lines.append(f"{e.semester:<15} {e.course_code:<12} {name:<40} {e.credits:<8} {e.grade:<10}")
        return "\n".join(lines) + "\n"
