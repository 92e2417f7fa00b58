from pathlib import Path
import flet as ft

from unigrade.core.validation import parse_id
from unigrade.services.storage import StorageError
from unigrade.services.transcript_service import TranscriptService
from unigrade.state.app_state import AppState


def build_transcript_view(page: ft.Page, app_state: AppState, transcripts: TranscriptService) -> ft.Control:
    session = app_state.session
    student = ft.Dropdown(width=300, label="Student")
    gpa_text = ft.Text(size=18, weight=ft.FontWeight.BOLD)
    credits_text = ft.Text()
    status = ft.Text(color=ft.Colors.RED_400)

    table = ft.DataTable(
        columns=[
            ft.DataColumn(ft.Text("Semester")),
            ft.DataColumn(ft.Text("Code")),
            ft.DataColumn(ft.Text("Course")),
            ft.DataColumn(ft.Text("Credits"), numeric=True),
            ft.DataColumn(ft.Text("Grade")),
        ],
        rows=[],
    )

    def set_status(message: str, is_error: bool = True) -> None:
        status.value = message
        status.color = ft.Colors.RED_400 if is_error else ft.Colors.GREEN_400

    def current_student_id():
        if not session.is_instructor:
            return session.user_id
        return parse_id(student.value) if student.value else None

    def load_transcript() -> None:
        table.rows.clear()
        try:
            student_id = current_student_id()
        except ValueError as exc:
            set_status(str(exc))
            return
        if student_id is None:
            gpa_text.value = ""
            credits_text.value = ""
            return
        t = transcripts.transcript(student_id)
        gpa_text.value = f"Cumulative GPA: {t.gpa:.2f}"
        credits_text.value = f"Total Credits: {t.total_credits}"
        for e in t.entries:
            table.rows.append(
                ft.DataRow(
                    cells=[
                        ft.DataCell(ft.Text(e.semester)),
                        ft.DataCell(ft.Text(e.course_code)),
                        ft.DataCell(ft.Text(e.course_name)),
                        ft.DataCell(ft.Text(str(e.credits))),
                        ft.DataCell(ft.Text(e.grade)),
                    ]
                )
            )
        set_status("No completed courses yet." if not t.entries else "")

    def on_student_change(_):
        try:
            load_transcript()
        except StorageError as exc:
            set_status(str(exc))
        page.update()

    def on_export(_):
        try:
            student_id = current_student_id()
        except ValueError as exc:
            set_status(str(exc))
            page.update()
            return
        if student_id is None:
            set_status("Select a student first.")
            page.update()
            return
        try:
            user = transcripts.store.get_user(student_id)
            name = user["username"] if user else ""
            path = Path("data") / f"transcript_{student_id}.txt"
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(transcripts.export_transcript_text(student_id, name), encoding="utf-8")
            set_status(f"Transcript exported to {path}", is_error=False)
        except (OSError, StorageError) as exc:
            set_status(f"Export failed: {exc}")
        page.update()

    controls = [ft.Text("Transcript", size=22, weight=ft.FontWeight.BOLD)]
    if session.is_instructor:
        student.options = [ft.dropdown.Option(str(s["id"]), s["username"]) for s in transcripts.store.list_students()]
        student.on_change = on_student_change
        controls.append(student)

    load_transcript()

    controls.extend(
        [
            gpa_text,
            credits_text,
            ft.ElevatedButton("Export as Text", on_click=on_export),
            status,
            ft.Divider(),
            table,
        ]
    )
    return ft.Column(scroll=ft.ScrollMode.AUTO, controls=controls)
