import flet as ft

from unigrade.services.grading_service import GradingService
from unigrade.state.app_state import AppState


def build_course_grades_view(page: ft.Page, app_state: AppState, grading: GradingService) -> ft.Control:
    student_id = app_state.session.user_id
    course = ft.Dropdown(width=360, label="Course")
    final_text = ft.Text(size=18, weight=ft.FontWeight.BOLD)
    entries = ft.Column(spacing=6)

    def load_courses() -> None:
        if student_id is None:
            return
        rows = grading.store.list_student_courses(student_id)
        course.options = [ft.dropdown.Option(str(r["id"]), f"{r['code']} - {r['name']}") for r in rows]

    def refresh() -> None:
        entries.controls.clear()
        if student_id is None or not course.value:
            final_text.value = ""
            return
        course_id = int(course.value)
        for entry in grading.grade_breakdown(course_id, student_id):
            pct = f"{entry.percentage:.1f}%" if entry.percentage is not None else "N/A"
            earned = "-" if entry.points_earned is None else f"{entry.points_earned:g}"
            line = f"{entry.category.value.title()}: {entry.title}  {earned}/{entry.total_points:g}  ({pct})"
            if entry.feedback:
                line += f"  {entry.feedback}"
            entries.controls.append(ft.Text(line))
        if not entries.controls:
            entries.controls.append(ft.Text("No graded work yet."))

        final = grading.compute_final_grade(course_id, student_id)
        if final is None:
            final_text.value = "Running grade: N/A"
        else:
            final_text.value = f"Running grade: {final:.1f}% ({grading.compute_letter_grade(final)})"

    def on_course_change(_):
        refresh()
        page.update()

    course.on_change = on_course_change
    load_courses()

    return ft.Column(
        scroll=ft.ScrollMode.AUTO,
        controls=[
            ft.Text("My Course Grades", size=22, weight=ft.FontWeight.BOLD),
            course,
            final_text,
            ft.Divider(),
            entries,
        ],
    )
