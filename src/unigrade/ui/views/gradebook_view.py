from typing import Dict
import flet as ft

from unigrade.core.grades import LETTER_GRADES
from unigrade.core.models import CourseGradeWeights
from unigrade.core.validation import ValidationError
from unigrade.services.grading_service import GradingService
from unigrade.services.storage import StorageError
from unigrade.state.app_state import AppState


def _fmt_pct(value) -> str:
    return f"{value:.1f}%" if value is not None else "N/A"


def build_gradebook_view(page: ft.Page, app_state: AppState, grading: GradingService) -> ft.Control:
    store = grading.store

    course = ft.Dropdown(width=360, label="Course")
    assignments_w = ft.TextField(label="Assignments %", width=140)
    quizzes_w = ft.TextField(label="Quizzes %", width=140)
    exams_w = ft.TextField(label="Exams %", width=140)
    total_text = ft.Text("Total: -")
    status = ft.Text(color=ft.Colors.RED_400)

    table = ft.DataTable(
        columns=[
            ft.DataColumn(ft.Text("Student")),
            ft.DataColumn(ft.Text("Calculated %")),
            ft.DataColumn(ft.Text("Calculated")),
            ft.DataColumn(ft.Text("Current")),
            ft.DataColumn(ft.Text("Override")),
            ft.DataColumn(ft.Text("")),
        ],
        rows=[],
    )

    override_map: Dict[int, ft.Dropdown] = {}

    def set_status(message: str, is_error: bool = True) -> None:
        status.value = message
        status.color = ft.Colors.RED_400 if is_error else ft.Colors.GREEN_400

    def selected_course_id():
        return int(course.value) if course.value else None

    def load_courses() -> None:
        courses = store.list_courses()
        course.options = [
            ft.dropdown.Option(str(c["id"]), f"{c['code']} - {c['name']} ({c['semester']})") for c in courses
        ]
        if app_state.selected_course_id is not None:
            course.value = str(app_state.selected_course_id)

    def update_total(_=None) -> None:
        try:
            weights = CourseGradeWeights.of(0, assignments_w.value or "0", quizzes_w.value or "0", exams_w.value or "0")
            total_text.value = f"Total: {weights.total}%"
        except ArithmeticError:
            total_text.value = "Total: invalid"
        page.update()

    def load_weights(course_id: int) -> None:
        weights = grading.get_grade_weights(course_id)
        if weights is None:
            assignments_w.value = quizzes_w.value = exams_w.value = ""
            set_status("No weights configured for this course yet.")
            total_text.value = "Total: -"
            return
        assignments_w.value = str(weights.assignments_weight)
        quizzes_w.value = str(weights.quizzes_weight)
        exams_w.value = str(weights.exams_weight)
        total_text.value = f"Total: {weights.total}%"

    def save_individual(enrollment_id: int, calculated) -> None:
        picker = override_map.get(enrollment_id)
        letter = picker.value if picker and picker.value else calculated
        if not letter:
            set_status("No grade to save for this student.")
            page.update()
            return
        try:
            grading.override_final_grade(enrollment_id, letter)
            set_status(f"Saved final grade {letter}.", is_error=False)
            refresh_grades()
        except (ValidationError, LookupError, StorageError) as exc:
            set_status(f"Failed to save grade: {exc}")
        page.update()

    def refresh_grades() -> None:
        table.rows.clear()
        override_map.clear()
        course_id = selected_course_id()
        if course_id is None:
            return
        for grade in grading.student_final_grades(course_id):
            picker = ft.Dropdown(
                width=110,
                options=[ft.dropdown.Option("", "-")] + [ft.dropdown.Option(letter) for letter in LETTER_GRADES],
                value=grade.current_grade if grade.is_overridden else "",
            )
            override_map[grade.enrollment_id] = picker
            current = grade.current_grade or "-"
            if grade.is_overridden:
                current = f"{current} (overridden)"
            table.rows.append(
                ft.DataRow(
                    cells=[
                        ft.DataCell(ft.Text(grade.student_name)),
                        ft.DataCell(ft.Text(_fmt_pct(grade.calculated_percentage))),
                        ft.DataCell(ft.Text(grade.calculated_grade or "N/A")),
                        ft.DataCell(ft.Text(current)),
                        ft.DataCell(picker),
                        ft.DataCell(
                            ft.TextButton(
                                "Save",
                                on_click=lambda _, eid=grade.enrollment_id, calc=grade.calculated_grade: save_individual(eid, calc),
                            )
                        ),
                    ]
                )
            )

    def on_course_change(_):
        course_id = selected_course_id()
        app_state.selected_course_id = course_id
        set_status("")
        if course_id is not None:
            try:
                load_weights(course_id)
                refresh_grades()
            except StorageError as exc:
                set_status(str(exc))
        page.update()

    def on_save_weights(_):
        course_id = selected_course_id()
        if course_id is None:
            set_status("Select a course first.")
            page.update()
            return
        try:
            weights = CourseGradeWeights.of(course_id, assignments_w.value or "0", quizzes_w.value or "0", exams_w.value or "0")
            grading.save_grade_weights(weights)
            set_status("Grade weights saved.", is_error=False)
            refresh_grades()
        except ArithmeticError:
            set_status("Weights must be numbers.")
        except (ValidationError, StorageError) as exc:
            set_status(str(exc))
        page.update()

    def on_calculate(_):
        course_id = selected_course_id()
        if course_id is None:
            set_status("Select a course first.")
        elif grading.get_grade_weights(course_id) is None:
            set_status("Please set and save grade weights first.")
        else:
            refresh_grades()
            set_status("Grades calculated.", is_error=False)
        page.update()

    def on_publish(_):
        course_id = selected_course_id()
        if course_id is None:
            set_status("Select a course first.")
            page.update()
            return
        overrides = {eid: picker.value for eid, picker in override_map.items() if picker.value}
        try:
            saved = grading.publish_calculated_grades(course_id, overrides)
            if saved:
                set_status(f"Saved {saved} final grades.", is_error=False)
            else:
                set_status("No grades to save.")
            refresh_grades()
        except (ValidationError, StorageError) as exc:
            set_status(f"Failed to save grades: {exc}")
        page.update()

    course.on_change = on_course_change
    for field in (assignments_w, quizzes_w, exams_w):
        field.on_change = update_total

    load_courses()
    if course.value:
        load_weights(int(course.value))
        refresh_grades()

    return ft.Column(
        scroll=ft.ScrollMode.AUTO,
        controls=[
            ft.Text("Final Grades", size=22, weight=ft.FontWeight.BOLD),
            course,
            ft.Row(controls=[assignments_w, quizzes_w, exams_w, total_text]),
            ft.Row(
                controls=[
                    ft.ElevatedButton("Save Weights", on_click=on_save_weights),
                    ft.ElevatedButton("Calculate", on_click=on_calculate),
                    ft.OutlinedButton("Save All Grades", on_click=on_publish),
                ]
            ),
            status,
            ft.Divider(),
            table,
        ],
    )
