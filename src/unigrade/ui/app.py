from __future__ import annotations

import logging

import flet as ft

from unigrade.config.settings import settings
from unigrade.services.grading_service import GradingService
from unigrade.services.storage import Storage, StorageError
from unigrade.services.transcript_service import TranscriptService
from unigrade.state.app_state import AppState
from unigrade.ui.views.course_grades_view import build_course_grades_view
from unigrade.ui.views.gradebook_view import build_gradebook_view
from unigrade.ui.views.transcript_view import build_transcript_view

logger = logging.getLogger(__name__)


class UniGradeApp:
    def __init__(self, page: ft.Page, store: Storage | None = None) -> None:
        self.page = page
        self.page.title = "UniGrade"
        self.page.scroll = ft.ScrollMode.AUTO
        self.store = store or Storage(settings.db_path)
        self.grading = GradingService(self.store)
        self.transcripts = TranscriptService(self.store, settings.a_plus_points)
        self.state = AppState()
        self.auth_error = ft.Text(color=ft.Colors.RED)

        self.username = ft.TextField(label="Username", width=300)

    def run(self) -> None:
        self.show_sign_in()

    def show_sign_in(self) -> None:
        self.state.session.clear()
        self.page.clean()
        self.page.add(
            ft.Column(
                [
                    ft.Text("UniGrade", size=32, weight=ft.FontWeight.BOLD),
                    ft.Text("Sign in to continue"),
                    self.username,
                    ft.ElevatedButton("Sign In", on_click=self.handle_sign_in),
                    self.auth_error,
                ],
                tight=True,
                horizontal_alignment=ft.CrossAxisAlignment.CENTER,
            )
        )

    def handle_sign_in(self, _: ft.ControlEvent) -> None:
        try:
            user = self.store.get_user_by_username(self.username.value or "")
        except StorageError as exc:
            self.auth_error.value = str(exc)
            self.page.update()
            return
        if user is None:
            self.auth_error.value = "Unknown user"
            self.page.update()
            return
        self.state.session.user_id = int(user["id"])
        self.state.session.username = user["username"]
        self.state.session.role = user["role"]
        logger.info(f"User {user['username']} signed in as {user['role']}")
        self.show_main_app()

    def show_main_app(self) -> None:
        self.page.clean()

        if self.state.session.is_instructor:
            tabs = [
                ft.Tab(text="Gradebook", content=build_gradebook_view(self.page, self.state, self.grading)),
                ft.Tab(text="Transcripts", content=build_transcript_view(self.page, self.state, self.transcripts)),
            ]
        else:
            tabs = [
                ft.Tab(text="My Grades", content=build_course_grades_view(self.page, self.state, self.grading)),
                ft.Tab(text="Transcript", content=build_transcript_view(self.page, self.state, self.transcripts)),
            ]

        self.page.add(
            ft.Row(
                [
                    ft.Text("UniGrade", size=28, weight=ft.FontWeight.BOLD),
                    ft.Text(self.state.session.username or ""),
                    ft.TextButton("Logout", on_click=lambda _: self.show_sign_in()),
                ],
                alignment=ft.MainAxisAlignment.SPACE_BETWEEN,
            ),
            ft.Tabs(selected_index=0, tabs=tabs, expand=1),
        )


def main(page: ft.Page) -> None:
    UniGradeApp(page).run()
