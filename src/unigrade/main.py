import flet as ft

from unigrade.config.logging_config import configure_logging
from unigrade.config.settings import settings
from unigrade.ui.app import main


def run() -> None:
    configure_logging(settings.log_level)
    ft.app(
        target=main,
        view=ft.AppView.WEB_BROWSER if settings.web_mode else ft.AppView.FLET_APP,
        port=settings.port,
    )


if __name__ == "__main__":
    run()
