from dataclasses import dataclass
import os
from dotenv import load_dotenv


load_dotenv()


def _split_csv(value: str) -> tuple[str, ...]:
    return tuple(item.strip() for item in value.split(",") if item.strip())


@dataclass(frozen=True)
class Settings:
    db_path: str = os.getenv("UNIGRADE_DB_PATH", "data/unigrade.db")
    log_level: str = os.getenv("UNIGRADE_LOG_LEVEL", "INFO")
    a_plus_points: float = float(os.getenv("UNIGRADE_A_PLUS_POINTS", "4.0"))

    web_mode: bool = os.getenv("UNIGRADE_WEB", "0") == "1"
    port: int = int(os.getenv("PORT", "8550"))

    cors_allowed_origins: tuple[str, ...] = _split_csv(
        os.getenv("CORS_ALLOWED_ORIGINS", "http://localhost:5173,http://127.0.0.1:5173")
    )


settings = Settings()
