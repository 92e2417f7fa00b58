from dataclasses import dataclass
from typing import Optional


@dataclass
class SessionState:
    user_id: Optional[int] = None
    username: Optional[str] = None
    role: Optional[str] = None

    @property
    def is_instructor(self) -> bool:
        return self.role in ("PROFESSOR", "ADMIN")

    def clear(self) -> None:
        self.user_id = None
        self.username = None
        self.role = None
