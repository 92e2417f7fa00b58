from dataclasses import dataclass, field
from typing import Optional

from unigrade.state.session_state import SessionState


@dataclass
class AppState:
    session: SessionState = field(default_factory=SessionState)
    selected_course_id: Optional[int] = None
