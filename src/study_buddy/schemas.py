from dataclasses import dataclass
from typing import Optional

from .memory.session_state import SessionState


@dataclass(frozen=True)
class Directive:
    title: str
    speech_text: str
    reprompt_text: Optional[str] = None
    should_end_session: bool = False


@dataclass(frozen=True)
class TurnResult:
    state: SessionState
    directive: Directive
