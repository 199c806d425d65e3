"""
Memory layer for per-conversation quiz state.

States are immutable values threaded through one conversation's turns.
"""
from .quiz_state import Question, QuizActive
from .session_state import (
    CategoryChosen,
    Idle,
    SessionState,
    category_of,
    empty,
    from_attributes,
    is_quiz_active,
    reset_quiz,
    to_attributes,
)

__all__ = [
    "Question",
    "QuizActive",
    "Idle",
    "CategoryChosen",
    "SessionState",
    "empty",
    "is_quiz_active",
    "reset_quiz",
    "category_of",
    "to_attributes",
    "from_attributes",
]
