"""
Actions a turn can request.

Defines the operations the quiz controller handles.
"""
from enum import Enum


class Action(Enum):
    """Turn actions understood by the quiz controller."""
    WELCOME = "welcome"
    SELECT_CATEGORY = "selectCategory"
    SELECT_QUIZ = "selectQuiz"
    SUBMIT_ANSWER = "submitAnswer"
    REPEAT_QUESTION = "repeatQuestion"
    SKIP_QUESTION = "skipQuestion"
    END_QUIZ = "endQuiz"
    END_SESSION = "endSession"
