"""
Session state management.

A conversation is always in exactly one of three states: idle, a category
chosen with no quiz yet, or a quiz in progress. The voice platform stores
session attributes between turns, so states round-trip through the flat
attribute dictionary the skill has always used.
"""
import logging
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Union

from ..exceptions import StateInvariantError
from .quiz_state import Question, QuizActive

logger = logging.getLogger(__name__)

# Attributes that are either all present (quiz running) or all null.
QUIZ_ATTRIBUTES = ("quizId", "quiz", "question", "correct", "incorrect", "currentTries")


@dataclass(frozen=True)
class Idle:
    """No category and no quiz: the conversation start state."""


@dataclass(frozen=True)
class CategoryChosen:
    """A category has been picked but no quiz is loaded yet."""
    category: str


SessionState = Union[Idle, CategoryChosen, QuizActive]


def empty() -> SessionState:
    """Return the state every new conversation starts in."""
    return Idle()


def is_quiz_active(state: SessionState) -> bool:
    """Check if a quiz is in progress."""
    return isinstance(state, QuizActive)


def reset_quiz(state: SessionState) -> SessionState:
    """
    Clear the category and every quiz field.

    Used on quiz completion and on an explicit end of quiz.
    """
    return Idle()


def category_of(state: SessionState) -> Optional[str]:
    """Get the selected category, if any."""
    if isinstance(state, (CategoryChosen, QuizActive)):
        return state.category
    return None


def to_attributes(state: SessionState) -> Dict[str, Any]:
    """
    Serialize a state to session attributes.

    :param state: State to serialize
    :return: Flat attribute dict with every key present
    """
    if isinstance(state, QuizActive):
        return state.to_dict()

    attributes: Dict[str, Any] = {"category": category_of(state)}
    attributes.update({key: None for key in QUIZ_ATTRIBUTES})
    return attributes


def from_attributes(attributes: Optional[Mapping[str, Any]]) -> SessionState:
    """
    Rebuild a state from the session attributes of the previous turn.

    :param attributes: Attribute dict echoed back by the platform (may be None)
    :return: Decoded SessionState
    :raises StateInvariantError: if quiz fields are partially set or malformed
    """
    if not attributes:
        return Idle()

    category = attributes.get("category")
    present = [key for key in QUIZ_ATTRIBUTES if attributes.get(key) is not None]

    if not present:
        return CategoryChosen(category=category) if category else Idle()

    if len(present) != len(QUIZ_ATTRIBUTES):
        missing = sorted(set(QUIZ_ATTRIBUTES) - set(present))
        logger.error(f"Rejecting session attributes with partial quiz fields, missing={missing}")
        raise StateInvariantError(f"Quiz attributes partially set; missing {missing}")

    if not category:
        raise StateInvariantError("Active quiz attributes without a category")

    try:
        quiz = [Question(term=item["term"], definition=item["definition"]) for item in attributes["quiz"]]
        return QuizActive(
            category=category,
            quiz_id=int(attributes["quizId"]),
            quiz=tuple(quiz),
            question_index=int(attributes["question"]),
            correct_count=int(attributes["correct"]),
            incorrect_count=int(attributes["incorrect"]),
            current_tries=int(attributes["currentTries"]),
        )
    except (KeyError, TypeError, ValueError) as e:
        raise StateInvariantError(f"Malformed quiz attributes: {e}") from e
