"""
Quiz state management.

Tracks the progress of one loaded question set explicitly.
"""
from dataclasses import dataclass, replace
from typing import Any, Dict, Sequence, Tuple

from ..exceptions import StateInvariantError


@dataclass(frozen=True)
class Question:
    """One flashcard: the definition is read out, the term is the expected answer."""
    term: str
    definition: str

    def to_dict(self) -> Dict[str, str]:
        return {"term": self.term, "definition": self.definition}


@dataclass(frozen=True)
class QuizActive:
    """
    Session state while a quiz is running.

    Every quiz-scoped field is present at once, so the "all set or all
    cleared" rule holds by construction. Instances are immutable; each
    transition returns a new instance.
    """
    category: str
    quiz_id: int
    quiz: Tuple[Question, ...]
    question_index: int = 0
    correct_count: int = 0
    incorrect_count: int = 0
    current_tries: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, "quiz", tuple(self.quiz))
        if not self.quiz:
            raise StateInvariantError("An active quiz needs at least one question")
        if not 0 <= self.question_index < len(self.quiz):
            raise StateInvariantError(
                f"question_index {self.question_index} outside quiz of {len(self.quiz)} questions"
            )
        for name in ("correct_count", "incorrect_count", "current_tries"):
            if getattr(self, name) < 0:
                raise StateInvariantError(f"{name} must be non-negative, got {getattr(self, name)}")

    @classmethod
    def start(cls, category: str, quiz_id: int, quiz: Sequence[Question]) -> "QuizActive":
        """Begin a quiz on its first question with every counter at zero."""
        return cls(category=category, quiz_id=quiz_id, quiz=tuple(quiz))

    @property
    def current_question(self) -> Question:
        return self.quiz[self.question_index]

    @property
    def total_questions(self) -> int:
        return len(self.quiz)

    def is_last_question(self) -> bool:
        """Check if the current question is the final one."""
        return self.question_index + 1 >= len(self.quiz)

    def record_correct(self) -> "QuizActive":
        """
        Record a correct answer on the current question.

        Only a first-try answer counts toward the correct tally.
        """
        correct = self.correct_count + 1 if self.current_tries == 0 else self.correct_count
        return replace(self, correct_count=correct, current_tries=0)

    def record_incorrect(self) -> "QuizActive":
        """
        Record a wrong attempt on the current question.

        The question is tallied as incorrect once, on its first miss.
        """
        incorrect = self.incorrect_count + 1 if self.current_tries == 0 else self.incorrect_count
        return replace(self, incorrect_count=incorrect, current_tries=self.current_tries + 1)

    def next_question(self) -> "QuizActive":
        """
        Move to the following question with a fresh tries counter.

        :raises StateInvariantError: if the current question is the last one
        """
        return replace(self, question_index=self.question_index + 1, current_tries=0)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "category": self.category,
            "quizId": self.quiz_id,
            "quiz": [q.to_dict() for q in self.quiz],
            "question": self.question_index,
            "correct": self.correct_count,
            "incorrect": self.incorrect_count,
            "currentTries": self.current_tries,
        }
