from .quiz_controller import DEFAULT_TRIES_LIMIT, QuizController

__all__ = ["QuizController", "DEFAULT_TRIES_LIMIT"]
