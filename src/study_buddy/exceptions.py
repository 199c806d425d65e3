class StudyBuddyError(Exception):
    """Base exception for the study buddy skill."""


class ConfigurationError(StudyBuddyError):
    """Raised when configuration is missing or invalid."""


class QuizFetchError(StudyBuddyError):
    """Raised when a question set cannot be fetched or parsed."""


class InvalidActionError(StudyBuddyError):
    """Raised when a turn names an action or intent the skill does not handle."""


class StateInvariantError(StudyBuddyError):
    """Raised when session state violates the active-quiz invariants."""
