"""
Study Buddy: a voice quiz skill backed by flashcard sets.
"""
from .app import StudyBuddyApp
from .config import StudyBuddyConfig
from .config_loader import load_config_from_env
from .exceptions import (
    ConfigurationError,
    InvalidActionError,
    QuizFetchError,
    StateInvariantError,
    StudyBuddyError,
)

__all__ = [
    "StudyBuddyApp",
    "StudyBuddyConfig",
    "load_config_from_env",
    "StudyBuddyError",
    "ConfigurationError",
    "QuizFetchError",
    "InvalidActionError",
    "StateInvariantError",
]
