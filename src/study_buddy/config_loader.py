"""
Configuration loader with validation.
"""
from dotenv import load_dotenv

from .config import StudyBuddyConfig
from .config_validator import (
    get_optional_env,
    get_required_env,
    parse_bool,
    parse_float,
    parse_int,
    validate_path,
)


def load_config_from_env(use_dotenv: bool = True) -> StudyBuddyConfig:
    """
    Load configuration from environment variables with validation.

    Usage:
        config = load_config_from_env()
        app = StudyBuddyApp(config)

    :param use_dotenv: Load a local .env file first (disable in production)
    :return: Validated StudyBuddyConfig instance
    :raises: ConfigurationError if required configs are missing or invalid
    """
    if use_dotenv:
        load_dotenv()

    config = StudyBuddyConfig(
        flashcard_client_id=get_required_env(
            "FLASHCARD_CLIENT_ID",
            "Client id for the flashcard provider API"
        ),
        flashcard_base_url=get_optional_env(
            "FLASHCARD_BASE_URL",
            default="https://api.quizlet.com/2.0/sets/"
        ),
        fetch_timeout_seconds=parse_float(
            get_optional_env("FETCH_TIMEOUT_SECONDS", "10"), "FETCH_TIMEOUT_SECONDS", minimum=0.1
        ),
        tries_limit=parse_int(get_optional_env("TRIES_LIMIT", "3"), "TRIES_LIMIT", minimum=1),
        catalog_path=get_optional_env("CATALOG_PATH"),
        enable_fuzzy_matching=parse_bool(
            get_optional_env("ENABLE_FUZZY_MATCHING", "true"), "ENABLE_FUZZY_MATCHING"
        ),
        fuzzy_threshold=parse_float(
            get_optional_env("FUZZY_THRESHOLD", "0.85"), "FUZZY_THRESHOLD", minimum=0.0, maximum=1.0
        ),
    )

    if config.catalog_path:
        validate_path(config.catalog_path, "CATALOG_PATH", must_exist=True)

    return config
