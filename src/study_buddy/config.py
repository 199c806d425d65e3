from dataclasses import dataclass
from typing import Optional


@dataclass
class StudyBuddyConfig:
    # Flashcard provider
    flashcard_client_id: str
    flashcard_base_url: str = "https://api.quizlet.com/2.0/sets/"
    fetch_timeout_seconds: float = 10.0

    # Quiz rules
    tries_limit: int = 3

    # Catalog (bundled defaults when no path is set)
    catalog_path: Optional[str] = None
    enable_fuzzy_matching: bool = True
    fuzzy_threshold: float = 0.85
