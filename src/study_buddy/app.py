"""
Public application facade for Study Buddy.

This is the single stable entry point for the library. All dependency
wiring is encapsulated here.
"""
import logging
from typing import Any, Dict, Mapping, Optional

from .catalog import LessonCatalog, default_catalog, load_catalog
from .config import StudyBuddyConfig
from .handler import handle_event
from .interaction import IntentRouter
from .service.quiz_controller import QuizController
from .tools.quiz_fetcher import HttpQuizSetFetcher, QuizSetFetcher

logger = logging.getLogger(__name__)


class StudyBuddyApp:
    """
    Composition root for the quiz skill.

    Usage:
        config = load_config_from_env()
        app = StudyBuddyApp(config)
        payload = await app.handle(event)
    """

    def __init__(
        self,
        config: StudyBuddyConfig,
        catalog: Optional[LessonCatalog] = None,
        fetcher: Optional[QuizSetFetcher] = None,
    ):
        """
        :param config: StudyBuddyConfig instance
        :param catalog: Catalog override (built from config when omitted)
        :param fetcher: Fetcher override (HTTP fetcher from config when omitted)
        """
        self.config = config
        self.catalog = catalog or self._build_catalog(config)
        self.fetcher = fetcher or HttpQuizSetFetcher(
            base_url=config.flashcard_base_url,
            client_id=config.flashcard_client_id,
            timeout_seconds=config.fetch_timeout_seconds,
        )
        self.router = IntentRouter()
        self.controller = QuizController(
            catalog=self.catalog,
            fetcher=self.fetcher,
            tries_limit=config.tries_limit,
        )
        logger.info(
            f"StudyBuddyApp initialized: {len(self.catalog.category_names())} categories, "
            f"tries_limit={config.tries_limit}"
        )

    @staticmethod
    def _build_catalog(config: StudyBuddyConfig) -> LessonCatalog:
        if config.catalog_path:
            return load_catalog(
                config.catalog_path,
                enable_fuzzy_matching=config.enable_fuzzy_matching,
                fuzzy_threshold=config.fuzzy_threshold,
            )
        return default_catalog(
            enable_fuzzy_matching=config.enable_fuzzy_matching,
            fuzzy_threshold=config.fuzzy_threshold,
        )

    async def handle(self, event: Mapping[str, Any]) -> Optional[Dict[str, Any]]:
        """Process one voice event and return the response payload."""
        return await handle_event(event, self.controller, self.router)
