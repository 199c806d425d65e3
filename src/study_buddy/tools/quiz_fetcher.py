"""
Flashcard set retrieval.

The controller only depends on the QuizSetFetcher protocol; the HTTP
implementation talks to the flashcard provider's terms endpoint.
"""
import logging
from typing import Any, List, Optional, Protocol

import httpx

from ..exceptions import QuizFetchError
from ..memory.quiz_state import Question

logger = logging.getLogger(__name__)


class QuizSetFetcher(Protocol):
    """Protocol for a source of question sets."""
    async def fetch_quiz_set(self, quiz_id: int) -> List[Question]:
        ...


class HttpQuizSetFetcher:
    """
    Fetches a set's terms from the flashcard provider over HTTP.

    No retries: a failed request surfaces as QuizFetchError for the turn.
    """

    def __init__(
        self,
        base_url: str,
        client_id: str,
        timeout_seconds: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        :param base_url: Sets endpoint prefix, e.g. https://api.quizlet.com/2.0/sets/
        :param client_id: Provider client id sent as a query parameter
        :param timeout_seconds: Per-request timeout
        :param client: Optional pre-built client (tests inject a mock transport)
        """
        self.base_url = base_url if base_url.endswith("/") else base_url + "/"
        self.client_id = client_id
        self.timeout_seconds = timeout_seconds
        self._client = client

    def terms_url(self, quiz_id: int) -> str:
        return f"{self.base_url}{quiz_id}/terms"

    async def fetch_quiz_set(self, quiz_id: int) -> List[Question]:
        """
        Fetch and parse one question set.

        :param quiz_id: Flashcard set id
        :return: Questions in provider order
        :raises QuizFetchError: on network, HTTP status or payload errors
        """
        url = self.terms_url(quiz_id)
        logger.info(f"Fetching quiz set {quiz_id} from {url}")

        try:
            if self._client is not None:
                response = await self._get(self._client, url)
            else:
                async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
                    response = await self._get(client, url)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPError as e:
            logger.error(f"Quiz set {quiz_id} request failed: {e}")
            raise QuizFetchError(f"Could not fetch quiz set {quiz_id}: {e}") from e
        except ValueError as e:
            logger.error(f"Quiz set {quiz_id} returned a non-JSON body")
            raise QuizFetchError(f"Quiz set {quiz_id} returned invalid JSON") from e

        return parse_terms(payload, quiz_id)

    async def _get(self, client: httpx.AsyncClient, url: str) -> httpx.Response:
        return await client.get(url, params={"client_id": self.client_id}, timeout=self.timeout_seconds)


def parse_terms(payload: Any, quiz_id: int) -> List[Question]:
    """
    Convert a terms payload into questions.

    :param payload: Decoded JSON, expected to be a list of objects with
        "term" and "definition" strings
    :raises QuizFetchError: if the payload is not in that shape or is empty
    """
    if not isinstance(payload, list):
        raise QuizFetchError(f"Quiz set {quiz_id} payload is not a list of terms")

    questions: List[Question] = []
    for item in payload:
        if not isinstance(item, dict):
            raise QuizFetchError(f"Quiz set {quiz_id} contains a non-object term")
        term = item.get("term")
        definition = item.get("definition")
        if not isinstance(term, str) or not isinstance(definition, str):
            raise QuizFetchError(f"Quiz set {quiz_id} has a term without term/definition text")
        questions.append(Question(term=term, definition=definition))

    if not questions:
        raise QuizFetchError(f"Quiz set {quiz_id} has no terms")

    logger.debug(f"Parsed {len(questions)} questions for quiz set {quiz_id}")
    return questions
