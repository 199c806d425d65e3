"""
Quiz Controller - turn-by-turn quiz progression.

Each operation takes the current session state and returns the next state
plus the directive to speak. The controller never mutates a state in place
and performs no I/O of its own beyond the injected quiz fetcher.
"""
import logging
import random
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

from ..catalog import LessonCatalog
from ..exceptions import InvalidActionError, QuizFetchError, StateInvariantError
from ..interaction.intent_types import Action
from ..memory.quiz_state import Question, QuizActive
from ..memory.session_state import (
    CategoryChosen,
    Idle,
    SessionState,
    category_of,
    reset_quiz,
)
from ..schemas import Directive, TurnResult
from ..tools.quiz_fetcher import QuizSetFetcher
from .. import speech

logger = logging.getLogger(__name__)

DEFAULT_TRIES_LIMIT = 3


class QuizController:
    """
    Controller for quiz selection, answering and scoring.

    This class is responsible for:
    - Category and quiz selection
    - Answer evaluation with bounded retries
    - Skip, repeat and end of quiz
    - Score summaries on completion
    """

    def __init__(
        self,
        catalog: LessonCatalog,
        fetcher: QuizSetFetcher,
        tries_limit: int = DEFAULT_TRIES_LIMIT,
        rng: Optional[random.Random] = None,
    ):
        """
        :param catalog: Read-only category and lesson registry
        :param fetcher: Source of question sets
        :param tries_limit: Wrong attempts allowed before a question is revealed
        :param rng: Random source for shuffling (seeded in tests)
        """
        if tries_limit < 1:
            raise ValueError(f"tries_limit must be at least 1, got {tries_limit}")
        self.catalog = catalog
        self.fetcher = fetcher
        self.tries_limit = tries_limit
        self._rng = rng or random.Random()

    # ----------------------------
    # Dispatch
    # ----------------------------
    async def process(
        self,
        state: SessionState,
        action: Action,
        params: Optional[Mapping[str, Any]] = None,
    ) -> TurnResult:
        """
        Run one turn.

        :param state: State persisted from the previous turn
        :param action: Requested action
        :param params: Action parameters (category, quiz_name, answer)
        :return: TurnResult with the new state and directive
        :raises InvalidActionError: if the action is not recognized
        :raises QuizFetchError: if loading a quiz fails
        """
        if not isinstance(action, Action):
            raise InvalidActionError(f"Invalid action: {action!r}")
        params = params or {}

        logger.info(f"Processing action={action.value} state={type(state).__name__}")

        if action is Action.SELECT_QUIZ:
            return await self.select_quiz(state, params.get("quiz_name"))

        handlers: Dict[Action, Callable[[], TurnResult]] = {
            Action.WELCOME: lambda: self.welcome(state),
            Action.SELECT_CATEGORY: lambda: self.select_category(state, params.get("category")),
            Action.SUBMIT_ANSWER: lambda: self.submit_answer(state, params.get("answer")),
            Action.REPEAT_QUESTION: lambda: self.repeat_question(state),
            Action.SKIP_QUESTION: lambda: self.skip_question(state),
            Action.END_QUIZ: lambda: self.end_quiz(state),
            Action.END_SESSION: lambda: self.end_session(state),
        }
        return handlers[action]()

    # ----------------------------
    # Session lifecycle
    # ----------------------------
    def welcome(self, state: SessionState) -> TurnResult:
        """Greet the user on launch and ask for a category."""
        self._check_state(state)
        directive = Directive(
            title="Welcome",
            speech_text=speech.WELCOME,
            reprompt_text=speech.PICK_CATEGORY_REPROMPT,
        )
        return TurnResult(Idle(), directive)

    def end_session(self, state: SessionState) -> TurnResult:
        """Say goodbye and close the session."""
        directive = Directive(
            title="Session Ended",
            speech_text=speech.GOODBYE,
            should_end_session=True,
        )
        return TurnResult(Idle(), directive)

    # ----------------------------
    # Selection
    # ----------------------------
    def select_category(self, state: SessionState, category: Optional[str]) -> TurnResult:
        """
        Choose a category and list its quizzes.

        A category can only be chosen while idle; unknown categories leave
        the state untouched.
        """
        self._check_state(state)
        title = "Category Select"

        if not isinstance(state, Idle):
            logger.warning(f"Category '{category}' requested but '{category_of(state)}' already selected")
            return TurnResult(state, Directive(
                title=title,
                speech_text=speech.CATEGORY_ALREADY_SELECTED,
                reprompt_text=self._current_prompt(state),
            ))

        if not self.catalog.has_category(category):
            logger.warning(f"Unrecognized category: {category!r}")
            categories = self.catalog.category_names()
            return TurnResult(state, Directive(
                title=title,
                speech_text=speech.unknown_category(category, categories),
                reprompt_text=speech.PICK_CATEGORY_REPROMPT,
            ))

        quizzes = self.catalog.quizzes_for(category)
        logger.info(f"Category selected: {category} ({len(quizzes)} quizzes)")
        return TurnResult(CategoryChosen(category=category), Directive(
            title=title,
            speech_text=speech.category_selected(category, quizzes),
            reprompt_text=speech.select_quiz_prompt(quizzes),
        ))

    async def select_quiz(self, state: SessionState, quiz_name: Optional[str]) -> TurnResult:
        """
        Load a quiz from the chosen category and ask its first question.

        The fetched set is shuffled before the first question is read.

        :raises QuizFetchError: if the question set cannot be loaded
        """
        self._check_state(state)
        title = "Quiz Select"

        if isinstance(state, QuizActive):
            logger.warning(f"Quiz '{quiz_name}' requested but quiz {state.quiz_id} already active")
            return TurnResult(state, Directive(
                title=title,
                speech_text=speech.QUIZ_ALREADY_SELECTED,
                reprompt_text=state.current_question.definition,
            ))

        if not isinstance(state, CategoryChosen):
            logger.warning(f"Quiz '{quiz_name}' requested with no category selected")
            return TurnResult(state, Directive(
                title=title,
                speech_text=speech.NO_CATEGORY_SELECTED,
                reprompt_text=speech.PICK_CATEGORY_REPROMPT,
            ))

        quizzes = self.catalog.quizzes_for(state.category)
        name = self.catalog.resolve_quiz_name(quiz_name)
        if name is None or name not in quizzes:
            logger.warning(f"Unknown quiz {quiz_name!r} for category {state.category}")
            return TurnResult(state, Directive(
                title=title,
                speech_text=speech.unknown_quiz(quiz_name, quizzes),
                reprompt_text=speech.select_quiz_prompt(quizzes),
            ))

        quiz_id = self.catalog.lookup_quiz_id(name)
        questions = await self.fetcher.fetch_quiz_set(quiz_id)
        if not questions:
            raise QuizFetchError(f"Quiz set {quiz_id} has no questions")
        quiz = QuizActive.start(state.category, quiz_id, self.shuffle(questions))

        logger.info(f"Quiz '{name}' ({quiz_id}) loaded with {quiz.total_questions} questions")
        definition = quiz.current_question.definition
        return TurnResult(quiz, Directive(title=title, speech_text=definition, reprompt_text=definition))

    def shuffle(self, questions: Sequence[Question]) -> List[Question]:
        """
        Return a uniformly random permutation of the questions (Fisher-Yates).

        The input sequence is left untouched.
        """
        shuffled = list(questions)
        for i in range(len(shuffled) - 1, 0, -1):
            j = self._rng.randint(0, i)
            shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
        return shuffled

    # ----------------------------
    # Answering
    # ----------------------------
    def submit_answer(
        self,
        state: SessionState,
        answer: Optional[str],
        tries_limit: Optional[int] = None,
    ) -> TurnResult:
        """
        Evaluate an answer to the current question.

        Answers must match the term exactly. Only first attempts count
        toward the tally; after tries_limit misses the term is revealed and
        the quiz moves on.

        :param state: Current state
        :param answer: Spoken answer
        :param tries_limit: Override for the controller's tries limit
        """
        limit = tries_limit if tries_limit is not None else self.tries_limit
        self._check_state(state, limit)
        title = "Answer Question"

        if not isinstance(state, QuizActive):
            logger.warning("submit_answer called but no quiz is active")
            return TurnResult(state, Directive(title=title, speech_text=speech.NO_QUESTION_TO_ANSWER))

        question = state.current_question
        if answer == question.term:
            logger.info(f"Correct answer on question {state.question_index} (tries={state.current_tries})")
            return self._advance(state.record_correct(), speech.CORRECT, title)

        state = state.record_incorrect()
        logger.info(f"Incorrect answer on question {state.question_index} (tries={state.current_tries}/{limit})")

        if state.current_tries < limit:
            return TurnResult(state, Directive(
                title=title,
                speech_text=speech.TRY_AGAIN + question.definition,
                reprompt_text=question.definition,
            ))

        return self._advance(state, speech.out_of_tries(question.term), title, transition=speech.MOVING_ON)

    def repeat_question(self, state: SessionState) -> TurnResult:
        """Read the current question again."""
        self._check_state(state)
        title = "Repeat Question"

        if not isinstance(state, QuizActive):
            return TurnResult(state, Directive(title=title, speech_text=speech.NO_QUESTION_TO_REPEAT))

        definition = state.current_question.definition
        return TurnResult(state, Directive(title=title, speech_text=definition, reprompt_text=definition))

    def skip_question(self, state: SessionState) -> TurnResult:
        """
        Reveal the current answer and move on.

        A skipped question counts as incorrect unless it was already missed.
        """
        self._check_state(state)
        title = "Skip Question"

        if not isinstance(state, QuizActive):
            return TurnResult(state, Directive(title=title, speech_text=speech.NO_QUESTION_TO_SKIP))

        term = state.current_question.term
        logger.info(f"Skipping question {state.question_index}")
        return self._advance(state.record_incorrect(), speech.reveal_answer(term), title)

    def end_quiz(self, state: SessionState) -> TurnResult:
        """Stop the current quiz early and report the score so far."""
        self._check_state(state)
        title = "End Quiz"

        if not isinstance(state, QuizActive):
            return TurnResult(state, Directive(
                title=title,
                speech_text=speech.NOT_IN_QUIZ,
                reprompt_text=self._current_prompt(state),
            ))

        logger.info(f"Quiz {state.quiz_id} ended at question {state.question_index}")
        return self._complete(state, "", title)

    # ----------------------------
    # Helpers
    # ----------------------------
    def _advance(self, state: QuizActive, feedback: str, title: str, transition: str = "") -> TurnResult:
        """
        Move past the current question, completing the quiz after the last one.

        :param transition: Phrase spoken before the next question (not on completion)
        """
        if state.is_last_question():
            return self._complete(state, feedback, title)

        state = state.next_question()
        definition = state.current_question.definition
        return TurnResult(state, Directive(
            title=title,
            speech_text=feedback + transition + definition,
            reprompt_text=definition,
        ))

    def _complete(self, state: QuizActive, feedback: str, title: str) -> TurnResult:
        summary = speech.quiz_summary(state.correct_count, state.incorrect_count)
        logger.info(
            f"Quiz {state.quiz_id} complete: correct={state.correct_count}, "
            f"incorrect={state.incorrect_count}, total={state.total_questions}"
        )
        return TurnResult(reset_quiz(state), Directive(
            title=title,
            speech_text=feedback + summary + speech.PICK_CATEGORY,
            reprompt_text=speech.PICK_CATEGORY_REPROMPT,
        ))

    def _current_prompt(self, state: SessionState) -> str:
        """What to reprompt with when a request leaves the state unchanged."""
        if isinstance(state, QuizActive):
            return state.current_question.definition
        if isinstance(state, CategoryChosen):
            return speech.select_quiz_prompt(self.catalog.quizzes_for(state.category))
        return speech.PICK_CATEGORY_REPROMPT

    def _check_state(self, state: Any, tries_limit: Optional[int] = None) -> None:
        """
        Reject states no turn could have produced.

        :raises StateInvariantError: for unknown state types or tries beyond the limit
        """
        if not isinstance(state, (Idle, CategoryChosen, QuizActive)):
            raise StateInvariantError(f"Unknown session state: {state!r}")
        limit = tries_limit if tries_limit is not None else self.tries_limit
        if isinstance(state, QuizActive) and state.current_tries >= limit:
            raise StateInvariantError(
                f"current_tries {state.current_tries} not below tries limit {limit}"
            )
