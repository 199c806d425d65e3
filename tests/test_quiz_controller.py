"""
Tests for the quiz controller turn logic.
"""
import asyncio
import random
from typing import List

import pytest

from study_buddy.catalog import default_catalog
from study_buddy.exceptions import InvalidActionError, QuizFetchError, StateInvariantError
from study_buddy.interaction import Action
from study_buddy.memory import CategoryChosen, Idle, Question, QuizActive
from study_buddy.service import QuizController


TAXONOMY = [
    Question(term="kingdom", definition="Rank above phylum"),
    Question(term="phylum", definition="Rank above class"),
    Question(term="class", definition="Rank above order"),
    Question(term="order", definition="Rank above family"),
    Question(term="family", definition="Rank above genus"),
]


class FakeFetcher:
    """In-memory fetcher recording the ids it was asked for."""

    def __init__(self, questions: List[Question] = None, error: Exception = None):
        self.questions = list(questions if questions is not None else TAXONOMY)
        self.error = error
        self.calls: List[int] = []

    async def fetch_quiz_set(self, quiz_id: int) -> List[Question]:
        self.calls.append(quiz_id)
        if self.error:
            raise self.error
        return list(self.questions)


@pytest.fixture
def fetcher():
    return FakeFetcher()


@pytest.fixture
def controller(fetcher):
    return QuizController(default_catalog(), fetcher, tries_limit=3, rng=random.Random(7))


def start_quiz(questions=TAXONOMY, **overrides) -> QuizActive:
    fields = dict(category="science", quiz_id=224426529, quiz=tuple(questions))
    fields.update(overrides)
    return QuizActive(**fields)


def wrong_answer(state: QuizActive) -> str:
    return state.current_question.term + " (wrong)"


class TestSelectCategory:
    """Tests for category selection."""

    def test_lists_quizzes(self, controller):
        result = controller.select_category(Idle(), "science")

        assert result.state == CategoryChosen(category="science")
        assert "anatomy of a cell and taxonomy" in result.directive.speech_text
        assert result.directive.speech_text.startswith("science category selected.")
        assert result.directive.should_end_session is False

    def test_oxford_joining(self, controller):
        result = controller.select_category(Idle(), "history")
        assert "war of eighteen twelve, ancient greeks, and world war two" in result.directive.speech_text

    def test_already_selected(self, controller):
        """A second category request leaves the state alone."""
        state = CategoryChosen(category="math")
        result = controller.select_category(state, "science")

        assert result.state is state
        assert "already selected a category" in result.directive.speech_text

    def test_already_in_quiz(self, controller):
        state = start_quiz()
        result = controller.select_category(state, "math")

        assert result.state is state
        assert result.directive.reprompt_text == state.current_question.definition

    def test_unrecognized_category(self, controller):
        """Unknown categories degrade to a spoken hint, not an error."""
        result = controller.select_category(Idle(), "art")

        assert result.state == Idle()
        assert "history, science, and math" in result.directive.speech_text

    def test_missing_category(self, controller):
        result = controller.select_category(Idle(), None)
        assert result.state == Idle()


class TestSelectQuiz:
    """Tests for quiz selection and loading."""

    def test_loads_and_asks_first_question(self, controller, fetcher):
        result = asyncio.run(controller.select_quiz(CategoryChosen(category="science"), "taxonomy"))
        state = result.state

        assert isinstance(state, QuizActive)
        assert fetcher.calls == [224426529]
        assert state.quiz_id == 224426529
        assert state.question_index == 0
        assert (state.correct_count, state.incorrect_count, state.current_tries) == (0, 0, 0)
        assert result.directive.speech_text == state.quiz[0].definition
        assert result.directive.reprompt_text == state.quiz[0].definition

    def test_shuffled_set_is_permutation(self, controller):
        state = asyncio.run(controller.select_quiz(CategoryChosen(category="science"), "taxonomy")).state

        assert len(state.quiz) == len(TAXONOMY)
        assert sorted(q.term for q in state.quiz) == sorted(q.term for q in TAXONOMY)

    def test_second_select_is_noop(self, controller, fetcher):
        """Selecting a quiz twice keeps the first quiz untouched."""
        first = asyncio.run(controller.select_quiz(CategoryChosen(category="science"), "taxonomy")).state
        second = asyncio.run(controller.select_quiz(first, "anatomy of a cell"))

        assert second.state is first
        assert "already selected a quiz" in second.directive.speech_text
        assert fetcher.calls == [224426529]

    def test_requires_category(self, controller, fetcher):
        result = asyncio.run(controller.select_quiz(Idle(), "taxonomy"))

        assert result.state == Idle()
        assert "pick a category" in result.directive.speech_text
        assert fetcher.calls == []

    def test_unknown_quiz_name(self, controller, fetcher):
        state = CategoryChosen(category="science")
        result = asyncio.run(controller.select_quiz(state, "astrophysics"))

        assert result.state is state
        assert "anatomy of a cell and taxonomy" in result.directive.speech_text
        assert fetcher.calls == []

    def test_quiz_from_other_category(self, controller, fetcher):
        result = asyncio.run(controller.select_quiz(CategoryChosen(category="science"), "geometry"))

        assert result.state == CategoryChosen(category="science")
        assert fetcher.calls == []

    def test_near_miss_quiz_name(self, controller, fetcher):
        asyncio.run(controller.select_quiz(CategoryChosen(category="science"), "Taxonomy"))
        assert fetcher.calls == [224426529]

    def test_fetch_failure_propagates(self):
        fetcher = FakeFetcher(error=QuizFetchError("provider down"))
        controller = QuizController(default_catalog(), fetcher)

        with pytest.raises(QuizFetchError):
            asyncio.run(controller.select_quiz(CategoryChosen(category="science"), "taxonomy"))


class TestShuffle:
    """Tests for the Fisher-Yates shuffle."""

    def test_input_untouched(self, controller):
        questions = list(TAXONOMY)
        controller.shuffle(questions)
        assert questions == TAXONOMY

    def test_produces_non_identity_orders(self, controller):
        """Over many trials the source order is not always kept."""
        orders = {tuple(q.term for q in controller.shuffle(TAXONOMY)) for _ in range(50)}
        assert len(orders) > 1
        assert any(order != tuple(q.term for q in TAXONOMY) for order in orders)

    def test_every_position_reachable(self, controller):
        firsts = {controller.shuffle(TAXONOMY)[0].term for _ in range(200)}
        assert firsts == {q.term for q in TAXONOMY}

    def test_single_and_empty(self, controller):
        assert controller.shuffle(TAXONOMY[:1]) == TAXONOMY[:1]
        assert controller.shuffle([]) == []


class TestSubmitAnswer:
    """Tests for answer evaluation and retries."""

    def test_correct_first_try(self, controller):
        state = start_quiz()
        result = controller.submit_answer(state, "kingdom")

        assert result.state.correct_count == 1
        assert result.state.incorrect_count == 0
        assert result.state.question_index == 1
        assert result.directive.speech_text == "Congratulations you are correct! Rank above class"
        assert result.directive.reprompt_text == "Rank above class"

    def test_answer_is_case_sensitive(self, controller):
        result = controller.submit_answer(start_quiz(), "Kingdom")
        assert result.state.current_tries == 1
        assert result.state.question_index == 0

    def test_wrong_then_correct(self, controller):
        """A correct answer after misses does not add to the correct tally."""
        state = start_quiz()
        for _ in range(2):
            state = controller.submit_answer(state, wrong_answer(state)).state

        result = controller.submit_answer(state, "kingdom")

        assert result.state.correct_count == 0
        assert result.state.incorrect_count == 1
        assert result.state.current_tries == 0
        assert result.state.question_index == 1

    def test_try_again_repeats_definition(self, controller):
        result = controller.submit_answer(start_quiz(), "nope")

        assert result.state.current_tries == 1
        assert result.state.incorrect_count == 1
        assert result.directive.speech_text == "Incorrect answer. Try again. Rank above phylum"

    def test_tries_limit_reveals_and_advances(self, controller):
        """Hitting the limit counts one miss and moves on."""
        state = start_quiz()
        for _ in range(3):
            result = controller.submit_answer(state, "nope")
            state = result.state

        assert state.question_index == 1
        assert state.incorrect_count == 1
        assert state.current_tries == 0
        assert "The correct answer is kingdom." in result.directive.speech_text
        assert result.directive.speech_text.endswith("Moving on to the next question. Rank above class")

    def test_tries_limit_override(self, controller):
        result = controller.submit_answer(start_quiz(), "nope", tries_limit=1)
        assert result.state.question_index == 1
        assert result.state.incorrect_count == 1

    def test_last_question_completes(self, controller):
        state = start_quiz(question_index=4, correct_count=3, incorrect_count=1)
        result = controller.submit_answer(state, "family")

        assert result.state == Idle()
        assert "4 correct and 1 incorrect, for a correct rate of 80 percent" in result.directive.speech_text
        assert result.directive.speech_text.endswith(
            "Please pick a category that you would wish to study from. "
        )
        assert result.directive.reprompt_text == "Please pick a category. "
        assert result.directive.should_end_session is False

    def test_last_question_out_of_tries_completes(self, controller):
        state = start_quiz(questions=TAXONOMY[:1], current_tries=2, incorrect_count=1)
        result = controller.submit_answer(state, "nope")

        assert result.state == Idle()
        assert "The correct answer is kingdom." in result.directive.speech_text
        assert "0 correct and 1 incorrect, for a correct rate of 0 percent" in result.directive.speech_text

    def test_no_active_quiz(self, controller):
        state = CategoryChosen(category="math")
        result = controller.submit_answer(state, "anything")

        assert result.state is state
        assert result.directive.speech_text == "No question to answer. "

    def test_tries_at_limit_rejected(self, controller):
        with pytest.raises(StateInvariantError):
            controller.submit_answer(start_quiz(current_tries=3), "kingdom")


class TestRepeatSkipEnd:
    """Tests for repeat, skip and end of quiz."""

    def test_repeat(self, controller):
        state = start_quiz(current_tries=1)
        result = controller.repeat_question(state)

        assert result.state is state
        assert result.directive.speech_text == "Rank above phylum"

    def test_repeat_without_quiz(self, controller):
        assert controller.repeat_question(Idle()).directive.speech_text == "No question to repeat. "

    def test_skip_counts_incorrect(self, controller):
        result = controller.skip_question(start_quiz())

        assert result.state.incorrect_count == 1
        assert result.state.question_index == 1
        assert result.directive.speech_text == "The correct answer is kingdom. Rank above class"

    def test_skip_after_miss_not_double_counted(self, controller):
        state = controller.submit_answer(start_quiz(), "nope").state
        result = controller.skip_question(state)

        assert result.state.incorrect_count == 1
        assert result.state.current_tries == 0

    def test_skip_last_completes(self, controller):
        result = controller.skip_question(start_quiz(question_index=4, correct_count=4))

        assert result.state == Idle()
        assert "4 correct and 1 incorrect, for a correct rate of 80 percent" in result.directive.speech_text

    def test_skip_without_quiz(self, controller):
        assert controller.skip_question(Idle()).directive.speech_text == "No question to skip. "

    def test_end_quiz_summary(self, controller):
        result = controller.end_quiz(start_quiz(question_index=4, correct_count=3, incorrect_count=1))

        assert result.state == Idle()
        assert result.directive.title == "End Quiz"
        assert "for a correct rate of 75 percent" in result.directive.speech_text

    def test_end_quiz_without_answers_has_no_summary(self, controller):
        result = controller.end_quiz(start_quiz())

        assert result.state == Idle()
        assert result.directive.speech_text == "Please pick a category that you would wish to study from. "

    def test_end_quiz_when_idle(self, controller):
        result = controller.end_quiz(Idle())
        assert result.directive.speech_text == "Currently not doing a quiz. "


class TestProcess:
    """Tests for action dispatch."""

    def test_welcome(self, controller):
        result = asyncio.run(controller.process(Idle(), Action.WELCOME))
        assert result.directive.speech_text.startswith("Welcome to Study Buddy.")
        assert result.directive.should_end_session is False

    def test_end_session(self, controller):
        result = asyncio.run(controller.process(start_quiz(), Action.END_SESSION))
        assert result.state == Idle()
        assert result.directive.should_end_session is True

    def test_invalid_action(self, controller):
        with pytest.raises(InvalidActionError):
            asyncio.run(controller.process(Idle(), "danceParty"))

    def test_unknown_state_rejected(self, controller):
        with pytest.raises(StateInvariantError):
            asyncio.run(controller.process({"category": "math"}, Action.REPEAT_QUESTION))

    def test_science_taxonomy_scenario(self, fetcher):
        """Category, quiz, three misses, then end of quiz."""
        controller = QuizController(default_catalog(), fetcher, tries_limit=3)

        async def scenario():
            result = await controller.process(Idle(), Action.SELECT_CATEGORY, {"category": "science"})
            assert "anatomy of a cell" in result.directive.speech_text
            assert "taxonomy" in result.directive.speech_text

            result = await controller.process(result.state, Action.SELECT_QUIZ, {"quiz_name": "taxonomy"})
            first = result.state.quiz[0]
            assert result.directive.speech_text == first.definition
            assert result.state.question_index == 0

            for _ in range(3):
                result = await controller.process(result.state, Action.SUBMIT_ANSWER, {"answer": "wrong"})
            assert f"The correct answer is {first.term}." in result.directive.speech_text
            assert result.state.question_index == 1
            assert result.state.incorrect_count == 1

            return await controller.process(result.state, Action.END_QUIZ)

        result = asyncio.run(scenario())

        assert "0 correct and 1 incorrect, for a correct rate of 0 percent" in result.directive.speech_text
        assert result.state == Idle()


def test_empty_fetch_is_fetch_error():
    controller = QuizController(default_catalog(), FakeFetcher(questions=[]))

    with pytest.raises(QuizFetchError):
        asyncio.run(controller.select_quiz(CategoryChosen(category="math"), "geometry"))
