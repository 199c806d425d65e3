"""
Deterministic intent router.

Maps the voice platform's intent names and slots onto controller actions.
"""
from typing import Dict, Mapping, Optional, Tuple

from ..exceptions import InvalidActionError
from .intent_types import Action


class IntentRouter:
    """
    Deterministic intent router.

    Every platform intent maps to exactly one action; anything else is
    rejected rather than guessed at.
    """

    INTENTS: Dict[str, Action] = {
        "categorySelect": Action.SELECT_CATEGORY,
        "quizSelect": Action.SELECT_QUIZ,
        "answerQuestion": Action.SUBMIT_ANSWER,
        "repeatQuestion": Action.REPEAT_QUESTION,
        "skipQuestion": Action.SKIP_QUESTION,
        "endQuiz": Action.END_QUIZ,
        "AMAZON.StopIntent": Action.END_SESSION,
        "AMAZON.CancelIntent": Action.END_SESSION,
        "endSkill": Action.END_SESSION,
    }

    # Slot carrying each action's parameter, keyed by controller param name.
    SLOTS: Dict[Action, Tuple[str, str]] = {
        Action.SELECT_CATEGORY: ("category", "category"),
        Action.SELECT_QUIZ: ("quiz", "quiz_name"),
        Action.SUBMIT_ANSWER: ("answer", "answer"),
    }

    def route(self, intent_name: Optional[str]) -> Action:
        """
        Route an intent name to an action.

        :param intent_name: Platform intent name
        :return: Action enum value
        :raises InvalidActionError: for unknown or missing intent names
        """
        if not intent_name or intent_name not in self.INTENTS:
            raise InvalidActionError(f"Invalid intent: {intent_name!r}")
        return self.INTENTS[intent_name]

    def params_for(self, action: Action, slot_values: Mapping[str, Optional[str]]) -> Dict[str, Optional[str]]:
        """
        Extract controller parameters from slot values.

        :param action: Routed action
        :param slot_values: Slot name to spoken value (None when unfilled)
        :return: Keyword params for the controller
        """
        if action not in self.SLOTS:
            return {}
        slot_name, param_name = self.SLOTS[action]
        return {param_name: slot_values.get(slot_name)}
