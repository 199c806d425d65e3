"""
Voice-platform envelope.

Decodes one inbound event, runs the turn through the quiz controller and
builds the outbound response payload. Session state travels in the
session attributes of each request and response.
"""
import logging
from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field

from .exceptions import InvalidActionError
from .interaction import Action, IntentRouter
from .memory.session_state import from_attributes, to_attributes
from .schemas import Directive
from .service.quiz_controller import QuizController

logger = logging.getLogger(__name__)


class _EventModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class Application(_EventModel):
    application_id: Optional[str] = Field(default=None, alias="applicationId")


class Session(_EventModel):
    new: bool = False
    session_id: Optional[str] = Field(default=None, alias="sessionId")
    attributes: Optional[Dict[str, Any]] = None
    application: Optional[Application] = None


class Slot(_EventModel):
    name: Optional[str] = None
    value: Optional[str] = None


class Intent(_EventModel):
    name: str
    slots: Dict[str, Slot] = Field(default_factory=dict)

    def slot_values(self) -> Dict[str, Optional[str]]:
        return {name: slot.value for name, slot in self.slots.items()}


class Request(_EventModel):
    type: str
    request_id: Optional[str] = Field(default=None, alias="requestId")
    intent: Optional[Intent] = None
    reason: Optional[str] = None


class VoiceEvent(_EventModel):
    session: Session = Field(default_factory=Session)
    request: Request


def build_speechlet_response(directive: Directive) -> Dict[str, Any]:
    """Build the response body for one directive."""
    response: Dict[str, Any] = {
        "outputSpeech": {
            "type": "PlainText",
            "text": directive.speech_text,
        },
        "card": {
            "type": "Simple",
            "title": f"SessionSpeechlet - {directive.title}",
            "content": f"SessionSpeechlet - {directive.speech_text}",
        },
        "shouldEndSession": directive.should_end_session,
    }
    if directive.reprompt_text:
        response["reprompt"] = {
            "outputSpeech": {
                "type": "PlainText",
                "text": directive.reprompt_text,
            },
        }
    return response


def build_response(session_attributes: Dict[str, Any], speechlet_response: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "version": "1.0",
        "sessionAttributes": session_attributes,
        "response": speechlet_response,
    }


async def handle_event(
    event: Mapping[str, Any],
    controller: QuizController,
    router: Optional[IntentRouter] = None,
) -> Optional[Dict[str, Any]]:
    """
    Process one voice event.

    :param event: Raw event JSON
    :param controller: Quiz controller to run the turn
    :param router: Intent router (default router when omitted)
    :return: Response payload, or None for a session-ended notification
    :raises pydantic.ValidationError: if the event is malformed
    :raises InvalidActionError: for unknown request types or intents
    :raises QuizFetchError: if a quiz cannot be loaded
    :raises StateInvariantError: if the stored session attributes are inconsistent
    """
    parsed = VoiceEvent.model_validate(event)
    router = router or IntentRouter()
    session_id = parsed.session.session_id
    request = parsed.request

    if parsed.session.new:
        logger.info(f"Session started requestId={request.request_id}, sessionId={session_id}")

    if request.type == "SessionEndedRequest":
        logger.info(f"Session ended requestId={request.request_id}, sessionId={session_id}, reason={request.reason}")
        return None

    state = from_attributes(parsed.session.attributes)

    if request.type == "LaunchRequest":
        logger.info(f"Launch requestId={request.request_id}, sessionId={session_id}")
        result = await controller.process(state, Action.WELCOME)
    elif request.type == "IntentRequest":
        if request.intent is None:
            raise InvalidActionError("IntentRequest without an intent")
        action = router.route(request.intent.name)
        params = router.params_for(action, request.intent.slot_values())
        logger.info(f"Intent {request.intent.name} -> {action.value}, sessionId={session_id}")
        result = await controller.process(state, action, params)
    else:
        raise InvalidActionError(f"Unsupported request type: {request.type!r}")

    return build_response(to_attributes(result.state), build_speechlet_response(result.directive))
