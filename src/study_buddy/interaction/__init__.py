"""
Interaction layer for intent routing.

Sits between the voice-platform envelope and the quiz controller, mapping
platform intents to controller actions without any guessing.
"""
from .intent_types import Action
from .intent_router import IntentRouter

__all__ = ["Action", "IntentRouter"]
