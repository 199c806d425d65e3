#!/usr/bin/env python3
"""
Flask endpoint for the Study Buddy voice skill.

The voice platform posts one event per turn; the response carries the
spoken text and the session attributes for the next turn.
"""
import asyncio
import logging
import os
from typing import Optional

from dotenv import load_dotenv
from flask import Flask, jsonify, request
from pydantic import ValidationError

from study_buddy import (
    InvalidActionError,
    QuizFetchError,
    StateInvariantError,
    StudyBuddyApp,
    load_config_from_env,
)

# Load environment variables
load_dotenv()

# Setup logging
logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[logging.StreamHandler()]
)
logger = logging.getLogger(__name__)


def _initialize_skill_from_env() -> Optional[StudyBuddyApp]:
    """Build the skill from environment variables."""
    try:
        skill = StudyBuddyApp(load_config_from_env(use_dotenv=False))
        logger.info("Skill initialized successfully from environment variables")
        return skill
    except Exception as e:
        logger.error(f"Failed to initialize skill: {str(e)}", exc_info=True)
        return None


def create_app(skill: Optional[StudyBuddyApp] = None) -> Flask:
    """
    Create the Flask app.

    :param skill: Pre-built skill (tests inject one with a fake fetcher);
        built from the environment when omitted
    """
    flask_app = Flask(__name__)
    flask_app.config["SKILL"] = skill if skill is not None else _initialize_skill_from_env()

    @flask_app.route("/health")
    def health():
        """Readiness probe."""
        ready = flask_app.config["SKILL"] is not None
        return jsonify({"status": "ok" if ready else "unavailable"}), 200 if ready else 503

    @flask_app.route("/skill", methods=["POST"])
    def skill_endpoint():
        """Voice event endpoint."""
        current = flask_app.config["SKILL"]
        if current is None:
            return jsonify({"error": "Skill not initialized. Please check configuration."}), 500

        event = request.get_json(silent=True)
        if not event:
            return jsonify({"error": "Missing event JSON in request body"}), 400

        try:
            payload = asyncio.run(current.handle(event))
        except (ValidationError, InvalidActionError, StateInvariantError) as e:
            logger.warning(f"Rejected event: {str(e)}")
            return jsonify({"error": str(e)}), 400
        except QuizFetchError as e:
            logger.error(f"Quiz fetch failed: {str(e)}", exc_info=True)
            return jsonify({"error": str(e)}), 502

        if payload is None:
            return "", 204
        return jsonify(payload)

    return flask_app


app = create_app()


if __name__ == "__main__":
    port = int(os.getenv("PORT", 5000))
    app.run(host="0.0.0.0", port=port, debug=False)
