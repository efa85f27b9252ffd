"""
LLM intent classifier for Besto.

Labels transcribed speech with one of five intents and extracts
entities (title, body, priority, datetime, duration, date_scope).
"""

import json
import logging
import time
from typing import Any

from pydantic import ValidationError

from besto.errors import ClassificationFailed, LLMError
from besto.llm import ChatClient
from besto.models import Classification, Entities

logger = logging.getLogger(__name__)


CLASSIFIER_PROMPT = """You are an AI assistant that classifies user speech into intents for a voice note-taking app. Analyze the user's speech and classify it into one of these intents:

1. CREATE_NOTE - General note taking, thoughts, ideas (default intent)
2. CREATE_TODO - When user explicitly mentions tasks, todos, reminders with action words
3. CREATE_EVENT - When user mentions scheduling, meetings, appointments with specific times
4. ASK_CALENDAR_AGENDA - When user asks about their schedule, calendar, upcoming events
5. SUMMARIZE_NOTE - When user asks to summarize their notes

Extract these entities if present:
- title: Short title for the item
- body: Main content
- priority: high/medium/low
- datetime: ISO date string for events/todos
- duration: Duration in minutes for events
- date_scope: today/tomorrow/week/month for agenda queries

Return JSON format:
{
  "intent": "CREATE_NOTE",
  "entities": {
    "title": "extracted title",
    "body": "extracted content",
    "priority": "medium",
    "datetime": "2024-01-01T10:00:00Z",
    "duration": 60
  }
}"""

FALLBACK_TITLE = "Voice Note"
ERROR_BODY = "Error processing voice input"

# Intent -> record type offered in the capture dialog
INTENT_TYPES = {
    "CREATE_TODO": "todo",
    "CREATE_EVENT": "event",
}


def fallback_classification(body: str) -> Classification:
    """Default CREATE_NOTE classification keeping the raw text as body."""
    return Classification(
        intent="CREATE_NOTE",
        entities=Entities(title=FALLBACK_TITLE, body=body, priority="medium"),
    )


def intent_to_type(intent: str) -> str:
    """Map an intent to note, todo or event."""
    return INTENT_TYPES.get(intent, "note")


def strip_code_fences(text: str) -> str:
    """Remove a surrounding ```json ... ``` block if present."""
    text = text.strip()
    if text.startswith("```"):
        lines = text.split("\n")[1:]
        if lines and lines[-1].strip() == "```":
            lines = lines[:-1]
        text = "\n".join(lines)
    return text


class Classifier:
    """LLM-powered intent classifier."""

    temperature = 0.1
    max_tokens = 500

    def __init__(self, client: ChatClient | None = None):
        self.client = client or ChatClient()

    def classify(self, text: str) -> Classification:
        """
        Classify free text.

        Unparsable LLM output falls back to CREATE_NOTE. Failures talking
        to the LLM raise ClassificationFailed.
        """
        start_time = time.time()
        logger.info("Classifying text: %s", text)

        try:
            content = self.client.complete(
                [
                    {"role": "system", "content": CLASSIFIER_PROMPT},
                    {"role": "user", "content": text},
                ],
                temperature=self.temperature,
                max_tokens=self.max_tokens,
            )
        except LLMError as e:
            raise ClassificationFailed(str(e)) from e

        classification = self._parse_response(content, text)
        logger.info(
            "Final classification: %s (%d ms)",
            classification.intent,
            int((time.time() - start_time) * 1000),
        )
        return classification

    def _parse_response(self, content: str, text: str) -> Classification:
        """Parse and validate LLM output, falling back on any problem."""
        try:
            data: Any = json.loads(strip_code_fences(content))
            return Classification.model_validate(data)
        except (json.JSONDecodeError, ValidationError) as e:
            logger.error("Failed to parse JSON response: %s (%s)", content, e)
            return fallback_classification(text)
