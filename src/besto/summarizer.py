"""
Spoken summaries of notes.

Composes a prompt from a list of notes and asks the LLM for a short,
conversational summary suitable for text-to-speech.
"""

import logging
from typing import Iterable

from besto.llm import ChatClient
from besto.models import Note, NoteInput

logger = logging.getLogger(__name__)

SUMMARY_PROMPT = """You are a helpful assistant that creates concise, spoken summaries of user notes.
Create a brief, natural-sounding summary that would be good for text-to-speech.
Keep it conversational and under 100 words."""

APOLOGY = "Sorry, I could not generate a summary at this time."

# Untitled notes use the start of their content as title
TITLE_CHARS = 40


def note_title(note: NoteInput) -> str:
    if note.title:
        return note.title
    return note.content.strip()[:TITLE_CHARS]


def build_prompt(notes: Iterable[NoteInput]) -> str:
    """User prompt: one "- title: content" line per note."""
    lines = "\n".join(f"- {note_title(note)}: {note.content}" for note in notes)
    return f"Please summarize these notes in a conversational way for voice playback:\n\n{lines}"


def notes_to_inputs(notes: Iterable[Note]) -> list[NoteInput]:
    """Stored notes as summarizer input."""
    return [NoteInput(content=note.content) for note in notes]


class Summarizer:
    """LLM-powered note summarizer."""

    temperature = 0.3
    max_tokens = 200

    def __init__(self, client: ChatClient | None = None):
        self.client = client or ChatClient()

    def summarize(self, notes: list[NoteInput]) -> str:
        """Return summary text. LLM failures propagate as LLMError."""
        logger.info("Generating summary for %d notes", len(notes))
        return self.client.complete(
            [
                {"role": "system", "content": SUMMARY_PROMPT},
                {"role": "user", "content": build_prompt(notes)},
            ],
            temperature=self.temperature,
            max_tokens=self.max_tokens,
        )
