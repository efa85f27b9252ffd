"""
Voice capture pipeline for Besto.

Turns a finished transcript into a note, todo or event:
record -> stop -> confirm text and type -> save.
"""

import logging
from typing import Any

from besto.models import NOTE_TYPES, Note, Todo
from besto.records import NoteBook, TodoList

logger = logging.getLogger(__name__)


def save_record(text: str, record_type: str, notes: NoteBook, todos: TodoList) -> Note | Todo | None:
    """
    Persist captured text as the chosen type.

    Todos go to the todo list; notes and events go to the notebook.
    Blank text saves nothing and returns None.
    """
    if not text.strip():
        return None
    if record_type not in NOTE_TYPES:
        raise ValueError(f"Invalid type: {record_type}")

    if record_type == "todo":
        record: Note | Todo = todos.add(text)
    else:
        record = notes.add(text, record_type)

    logger.info("Captured %s %s", record_type, record.id)
    return record


class CaptureSession:
    """
    State of the home screen's record button and categorize dialog.

    The transcript arrives asynchronously while recording; it is only
    read once, when recording stops.
    """

    def __init__(self, speech: Any, notes: NoteBook, todos: TodoList):
        self.speech = speech
        self.notes = notes
        self.todos = todos
        self.dialog_open = False
        self.recorded_text = ""
        self.selected_type = "note"

    @property
    def is_recording(self) -> bool:
        return self.speech.is_recording

    @property
    def is_supported(self) -> bool:
        return self.speech.is_supported

    def toggle(self) -> None:
        """Start recording, or stop and open the dialog if anything was heard."""
        if self.speech.is_recording:
            transcript = self.speech.stop().strip()
            if transcript:
                self.recorded_text = transcript
                self.dialog_open = True
        else:
            self.speech.start()

    def select(self, record_type: str) -> None:
        if record_type not in NOTE_TYPES:
            raise ValueError(f"Invalid type: {record_type}")
        self.selected_type = record_type

    def suggest_type(self, classifier: Any) -> str:
        """Pre-select a type from the LLM's intent for the recorded text."""
        from besto.classifier import intent_to_type

        classification = classifier.classify(self.recorded_text)
        self.select(intent_to_type(classification.intent))
        return self.selected_type

    def save(self) -> Note | Todo | None:
        """Save the recorded text as the selected type and reset the dialog."""
        if not self.recorded_text.strip():
            return None

        record = save_record(self.recorded_text, self.selected_type, self.notes, self.todos)
        self.dialog_open = False
        self.recorded_text = ""
        self.selected_type = "note"
        return record

    def cancel(self) -> None:
        """Close the dialog without saving."""
        self.dialog_open = False


def capture_text(text: str, record_type: str = "note") -> Note | Todo | None:
    """Capture typed or piped text through the same save path."""
    from besto.storage import open_slots

    notes_slot, todos_slot = open_slots()
    return save_record(text.strip(), record_type, NoteBook(notes_slot), TodoList(todos_slot))
