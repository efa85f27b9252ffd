"""
Data models for Besto.

Records keep the camelCase field names of the stored JSON
(createdAt, updatedAt) while exposing snake_case attributes.
"""

import logging
import time
from datetime import datetime, timezone
from typing import Any, Literal

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    ValidatorFunctionWrapHandler,
    field_validator,
)

logger = logging.getLogger(__name__)

NoteType = Literal["note", "todo", "event"]
NOTE_TYPES: tuple[str, ...] = ("note", "todo", "event")

Intent = Literal[
    "CREATE_NOTE",
    "CREATE_TODO",
    "CREATE_EVENT",
    "ASK_CALENDAR_AGENDA",
    "SUMMARIZE_NOTE",
]


def generate_id() -> str:
    """Generate a record ID (Unix timestamp in milliseconds)."""
    return str(int(time.time() * 1000))


def now_iso() -> str:
    """Current UTC time as an ISO 8601 string."""
    return datetime.now(timezone.utc).isoformat()


class Record(BaseModel):
    """Common fields for stored records."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(default_factory=generate_id)
    created_at: str = Field(default_factory=now_iso, alias="createdAt")
    updated_at: str = Field(default_factory=now_iso, alias="updatedAt")

    def to_storage(self) -> dict[str, Any]:
        """Dump with stored field names, omitting unset optionals."""
        return self.model_dump(by_alias=True, exclude_none=True)


class Note(Record):
    """A captured note. Never mutated after creation."""

    content: str
    type: NoteType = "note"


class Todo(Record):
    """A todo item; completed is toggled in place."""

    title: str
    content: str | None = None
    completed: bool = False


class AppEvent(Record):
    """A calendar event."""

    title: str
    content: str | None = None
    date: str


def parse_records(items: Any, model: type[Record]) -> list[Any]:
    """Validate stored items, skipping (and logging) any that are malformed."""
    if not isinstance(items, list):
        logger.warning("Expected a list of %s records, got %s", model.__name__, type(items).__name__)
        return []

    records = []
    for item in items:
        try:
            records.append(model.model_validate(item))
        except ValidationError as e:
            logger.warning("Skipping malformed %s record: %s", model.__name__, e)
    return records


# Wire models for the HTTP endpoints

class ClassifyRequest(BaseModel):
    """Body of POST /classify-intent."""

    text: str


class Entities(BaseModel):
    """Entities extracted from classified speech."""

    title: str | None = None
    body: str | None = None
    priority: str | None = None
    datetime: str | None = None
    duration: int | None = None
    date_scope: str | None = None

    @field_validator("*", mode="wrap")
    @classmethod
    def _drop_invalid(cls, value: Any, handler: ValidatorFunctionWrapHandler) -> Any:
        """A field of the wrong shape becomes None instead of failing the reply."""
        try:
            return handler(value)
        except ValidationError:
            return None


class Classification(BaseModel):
    """Intent plus extracted entities."""

    intent: Intent = "CREATE_NOTE"
    entities: Entities = Field(default_factory=Entities)

    @field_validator("entities", mode="wrap")
    @classmethod
    def _default_entities(cls, value: Any, handler: ValidatorFunctionWrapHandler) -> Entities:
        try:
            return handler(value)
        except ValidationError:
            return Entities()


class NoteInput(BaseModel):
    """A note sent for summarization."""

    title: str | None = None
    content: str = ""


class SummarizeRequest(BaseModel):
    """Body of POST /text-to-speech."""

    notes: list[NoteInput]


class SummaryResponse(BaseModel):
    """Summary text for voice playback."""

    summary: str
