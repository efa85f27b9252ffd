"""
Records module for Besto.

Notes and todos stored newest-first in their storage slots.
"""

from besto.models import NOTE_TYPES, Note, Todo, now_iso, parse_records
from besto.storage import Slot


def _items(value: object) -> list[dict]:
    """Stored items that look like records; anything else is dropped."""
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, dict)]


def _remove(slot: Slot, record_id: str) -> bool:
    """Drop the record with record_id from slot. Returns True if it existed."""
    removed = False

    def drop(prev: object) -> list[dict]:
        nonlocal removed
        items = _items(prev)
        kept = [item for item in items if item.get("id") != record_id]
        removed = len(kept) != len(items)
        return kept

    slot.set(drop)
    return removed


def matches(text: str, term: str) -> bool:
    """Case-insensitive substring match. An empty term matches everything."""
    return term.lower() in text.lower()


class NoteBook:
    """Notes kept in a single storage slot."""

    def __init__(self, slot: Slot):
        self.slot = slot

    def all(self) -> list[Note]:
        return parse_records(self.slot.get(), Note)

    def add(self, content: str, note_type: str = "note") -> Note:
        """Create a note and prepend it."""
        if not content.strip():
            raise ValueError("Note content is empty")
        if note_type not in NOTE_TYPES:
            raise ValueError(f"Invalid type: {note_type}")

        note = Note(content=content, type=note_type)
        self.slot.set(lambda prev: [note.to_storage(), *_items(prev)])
        return note

    def get(self, note_id: str) -> Note | None:
        for note in self.all():
            if note.id == note_id:
                return note
        return None

    def search(self, term: str = "") -> list[Note]:
        return [note for note in self.all() if matches(note.content, term)]

    def recent(self, limit: int = 3) -> list[Note]:
        return self.all()[:limit]

    def remove(self, note_id: str) -> bool:
        """Delete a note. Returns True if it existed."""
        return _remove(self.slot, note_id)

    def clear(self) -> None:
        self.slot.set([])

    def count(self) -> int:
        return len(self.all())


class TodoList:
    """Todos kept in a single storage slot."""

    def __init__(self, slot: Slot):
        self.slot = slot

    def all(self) -> list[Todo]:
        return parse_records(self.slot.get(), Todo)

    def add(self, title: str) -> Todo:
        """Create a todo from trimmed title and prepend it."""
        title = title.strip()
        if not title:
            raise ValueError("Todo title is empty")

        todo = Todo(title=title)
        self.slot.set(lambda prev: [todo.to_storage(), *_items(prev)])
        return todo

    def get(self, todo_id: str) -> Todo | None:
        for todo in self.all():
            if todo.id == todo_id:
                return todo
        return None

    def toggle(self, todo_id: str) -> Todo | None:
        """
        Flip a todo's completed flag in place, updating updatedAt.

        Returns the updated todo, or None if no todo has that ID.
        """
        toggled: list[Todo] = []

        def flip(prev: object) -> list[dict]:
            items = []
            for item in _items(prev):
                if item.get("id") == todo_id:
                    item = {
                        **item,
                        "completed": not item.get("completed", False),
                        "updatedAt": now_iso(),
                    }
                    toggled.append(Todo.model_validate(item))
                items.append(item)
            return items

        self.slot.set(flip)
        return toggled[0] if toggled else None

    def search(self, term: str = "") -> list[Todo]:
        return [todo for todo in self.all() if matches(todo.title, term)]

    def partition(self, term: str = "") -> tuple[list[Todo], list[Todo]]:
        """Split matching todos into (pending, completed), keeping order."""
        found = self.search(term)
        pending = [todo for todo in found if not todo.completed]
        completed = [todo for todo in found if todo.completed]
        return pending, completed

    def recent_pending(self, limit: int = 3) -> list[Todo]:
        return [todo for todo in self.all() if not todo.completed][:limit]

    def remove(self, todo_id: str) -> bool:
        """Delete a todo. Returns True if it existed."""
        return _remove(self.slot, todo_id)

    def clear(self) -> None:
        self.slot.set([])

    def count(self) -> int:
        return len(self.all())
