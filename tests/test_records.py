from __future__ import annotations

import pytest

from besto.records import NoteBook, TodoList


def _todo(todo_id: str, title: str, completed: bool = False) -> dict[str, object]:
    return {
        "id": todo_id,
        "title": title,
        "completed": completed,
        "createdAt": "2024-05-01T10:00:00+00:00",
        "updatedAt": "2024-05-01T10:00:00+00:00",
    }


def test_notes_are_prepended_newest_first(notes: NoteBook) -> None:
    notes.add("first")
    notes.add("second", "event")
    notes.add("third")

    assert [note.content for note in notes.all()] == ["third", "second", "first"]
    assert notes.all()[1].type == "event"
    assert [note.content for note in notes.recent(2)] == ["third", "second"]


def test_note_storage_uses_camel_case_fields(notes: NoteBook) -> None:
    note = notes.add("stored shape")
    stored = notes.slot.get()[0]

    assert stored["id"] == note.id
    assert stored["content"] == "stored shape"
    assert stored["type"] == "note"
    assert set(stored) == {"id", "content", "type", "createdAt", "updatedAt"}
    assert note.id.isdigit()


def test_note_add_rejects_blank_and_unknown_type(notes: NoteBook) -> None:
    with pytest.raises(ValueError):
        notes.add("   ")
    with pytest.raises(ValueError):
        notes.add("text", "reminder")
    assert notes.count() == 0


def test_note_search_is_case_insensitive_substring(notes: NoteBook) -> None:
    notes.add("Call the Dentist")
    notes.add("buy milk")

    assert [note.content for note in notes.search("dentist")] == ["Call the Dentist"]
    assert [note.content for note in notes.search("MILK")] == ["buy milk"]
    assert len(notes.search("")) == 2
    assert notes.search("zebra") == []


def test_malformed_stored_items_are_skipped(notes: NoteBook) -> None:
    notes.slot.set([
        {"id": "1", "content": "ok", "type": "note", "createdAt": "a", "updatedAt": "a"},
        {"id": "2"},
        "garbage",
    ])

    assert [note.id for note in notes.all()] == ["1"]


def test_note_remove_and_clear(notes: NoteBook) -> None:
    note = notes.add("to delete")
    assert notes.remove("missing") is False
    assert notes.remove(note.id) is True
    assert notes.count() == 0

    notes.add("another")
    notes.clear()
    assert notes.all() == []


def test_todo_add_trims_and_prepends(todos: TodoList) -> None:
    todos.add("  first  ")
    todo = todos.add("second")

    assert [t.title for t in todos.all()] == ["second", "first"]
    assert todo.completed is False
    assert "content" not in todos.slot.get()[0]

    with pytest.raises(ValueError):
        todos.add("   ")


def test_todo_toggle_flips_flag_and_updates_timestamp(todos: TodoList) -> None:
    todos.slot.set([_todo("2", "walk dog"), _todo("1", "buy milk")])

    toggled = todos.toggle("1")

    assert toggled is not None
    assert toggled.completed is True
    assert toggled.updated_at != "2024-05-01T10:00:00+00:00"
    assert toggled.created_at == "2024-05-01T10:00:00+00:00"
    # Order is preserved and the other todo untouched.
    stored = todos.slot.get()
    assert [item["id"] for item in stored] == ["2", "1"]
    assert stored[0]["completed"] is False

    assert todos.toggle("1").completed is False  # type: ignore[union-attr]


def test_todo_toggle_unknown_id_returns_none(todos: TodoList) -> None:
    todos.slot.set([_todo("1", "buy milk")])
    assert todos.toggle("nope") is None
    assert todos.slot.get() == [_todo("1", "buy milk")]


def test_todo_partition_and_recent_pending(todos: TodoList) -> None:
    todos.slot.set([
        _todo("5", "milk run", completed=True),
        _todo("4", "pay rent"),
        _todo("3", "buy Milk"),
        _todo("2", "call mom"),
        _todo("1", "fix bike"),
    ])

    pending, completed = todos.partition("milk")
    assert [t.id for t in pending] == ["3"]
    assert [t.id for t in completed] == ["5"]

    assert [t.id for t in todos.recent_pending()] == ["4", "3", "2"]


def test_todo_remove_and_count(todos: TodoList) -> None:
    todos.slot.set([_todo("1", "a"), _todo("2", "b")])
    assert todos.remove("1") is True
    assert todos.count() == 1
    assert todos.get("2") is not None
    assert todos.get("1") is None


def test_todo_toggle_notifies_subscribers_with_stored_list(todos: TodoList) -> None:
    todos.slot.set([_todo("1", "buy milk")])
    seen: list[object] = []
    todos.slot.subscribe(seen.append)

    todos.toggle("1")

    assert len(seen) == 1
    assert seen[0] == todos.slot.get()
    assert todos.slot.get()[0]["completed"] is True
