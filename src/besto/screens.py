"""
Terminal screens for Besto: Home, Notes, Todos and Settings.

Each render function reads from the records layer and returns text.
"""

import json
import os
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any

from besto import __version__
from besto.models import Note, Todo, now_iso
from besto.records import NoteBook, TodoList

TAGLINE = "Capture ideas instantly, act on them effortlessly"


class Colors:
    """ANSI color codes for terminal output."""
    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"

    RED = "\033[31m"
    GREEN = "\033[32m"
    BLUE = "\033[34m"

    BRIGHT_BLACK = "\033[90m"  # Gray
    BRIGHT_RED = "\033[91m"
    BRIGHT_GREEN = "\033[92m"
    BRIGHT_YELLOW = "\033[93m"
    BRIGHT_CYAN = "\033[96m"

    @classmethod
    def enabled(cls) -> bool:
        """Colors are off when NO_COLOR is set."""
        return not os.environ.get("NO_COLOR")


def c(text: str, *codes: str) -> str:
    """Apply color codes to text if colors are enabled."""
    if not Colors.enabled():
        return text
    return "".join(codes) + text + Colors.RESET


TYPE_COLORS = {
    "note": Colors.BRIGHT_BLACK,
    "todo": Colors.BLUE,
    "event": Colors.GREEN,
}


def format_timestamp(value: str, with_time: bool = True) -> str:
    """Render an ISO timestamp in local time; unparsable values pass through."""
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return value
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone()
    return parsed.strftime("%Y-%m-%d %H:%M" if with_time else "%Y-%m-%d")


def section(title: str, color: str = Colors.BRIGHT_CYAN) -> str:
    return c(f"━━━ {title} ━━━", Colors.BOLD, color)


def render_home(notes: NoteBook, todos: TodoList, speech_supported: bool = True) -> str:
    """Home: banner, voice status, three recent notes and three pending todos."""
    lines = [
        c("B.E.S.T.O", Colors.BOLD, Colors.BRIGHT_CYAN),
        c("BIOLOGICAL ENHANCEMENT SYSTEM FOR TACTICAL OPERATIONS", Colors.DIM),
        "",
    ]

    if not speech_supported:
        lines.append(c("[ERROR] VOICE MODULE UNAVAILABLE", Colors.BRIGHT_RED))
        lines.append("")

    lines.append(section("RECENT_NOTES"))
    recent_notes = notes.recent(3)
    if recent_notes:
        for note in recent_notes:
            lines.append(f"• {note.content}")
            lines.append(c(f"  {format_timestamp(note.created_at)}", Colors.DIM))
    else:
        lines.append(c("[NO DATA AVAILABLE]", Colors.DIM))
    lines.append("")

    lines.append(section("PENDING_TASKS", Colors.BRIGHT_YELLOW))
    recent_todos = todos.recent_pending(3)
    if recent_todos:
        for todo in recent_todos:
            lines.append(f"• {todo.title}")
            lines.append(c(f"  {format_timestamp(todo.created_at)}", Colors.DIM))
    else:
        lines.append(c("[NO TASKS SCHEDULED]", Colors.DIM))

    return "\n".join(lines)


def render_note(note: Note) -> str:
    badge = c(f"[{note.type}]", TYPE_COLORS.get(note.type, Colors.DIM))
    created = c(format_timestamp(note.created_at, with_time=False), Colors.DIM)
    return f"{badge} {created}  {c(note.id, Colors.DIM)}\n  {note.content}"


def render_notes(notes: NoteBook, term: str = "") -> str:
    """Notes: search results or the empty state."""
    lines = [section("Notes"), ""]
    found = notes.search(term)

    if found:
        for note in found:
            lines.append(render_note(note))
    elif term:
        lines.append(f'No notes found for "{term}"')
        lines.append(c("Try adjusting your search", Colors.DIM))
    else:
        lines.append("No notes yet")
        lines.append(c("Start recording your first voice note from the home screen", Colors.DIM))

    return "\n".join(lines)


def render_todo(todo: Todo) -> str:
    box = "[x]" if todo.completed else "[ ]"
    title = c(todo.title, Colors.DIM) if todo.completed else todo.title
    meta = format_timestamp(todo.created_at, with_time=False)
    if todo.completed:
        meta += " • Completed"
    return f"{box} {title}\n    {c(meta, Colors.DIM)}  {c(todo.id, Colors.DIM)}"


def render_todos(todos: TodoList, term: str = "") -> str:
    """Todos: stats, pending and completed sections, or the empty state."""
    pending, completed = todos.partition(term)
    lines = [
        section("Todos"),
        "",
        f"{c(str(len(pending)), Colors.BOLD)} Pending   "
        f"{c(str(len(completed)), Colors.BOLD, Colors.BRIGHT_GREEN)} Completed",
        "",
    ]

    if pending:
        lines.append(c(f"Pending ({len(pending)})", Colors.BOLD))
        lines.extend(render_todo(todo) for todo in pending)
        lines.append("")

    if completed:
        lines.append(c(f"Completed ({len(completed)})", Colors.BOLD, Colors.BRIGHT_GREEN))
        lines.extend(render_todo(todo) for todo in completed)
        lines.append("")

    if not pending and not completed:
        if term:
            lines.append(f'No todos found for "{term}"')
            lines.append(c("Try adjusting your search", Colors.DIM))
        else:
            lines.append("No todos yet")
            lines.append(c(
                "Add your first todo or record one with voice from the home screen",
                Colors.DIM,
            ))

    return "\n".join(lines).rstrip("\n")


def render_settings(notes: NoteBook, todos: TodoList) -> str:
    """Settings: data counts and about text."""
    return "\n".join([
        section("Settings"),
        "",
        c("Your Data", Colors.BOLD),
        f"  Notes: {notes.count()}",
        f"  Todos: {todos.count()}",
        "",
        c("About Besto", Colors.BOLD),
        f"  Version: {__version__}",
        f"  Tagline: {TAGLINE}",
        "",
        "  Besto is your intelligent voice-powered note-taking companion.",
        "  Record your thoughts, organize them into notes or todos, and turn ideas into action.",
    ])


def export_data(notes: NoteBook, todos: TodoList) -> dict[str, Any]:
    """All stored data plus an export timestamp."""
    return {
        "notes": [note.to_storage() for note in notes.all()],
        "todos": [todo.to_storage() for todo in todos.all()],
        "exportedAt": now_iso(),
    }


def export_filename(today: date | None = None) -> str:
    today = today or datetime.now(timezone.utc).date()
    return f"besto-data-{today.isoformat()}.json"


def write_export(notes: NoteBook, todos: TodoList, path: Path | None = None) -> Path:
    """
    Write the export as indented JSON.

    A directory, or a path without a suffix, gets the dated filename inside it.
    """
    path = path or Path.cwd()
    if path.is_dir() or (not path.exists() and not path.suffix):
        path.mkdir(parents=True, exist_ok=True)
        path = path / export_filename()
    path.write_text(json.dumps(export_data(notes, todos), indent=2, ensure_ascii=False), encoding="utf-8")
    return path


def clear_all_data(notes: NoteBook, todos: TodoList) -> None:
    """Delete every note and todo."""
    notes.clear()
    todos.clear()
