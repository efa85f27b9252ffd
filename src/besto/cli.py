"""
CLI for Besto.

Minimal CLI using stdlib for fast startup on the capture path.
Subcommands are imported lazily to avoid startup overhead.

Usage:
    besto                           # Home screen
    besto record                    # Voice capture
    besto "your thought here"       # Capture typed text
    besto --help                    # Show help
"""

import sys

TYPE_CHOICES = ("note", "todo", "event")


def print_help() -> None:
    """Print help message."""
    print("""besto - voice-powered notes and todos

Usage:
    besto                         Show the home screen
    besto "your thought here"     Capture text as a note (--as todo|event)

Commands:
    besto record [options]        Record by voice (--as <type>, --suggest)
    besto notes [query]           List or search notes
    besto todos [query]           List or search todos
    besto add-todo <title>        Add a todo
    besto toggle <id>             Toggle a todo's completed flag
    besto share <id>              Print a note or todo's text
    besto settings                Show data counts and about
    besto export [path]           Export all data as JSON
    besto clear [--yes]           Delete all notes and todos
    besto classify <text>         Classify text with the LLM
    besto summarize               Spoken summary of your notes
    besto serve [--host H] [--port P]
                                  Run the classify/summarize API

Options:
    besto --help, -h              Show this help
    besto --version, -v           Show version

Examples:
    besto "Buy milk" --as todo
    besto record --suggest
    besto todos milk
    besto export ~/backups""")


def print_version() -> None:
    """Print version."""
    from besto import __version__
    print(f"besto {__version__}")


def open_records():
    """Return (NoteBook, TodoList) over the default storage."""
    from besto.config import ensure_dirs
    from besto.records import NoteBook, TodoList
    from besto.storage import open_slots

    ensure_dirs()
    notes_slot, todos_slot = open_slots()
    return NoteBook(notes_slot), TodoList(todos_slot)


def pop_option(args: list[str], *names: str) -> str | None:
    """Remove `--name value` from args and return value."""
    for i, arg in enumerate(args):
        if arg in names and i + 1 < len(args):
            value = args[i + 1]
            del args[i:i + 2]
            return value
    return None


def pop_flag(args: list[str], *names: str) -> bool:
    """Remove a boolean flag from args."""
    for i, arg in enumerate(args):
        if arg in names:
            del args[i]
            return True
    return False


def parse_type(value: str | None) -> str:
    if value is None:
        return "note"
    if value not in TYPE_CHOICES:
        raise ValueError(f"Invalid type: {value} (choose note, todo or event)")
    return value


def prompt_type(default: str) -> str:
    """Ask for a record type until the answer is valid. Enter keeps default."""
    while True:
        choice = input(f"Type [note/todo/event] ({default}): ").strip().lower()
        if not choice:
            return default
        if choice in TYPE_CHOICES:
            return choice
        print(f"Invalid type: {choice} (choose note, todo or event)", file=sys.stderr)


def capture(text: str, record_type: str = "note") -> str:
    """
    Capture text as a record.

    Returns the record ID.
    """
    from besto.capture import capture_text
    from besto.config import ensure_dirs

    ensure_dirs()
    record = capture_text(text, record_type)
    if record is None:
        raise ValueError("Empty thought")
    return record.id


def cmd_home() -> int:
    """Show the home screen."""
    from besto.config import load_config
    from besto.screens import render_home
    from besto.speech import SpeechCapture

    try:
        notes, todos = open_records()
        speech = SpeechCapture.from_config(load_config())
        print(render_home(notes, todos, speech_supported=speech.is_supported))
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_record(args: list[str]) -> int:
    """Record by voice, confirm the text and type, then save."""
    from besto.capture import CaptureSession
    from besto.config import load_config
    from besto.speech import SpeechCapture

    try:
        record_type = pop_option(args, "--as", "-t")
        suggest = pop_flag(args, "--suggest", "-s")
        config = load_config()
        notes, todos = open_records()
        session = CaptureSession(SpeechCapture.from_config(config), notes, todos)

        if not session.is_supported:
            print("[ERROR] VOICE MODULE UNAVAILABLE", file=sys.stderr)
            return 1

        session.toggle()
        print("VOICE ACTIVE - press Enter to stop.")
        input()
        session.toggle()

        if not session.dialog_open:
            print("Nothing was heard.")
            return 0

        print(f"> {session.recorded_text}")
        edited = input("Edit text (Enter to keep): ").strip()
        if edited:
            session.recorded_text = edited

        if record_type:
            session.select(parse_type(record_type))
        else:
            if suggest:
                from besto.classifier import Classifier
                from besto.errors import ClassificationFailed

                try:
                    session.suggest_type(Classifier())
                except ClassificationFailed as e:
                    print(f"Suggestion unavailable: {e}", file=sys.stderr)
            session.select(prompt_type(session.selected_type))

        saved_type = session.selected_type
        record = session.save()
        if record is None:
            session.cancel()
            print("Nothing saved.")
            return 0
        print(f"Saved {saved_type}: {record.id}")
        return 0
    except (KeyboardInterrupt, EOFError):
        print("\nCancelled.", file=sys.stderr)
        return 1
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_notes(args: list[str]) -> int:
    """List or search notes."""
    from besto.screens import render_notes

    try:
        notes, _ = open_records()
        print(render_notes(notes, " ".join(args)))
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_todos(args: list[str]) -> int:
    """List or search todos."""
    from besto.screens import render_todos

    try:
        _, todos = open_records()
        print(render_todos(todos, " ".join(args)))
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_add_todo(args: list[str]) -> int:
    """Add a todo manually."""
    if not args:
        print("Usage: besto add-todo <title>", file=sys.stderr)
        return 1

    try:
        _, todos = open_records()
        todo = todos.add(" ".join(args))
        print(f"Todo added: {todo.id}")
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_toggle(args: list[str]) -> int:
    """Toggle a todo's completed flag."""
    if not args:
        print("Usage: besto toggle <id>", file=sys.stderr)
        return 1

    todo_id = args[0]

    try:
        _, todos = open_records()
        todo = todos.toggle(todo_id)
        if todo is None:
            print(f"Todo not found: {todo_id}", file=sys.stderr)
            return 1
        state = "Completed" if todo.completed else "Reopened"
        print(f"{state}: {todo.title}")
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_share(args: list[str]) -> int:
    """Print a note's content or a todo's title."""
    if not args:
        print("Usage: besto share <id>", file=sys.stderr)
        return 1

    record_id = args[0]

    try:
        notes, todos = open_records()
        if note := notes.get(record_id):
            print(note.content)
            return 0
        if todo := todos.get(record_id):
            print(todo.title)
            return 0
        print(f"Not found: {record_id}", file=sys.stderr)
        return 1
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_settings() -> int:
    """Show settings."""
    from besto.screens import render_settings

    try:
        notes, todos = open_records()
        print(render_settings(notes, todos))
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_export(args: list[str]) -> int:
    """Export all data as JSON."""
    from pathlib import Path

    from besto.screens import write_export

    try:
        notes, todos = open_records()
        target = Path(args[0]).expanduser() if args else None
        path = write_export(notes, todos, target)
        print(f"Data exported: {path}")
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_clear(args: list[str]) -> int:
    """Delete all notes and todos after confirmation."""
    from besto.screens import clear_all_data

    if not pop_flag(args, "--yes", "-y"):
        try:
            answer = input(
                "Are you sure you want to clear all data? This action cannot be undone. [y/N] "
            )
        except EOFError:
            answer = ""
        if answer.strip().lower() not in ("y", "yes"):
            print("Cancelled.")
            return 0

    try:
        notes, todos = open_records()
        clear_all_data(notes, todos)
        print("Data cleared: all your notes and todos have been deleted.")
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_classify(args: list[str]) -> int:
    """Classify text and print the JSON result."""
    from besto.classifier import Classifier

    if not args:
        print("Usage: besto classify <text>", file=sys.stderr)
        return 1

    try:
        classification = Classifier().classify(" ".join(args))
        print(classification.model_dump_json(indent=2, exclude_none=True))
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_summarize() -> int:
    """Print a spoken-style summary of all notes."""
    from besto.summarizer import Summarizer, notes_to_inputs

    try:
        notes, _ = open_records()
        all_notes = notes.all()
        if not all_notes:
            print("No notes yet")
            return 0
        print(Summarizer().summarize(notes_to_inputs(all_notes)))
        return 0
    except Exception as e:
        from besto.summarizer import APOLOGY

        print(APOLOGY)
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_serve(args: list[str]) -> int:
    """Run the HTTP API."""
    from besto.server import serve

    host = pop_option(args, "--host")
    port = pop_option(args, "--port", "-p")

    try:
        serve(host=host, port=int(port) if port else None)
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def main(argv: list[str] | None = None) -> int:
    """
    Main entry point.

    Optimized for minimal startup time on the capture path.
    """
    from besto.logging_config import configure_logging

    configure_logging("WARNING")
    args = list(sys.argv[1:] if argv is None else argv)

    # No args - piped input is captured, otherwise show home
    if not args:
        if not sys.stdin.isatty():
            text = sys.stdin.read().strip()
            if text:
                print(capture(text))
                return 0
        return cmd_home()

    first_arg = args[0]

    if first_arg in ("--help", "-h", "help"):
        print_help()
        return 0

    if first_arg in ("--version", "-v", "version"):
        print_version()
        return 0

    # Subcommands (lazy import to keep startup fast)
    if first_arg == "home":
        return cmd_home()

    if first_arg == "record":
        return cmd_record(args[1:])

    if first_arg == "notes":
        return cmd_notes(args[1:])

    if first_arg == "todos":
        return cmd_todos(args[1:])

    if first_arg == "add-todo":
        return cmd_add_todo(args[1:])

    if first_arg == "toggle":
        return cmd_toggle(args[1:])

    if first_arg == "share":
        return cmd_share(args[1:])

    if first_arg == "settings":
        return cmd_settings()

    if first_arg == "export":
        return cmd_export(args[1:])

    if first_arg == "clear":
        return cmd_clear(args[1:])

    if first_arg == "classify":
        return cmd_classify(args[1:])

    if first_arg == "summarize":
        return cmd_summarize()

    if first_arg == "serve":
        return cmd_serve(args[1:])

    # Everything else is text to capture
    try:
        record_type = parse_type(pop_option(args, "--as", "-t"))
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    text = " ".join(args)
    if not text.strip() and not sys.stdin.isatty():
        text = sys.stdin.read()
    if not text.strip():
        print("Error: Empty thought", file=sys.stderr)
        return 1

    try:
        print(capture(text, record_type))
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
