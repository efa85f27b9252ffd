"""
Storage module for Besto.

On-device key-value storage: one JSON file per named slot.
Slots wrap a key with a default value and notify subscribers on change.
"""

import copy
import fcntl
import json
import logging
import os
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Callable, Iterator

from besto.config import get_storage_dir
from besto.errors import StorageError

logger = logging.getLogger(__name__)

NOTES_KEY = "besto-notes"
TODOS_KEY = "besto-todos"


class LocalStorage:
    """Key-value storage backed by a directory of files."""

    def __init__(self, directory: Path | None = None):
        self.directory = directory or get_storage_dir()

    def _path(self, key: str) -> Path:
        if not key or "/" in key or key.startswith("."):
            raise ValueError(f"Invalid storage key: {key!r}")
        return self.directory / f"{key}.json"

    def get_item(self, key: str) -> str | None:
        """Return the raw text stored under key, or None."""
        path = self._path(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None

    @contextmanager
    def lock(self, key: str) -> Iterator[None]:
        """Hold an exclusive lock on key across processes."""
        self._path(key)
        self.directory.mkdir(parents=True, exist_ok=True)
        lock_path = self.directory / f".{key}.lock"

        with open(lock_path, "a", encoding="utf-8") as lock:
            fcntl.flock(lock.fileno(), fcntl.LOCK_EX)
            try:
                yield
            finally:
                fcntl.flock(lock.fileno(), fcntl.LOCK_UN)

    def set_item(self, key: str, value: str) -> None:
        """
        Store text under key.

        Writes a temp file and renames it over the slot while holding an
        exclusive lock, so readers never see a half-written value.
        """
        with self.lock(key):
            self._write(key, value)

    def _write(self, key: str, value: str) -> None:
        """Replace the stored text. The caller holds lock(key)."""
        path = self._path(key)
        fd, tmp_name = tempfile.mkstemp(dir=self.directory, prefix=f".{key}.")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(value)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def remove_item(self, key: str) -> None:
        """Delete key if present."""
        self._path(key).unlink(missing_ok=True)

    def keys(self) -> list[str]:
        """List stored keys."""
        if not self.directory.exists():
            return []
        return sorted(p.stem for p in self.directory.glob("*.json") if not p.name.startswith("."))

    def clear(self) -> None:
        """Delete every key."""
        for key in self.keys():
            self.remove_item(key)


class Slot:
    """
    A named storage slot holding one JSON value.

    get() falls back to the default when the slot is missing, empty or
    unparsable. set() accepts a value or an updater taking the previous value.
    """

    def __init__(self, storage: LocalStorage, key: str, default: Any):
        self.storage = storage
        self.key = key
        self.default = default
        self._subscribers: list[Callable[[Any], None]] = []

    def get(self) -> Any:
        """Return the stored value, or a copy of the default."""
        raw = self.storage.get_item(self.key)
        if raw is None or not raw.strip():
            return copy.deepcopy(self.default)
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning("Error reading storage slot %s: %s", self.key, e)
            return copy.deepcopy(self.default)

    def set(self, value: Any) -> Any:
        """
        Persist a value (or the result of value(prev)) and notify subscribers.

        The key stays locked from reading prev until the write lands, so
        concurrent updaters do not lose each other's changes.
        """
        try:
            with self.storage.lock(self.key):
                if callable(value):
                    value = value(self.get())
                text = json.dumps(value, ensure_ascii=False)
                self.storage._write(self.key, text)
        except (TypeError, ValueError, OSError) as e:
            logger.error("Error writing storage slot %s: %s", self.key, e)
            raise StorageError(f"Could not write {self.key}: {e}") from e

        for callback in list(self._subscribers):
            callback(value)
        return value

    def subscribe(self, callback: Callable[[Any], None]) -> Callable[[], None]:
        """Register a change callback. Returns a function that unregisters it."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe


def open_slots(storage: LocalStorage | None = None) -> tuple[Slot, Slot]:
    """Return the (notes, todos) slots, both defaulting to an empty list."""
    storage = storage or LocalStorage()
    return Slot(storage, NOTES_KEY, []), Slot(storage, TODOS_KEY, [])
