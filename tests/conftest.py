from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path
from typing import Any

import httpx
import pytest

from besto.config import get_default_config
from besto.llm import ChatClient
from besto.records import NoteBook, TodoList
from besto.storage import LocalStorage, open_slots


@pytest.fixture(autouse=True)
def _isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:  # pyright: ignore[reportUnusedFunction]
    monkeypatch.setenv("BESTO_HOME", str(tmp_path / "besto-home"))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg-config"))
    monkeypatch.setenv("NO_COLOR", "1")
    monkeypatch.delenv("OPENROUTER_API_KEY", raising=False)


@pytest.fixture
def storage(tmp_path: Path) -> LocalStorage:
    return LocalStorage(tmp_path / "storage")


@pytest.fixture
def notes(storage: LocalStorage) -> NoteBook:
    notes_slot, _ = open_slots(storage)
    return NoteBook(notes_slot)


@pytest.fixture
def todos(storage: LocalStorage) -> TodoList:
    _, todos_slot = open_slots(storage)
    return TodoList(todos_slot)


def llm_config(api_key: str | None = "test-key") -> dict[str, Any]:
    config = get_default_config()
    if api_key is not None:
        config["llm"]["api_key"] = api_key
    return config


def chat_reply(content: str) -> dict[str, Any]:
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


class RecordingTransport:
    """Collects request bodies and answers with a fixed response."""

    def __init__(self, responder: Callable[[httpx.Request], httpx.Response]):
        self.requests: list[httpx.Request] = []
        self._responder = responder

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self._responder(request)

    @property
    def bodies(self) -> list[dict[str, Any]]:
        return [json.loads(request.content) for request in self.requests]

    def client(self, api_key: str | None = "test-key") -> ChatClient:
        return ChatClient(llm_config(api_key), transport=httpx.MockTransport(self.handler))


@pytest.fixture
def reply_with() -> Callable[..., RecordingTransport]:
    def _reply_with(content: str | None = None, status_code: int = 200, text: str | None = None) -> RecordingTransport:
        def responder(_: httpx.Request) -> httpx.Response:
            if text is not None:
                return httpx.Response(status_code, text=text)
            return httpx.Response(status_code, json=chat_reply(content or ""))

        return RecordingTransport(responder)

    return _reply_with
