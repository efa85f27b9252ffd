from __future__ import annotations

import json
from typing import Callable

import httpx
import pytest

from besto.classifier import (
    CLASSIFIER_PROMPT,
    Classifier,
    intent_to_type,
    strip_code_fences,
)
from besto.config import get_default_config
from besto.errors import ClassificationFailed, LLMConfigError, LLMError
from besto.llm import ChatClient
from besto.models import Note, NoteInput
from besto.summarizer import Summarizer, build_prompt, notes_to_inputs

from .conftest import RecordingTransport

ReplyWith = Callable[..., RecordingTransport]


def test_chat_client_sends_openrouter_request(reply_with: ReplyWith) -> None:
    transport = reply_with("hi there")

    content = transport.client().complete(
        [{"role": "user", "content": "hello"}], temperature=0.2, max_tokens=50
    )

    assert content == "hi there"
    request = transport.requests[0]
    assert str(request.url) == "https://openrouter.ai/api/v1/chat/completions"
    assert request.headers["Authorization"] == "Bearer test-key"
    assert request.headers["X-Title"] == "Besto Voice Assistant"
    assert "HTTP-Referer" in request.headers
    assert transport.bodies[0] == {
        "model": "meta-llama/llama-3.1-8b-instruct:free",
        "messages": [{"role": "user", "content": "hello"}],
        "temperature": 0.2,
        "max_tokens": 50,
    }


def test_chat_client_requires_api_key(reply_with: ReplyWith) -> None:
    transport = reply_with("unused")
    with pytest.raises(LLMConfigError, match="OpenRouter API key not configured"):
        transport.client(api_key=None).complete([], temperature=0.1, max_tokens=1)
    assert transport.requests == []


def test_chat_client_reads_key_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("OPENROUTER_API_KEY", "env-key")
    assert ChatClient(get_default_config()).api_key == "env-key"


def test_chat_client_raises_on_error_status(reply_with: ReplyWith) -> None:
    transport = reply_with(status_code=429, text="rate limited")
    with pytest.raises(LLMError, match="OpenRouter API error: 429"):
        transport.client().complete([], temperature=0.1, max_tokens=1)


def test_chat_client_raises_on_network_error() -> None:
    def refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    config = get_default_config()
    config["llm"]["api_key"] = "k"
    client = ChatClient(config, transport=httpx.MockTransport(refuse))
    with pytest.raises(LLMError, match="request failed"):
        client.complete([], temperature=0.1, max_tokens=1)


def test_chat_client_raises_on_unexpected_payload(reply_with: ReplyWith) -> None:
    transport = reply_with(status_code=200, text='{"choices": []}')
    with pytest.raises(LLMError, match="Unexpected"):
        transport.client().complete([], temperature=0.1, max_tokens=1)


def test_classify_parses_json_reply(reply_with: ReplyWith) -> None:
    reply = {
        "intent": "CREATE_TODO",
        "entities": {"title": "Buy milk", "priority": "high", "duration": 15},
    }
    transport = reply_with(json.dumps(reply))

    result = Classifier(transport.client()).classify("I need to buy milk")

    assert result.intent == "CREATE_TODO"
    assert result.entities.title == "Buy milk"
    assert result.entities.priority == "high"
    assert result.entities.duration == 15

    body = transport.bodies[0]
    assert body["temperature"] == 0.1
    assert body["max_tokens"] == 500
    assert body["messages"] == [
        {"role": "system", "content": CLASSIFIER_PROMPT},
        {"role": "user", "content": "I need to buy milk"},
    ]


def test_classify_keeps_intent_when_entities_are_misshapen(reply_with: ReplyWith) -> None:
    reply = {
        "intent": "CREATE_EVENT",
        "entities": {"title": "Standup", "duration": "30 minutes", "priority": 2},
    }
    result = Classifier(reply_with(json.dumps(reply)).client()).classify("standup for thirty minutes")

    assert result.intent == "CREATE_EVENT"
    assert result.entities.title == "Standup"
    assert result.entities.duration is None
    assert result.entities.priority is None


def test_classify_keeps_intent_when_entities_is_not_an_object(reply_with: ReplyWith) -> None:
    reply = {"intent": "CREATE_TODO", "entities": "buy milk"}
    result = Classifier(reply_with(json.dumps(reply)).client()).classify("buy milk")

    assert result.intent == "CREATE_TODO"
    assert result.entities.model_dump(exclude_none=True) == {}


def test_classify_accepts_fenced_json(reply_with: ReplyWith) -> None:
    fenced = '```json\n{"intent": "CREATE_EVENT", "entities": {"datetime": "2024-01-01T10:00:00Z"}}\n```'
    result = Classifier(reply_with(fenced).client()).classify("meeting at ten")

    assert result.intent == "CREATE_EVENT"
    assert result.entities.datetime == "2024-01-01T10:00:00Z"


@pytest.mark.parametrize(
    "content",
    ["Sure! This is a note.", '{"intent": "DANCE"}', "[1, 2, 3]"],
)
def test_classify_falls_back_to_note_on_bad_reply(reply_with: ReplyWith, content: str) -> None:
    result = Classifier(reply_with(content).client()).classify("remember the keys")

    assert result.model_dump(exclude_none=True) == {
        "intent": "CREATE_NOTE",
        "entities": {"title": "Voice Note", "body": "remember the keys", "priority": "medium"},
    }


def test_classify_wraps_llm_failures(reply_with: ReplyWith) -> None:
    with pytest.raises(ClassificationFailed, match="500"):
        Classifier(reply_with(status_code=500, text="boom").client()).classify("hello")


def test_strip_code_fences_leaves_plain_text() -> None:
    assert strip_code_fences('  {"a": 1} ') == '{"a": 1}'
    assert strip_code_fences('```\n{"a": 1}\n```') == '{"a": 1}'


def test_intent_to_type() -> None:
    assert intent_to_type("CREATE_TODO") == "todo"
    assert intent_to_type("CREATE_EVENT") == "event"
    assert intent_to_type("CREATE_NOTE") == "note"
    assert intent_to_type("ASK_CALENDAR_AGENDA") == "note"


def test_summary_prompt_lists_each_note(reply_with: ReplyWith) -> None:
    transport = reply_with("You have two notes about errands.")
    notes = [
        NoteInput(title="Groceries", content="milk and eggs"),
        NoteInput(content="Call the bank about the card replacement tomorrow morning"),
    ]

    summary = Summarizer(transport.client()).summarize(notes)

    assert summary == "You have two notes about errands."
    body = transport.bodies[0]
    assert body["temperature"] == 0.3
    assert body["max_tokens"] == 200
    user_prompt = body["messages"][1]["content"]
    assert user_prompt.startswith(
        "Please summarize these notes in a conversational way for voice playback:\n\n"
    )
    assert "- Groceries: milk and eggs" in user_prompt
    assert "- Call the bank about the card replacement: Call the bank" in user_prompt


def test_build_prompt_from_stored_notes() -> None:
    prompt = build_prompt(notes_to_inputs([Note(content="short one")]))
    assert prompt.endswith("- short one: short one")
