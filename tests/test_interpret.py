"""Tests for the interpretation handler core."""

import json

import pytest

from tarot_reader.client import InterpretationError
from tarot_reader.config import Settings
from tarot_reader.interpret import LocalInterpreter, interpret_reading, parse_payload
from tarot_reader.logic import perform_draw

SETTINGS = Settings(gemini_token="test-key", model="gemini-test", temperature=0.8, tone="compassionate")

PAYLOAD = {
    "question": "What now?",
    "spreadLabel": "Three Card",
    "cards": [
        {"position": "Past", "name": "The Fool", "orientation": "upright"},
        {"position": "Present", "name": "Death", "orientation": "reversed"},
        {"position": "Future", "name": "Ten of Cups", "orientation": "upright"},
    ],
}


class FakeChat:
    def __init__(self, text="Overview...", error=None):
        self.text = text
        self.error = error
        self.calls = []

    def __call__(self, prompt, **kwargs):
        self.calls.append((prompt, kwargs))
        if self.error:
            raise self.error
        return self.text


def test_success_passes_prompt_and_settings():
    chat = FakeChat()
    assert interpret_reading(PAYLOAD, SETTINGS, chat_fn=chat) == "Overview..."

    prompt, kwargs = chat.calls[0]
    assert kwargs["api_key"] == "test-key"
    assert kwargs["model"] == "gemini-test"
    assert kwargs["temperature"] == 0.8
    assert "tarot expert" in kwargs["system_instruction"]
    past, present, future = (prompt.index(n) for n in ("The Fool", "Death", "Ten of Cups"))
    assert past < present < future


def test_missing_credentials():
    chat = FakeChat()
    with pytest.raises(InterpretationError) as exc:
        interpret_reading(PAYLOAD, Settings(gemini_token=None), chat_fn=chat)
    assert exc.value.status == 500
    assert chat.calls == []


@pytest.mark.parametrize("body", [
    {**PAYLOAD, "cards": []},
    {"question": "q"},
    {**PAYLOAD, "cards": "The Fool"},
    None,
    "not json",
])
def test_no_cards_rejected_before_upstream(body):
    chat = FakeChat()
    with pytest.raises(InterpretationError) as exc:
        interpret_reading(body, SETTINGS, chat_fn=chat)
    assert exc.value.status == 400
    assert "No cards provided" in exc.value.message
    assert chat.calls == []


def test_string_and_bytes_bodies_are_parsed():
    assert parse_payload(json.dumps(PAYLOAD)) == PAYLOAD
    assert parse_payload(json.dumps(PAYLOAD).encode("utf-8")) == PAYLOAD
    assert parse_payload(json.dumps(json.dumps(PAYLOAD))) == PAYLOAD
    assert parse_payload(b"") == {}
    assert parse_payload([1, 2]) == {}


def test_upstream_failure_is_502_with_details():
    chat = FakeChat(error=RuntimeError("quota exceeded"))
    with pytest.raises(InterpretationError) as exc:
        interpret_reading(PAYLOAD, SETTINGS, chat_fn=chat)
    assert exc.value.status == 502
    assert "quota exceeded" in exc.value.details


def test_empty_upstream_text():
    with pytest.raises(InterpretationError) as exc:
        interpret_reading(PAYLOAD, SETTINGS, chat_fn=FakeChat(text="   "))
    assert exc.value.status == 502


def test_bad_tone_setting():
    settings = Settings(gemini_token="k", tone="spooky")
    with pytest.raises(InterpretationError) as exc:
        interpret_reading(PAYLOAD, settings, chat_fn=FakeChat())
    assert exc.value.status == 500


def test_local_interpreter_uses_session_payload():
    chat = FakeChat(text="Reading text")
    session = perform_draw("q", "three")
    assert LocalInterpreter(SETTINGS, chat_fn=chat).interpret(session) == "Reading text"
    prompt, _ = chat.calls[0]
    for card in session.cards:
        assert f"{card.position}: {card.card.name} ({card.orientation})" in prompt


@pytest.mark.parametrize("extra, question_line, spread_line", [
    ({"question": 42}, "QUESTION: 42", "SPREAD: Three Card"),
    ({"spreadLabel": ["x"]}, "QUESTION: What now?", "SPREAD: ['x']"),
    ({"question": None, "spreadLabel": None}, "QUESTION: (none provided)", "SPREAD: Unknown Spread"),
])
def test_non_string_question_and_spread_are_coerced(extra, question_line, spread_line):
    chat = FakeChat()
    assert interpret_reading({**PAYLOAD, **extra}, SETTINGS, chat_fn=chat) == "Overview..."
    prompt, _ = chat.calls[0]
    assert question_line in prompt.splitlines()
    assert spread_line in prompt.splitlines()
