from types import SimpleNamespace

import pytest

from tarot_reader import llm


class NoTextResponse:
    """Mimics the SDK raising from .text when the candidate has no simple text."""

    def __init__(self, candidates):
        self.candidates = candidates

    @property
    def text(self):
        raise ValueError("response has multiple parts")


def test_extract_text_prefers_aggregate():
    assert llm._extract_text(SimpleNamespace(text="hello", candidates=[])) == "hello"


def test_extract_text_joins_parts():
    parts = [SimpleNamespace(text="first"), SimpleNamespace(text=None), SimpleNamespace(text="second")]
    resp = NoTextResponse([SimpleNamespace(content=SimpleNamespace(parts=parts))])
    assert llm._extract_text(resp) == "first\nsecond"


def test_extract_text_empty():
    assert llm._extract_text(NoTextResponse([])) == ""


def test_chat_requires_key():
    with pytest.raises(llm.MissingCredentialsError):
        llm.chat("prompt", api_key=None)


def test_chat_retries_without_generation_config(monkeypatch):
    calls = []

    class FakeModel:
        def __init__(self, model_name, system_instruction=None):
            self.model_name = model_name
            self.system_instruction = system_instruction

        def generate_content(self, prompt, **kwargs):
            calls.append(kwargs)
            if "generation_config" in kwargs:
                raise TypeError("unexpected keyword argument 'generation_config'")
            return SimpleNamespace(text="ok")

    monkeypatch.setattr(llm.genai, "configure", lambda api_key: None)
    monkeypatch.setattr(llm.genai, "GenerativeModel", FakeModel)

    assert llm.chat("prompt", api_key="k", temperature=0.8) == "ok"
    assert calls == [{"generation_config": {"temperature": 0.8}}, {}]
