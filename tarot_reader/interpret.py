"""
interpret.py — The interpretation handler behind POST /api/interpret.

Validates the request body, builds one prompt (tone comes from settings),
calls the upstream LLM and returns its text. Failures are raised as
InterpretationError carrying the HTTP status the endpoint should answer with.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Callable, Dict, List, Optional, TYPE_CHECKING

from . import llm
from .client import InterpretationError
from .config import Settings
from .prompts import SYSTEM_INSTRUCTION, build_prompt

if TYPE_CHECKING:
    from .logic import ReadingSession

logger = logging.getLogger(__name__)

ChatFn = Callable[..., str]

NO_CARDS_MESSAGE = "No cards provided. Draw cards before interpreting."


def parse_payload(raw: Any) -> Dict[str, Any]:
    """
    Normalize a request body: bytes and JSON strings are decoded, anything
    that is not an object ends up as an empty dict.
    """
    if isinstance(raw, (bytes, bytearray)):
        raw = raw.decode("utf-8", errors="replace")
    # A body that is itself a JSON string gets decoded twice
    for _ in range(2):
        if not isinstance(raw, str):
            break
        try:
            raw = json.loads(raw)
        except ValueError:
            return {}
    return raw if isinstance(raw, dict) else {}


def interpret_reading(
    raw_payload: Any,
    settings: Settings,
    chat_fn: Optional[ChatFn] = None,
) -> str:
    """
    Run one interpretation.

    Raises InterpretationError with status 500 when credentials are missing,
    400 when there are no cards (before any upstream call) and 502 when the
    upstream call fails or returns blank text.
    """
    if not settings.gemini_token:
        raise InterpretationError("GEMINI_TOKEN is not set on the server.", status=500)

    payload = parse_payload(raw_payload)
    cards = payload.get("cards")
    if not isinstance(cards, list) or not cards:
        raise InterpretationError(NO_CARDS_MESSAGE, status=400)
    card_rows: List[Dict[str, Any]] = [c for c in cards if isinstance(c, dict)]
    if len(card_rows) != len(cards):
        raise InterpretationError("Each card must be an object.", status=400)

    try:
        prompt = build_prompt(
            question=payload.get("question"),
            spread_label=payload.get("spreadLabel"),
            cards=card_rows,
            tone=settings.tone,
        )
    except ValueError as e:
        raise InterpretationError("Server prompt configuration is invalid.", status=500, details=str(e)) from e

    chat = chat_fn or llm.chat
    logger.info("Interpreting %d card(s) for spread %r", len(card_rows), payload.get("spreadLabel"))
    try:
        text = chat(
            prompt,
            api_key=settings.gemini_token,
            model=settings.model,
            temperature=settings.temperature,
            system_instruction=SYSTEM_INSTRUCTION,
        )
    except Exception as e:
        logger.warning("Upstream LLM call failed: %s: %s", type(e).__name__, e)
        raise InterpretationError("LLM request failed.", status=502, details=f"{type(e).__name__}: {e}") from e

    if not isinstance(text, str) or not text.strip():
        raise InterpretationError("LLM returned empty text.", status=502)
    return text


class LocalInterpreter:
    """In-process interpreter: same handler, no HTTP hop (used by the console demo)."""

    def __init__(self, settings: Settings, chat_fn: Optional[ChatFn] = None):
        self.settings = settings
        self.chat_fn = chat_fn

    def interpret(self, reading: "ReadingSession") -> str:
        return interpret_reading(reading.to_payload(), self.settings, chat_fn=self.chat_fn)
