"""
logic.py — Orchestration layer that ties tarot_core mechanics to UI/API needs.

Responsibilities:
- Hold the result of a draw as an explicit ReadingSession value (question,
  spread, drawn cards) instead of ambient global state.
- Provide `perform_draw(...)` for the UI/API and `ReadingController`, which
  owns the current session, hands it to a pluggable renderer and runs one
  interpretation request at a time.

Notes:
- Image assets are expected under: ./assets/cards/{card_id}.png
- The controller never touches the session when interpretation fails, so the
  user can retry without redrawing.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol, Sequence, Tuple

from . import tarot_core
from .client import InterpretationError
from .tarot_core import Card, DrawnCard

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# Paths & utilities
# -----------------------------------------------------------------------------

# Project root (resolve relative to this file)
_PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))


def get_card_image_path(card: Card) -> str:
    """
    Absolute file path for a card's image reference (./assets/cards/{card_id}.png).

    The function returns the path string regardless of whether the file exists.
    The UI can check or attempt fallback handling as needed.
    """
    return os.path.join(_PROJECT_ROOT, *card.image.split("/"))


# -----------------------------------------------------------------------------
# Session
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class ReadingSession:
    """The most recent draw: question, spread and drawn cards."""
    question: str
    spread_key: str
    spread_label: str
    positions: Tuple[str, ...]
    cards: Tuple[DrawnCard, ...] = field(default_factory=tuple)

    def to_payload(self) -> Dict[str, Any]:
        """Interpretation request body."""
        return {
            "question": self.question,
            "spreadKey": self.spread_key,
            "spreadLabel": self.spread_label,
            "positions": list(self.positions),
            "cards": [c.to_dict() for c in self.cards],
        }


def perform_draw(
    question: Optional[str],
    spread_key: Optional[str],
    deck: Sequence[Card] = tarot_core.DECK,
) -> ReadingSession:
    """
    Draw a fresh reading. An empty spread key falls back to the single-card
    spread; an unknown key raises InvalidSpreadError.
    """
    spread = tarot_core.get_spread(spread_key or tarot_core.DEFAULT_SPREAD)
    drawn = tarot_core.draw(deck, spread)
    return ReadingSession(
        question=(question or "").strip(),
        spread_key=spread.key,
        spread_label=spread.label,
        positions=tuple(spread.positions),
        cards=tuple(drawn),
    )


# -----------------------------------------------------------------------------
# Renderer / interpreter seams
# -----------------------------------------------------------------------------

class ReadingRenderer(Protocol):
    def render(self, session: ReadingSession) -> None: ...

    def show_status(self, text: str) -> None: ...

    def show_interpretation(self, text: str) -> None: ...

    def show_error(self, message: str) -> None: ...


class Interpreter(Protocol):
    def interpret(self, reading: ReadingSession) -> str: ...


class RecordingRenderer:
    """Renderer that keeps everything it is shown; handy for scripts and tests."""

    def __init__(self) -> None:
        self.sessions: List[ReadingSession] = []
        self.statuses: List[str] = []
        self.interpretations: List[str] = []
        self.errors: List[str] = []

    def render(self, session: ReadingSession) -> None:
        self.sessions.append(session)

    def show_status(self, text: str) -> None:
        self.statuses.append(text)

    def show_interpretation(self, text: str) -> None:
        self.interpretations.append(text)

    def show_error(self, message: str) -> None:
        self.errors.append(message)


# -----------------------------------------------------------------------------
# Controller
# -----------------------------------------------------------------------------

class ReadingController:
    """
    Owns the current ReadingSession and drives draw -> render -> interpret.

    `busy` is the disabled state of the interpretation trigger: it is set for
    the lifetime of a request and a second request is refused meanwhile.
    """

    def __init__(
        self,
        renderer: ReadingRenderer,
        interpreter: Interpreter,
        deck: Sequence[Card] = tarot_core.DECK,
    ) -> None:
        self.renderer = renderer
        self.interpreter = interpreter
        self.deck = deck
        self._session: Optional[ReadingSession] = None
        self._busy = False

    @property
    def session(self) -> Optional[ReadingSession]:
        return self._session

    @property
    def busy(self) -> bool:
        return self._busy

    def draw(self, question: Optional[str], spread_key: Optional[str]) -> Optional[ReadingSession]:
        try:
            session = perform_draw(question, spread_key, deck=self.deck)
        except (tarot_core.InsufficientDeckError, tarot_core.InvalidSpreadError) as e:
            logger.warning("Draw refused: %s", e)
            self.renderer.show_error(str(e))
            return None

        self._session = session
        self.renderer.render(session)
        return session

    def interpret(self) -> Optional[str]:
        session = self._session
        if session is None or not session.cards:
            self.renderer.show_error("Draw cards first.")
            return None
        if self._busy:
            logger.info("Interpretation already in progress; ignoring trigger")
            return None

        self._busy = True
        self.renderer.show_status("Asking the oracle...")
        try:
            text = self.interpreter.interpret(session)
        except InterpretationError as e:
            logger.warning("Interpretation failed (status=%s): %s", e.status, e.message)
            self.renderer.show_error(f"⚠️ {e.message}")
            self.renderer.show_status("Error")
            return None
        finally:
            self._busy = False

        self.renderer.show_interpretation(text)
        self.renderer.show_status("Done")
        return text
