# -*- coding: utf-8 -*-
"""
tarot_core.py — Core Tarot mechanisms (deck / spreads / unbiased draw)

Responsibilities:
- Define the RWS (Rider–Waite–Smith) 78-card deck (id / name / suit / rank / image)
- Define spreads (single / three / celtic / horseshoe)
- Provide an unbiased random index from the OS CSPRNG (rejection sampling)
- Provide Fisher–Yates shuffling and drawing without replacement, with an
  independent 50/50 orientation per card
- Public API: list_spreads / get_spread / build_deck / get_card /
  uniform_random_index / shuffle / draw_unique / random_orientation / draw

Note:
- This module only implements Tarot mechanics and is UI/LLM agnostic.
  Session handling and rendering live in logic.py.
- Draws are never seeded: every call pulls fresh entropy from `secrets`.
"""

from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass
from typing import Any, Dict, List, Literal, MutableSequence, Sequence, Tuple, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


# =========================
# Types & Error classes
# =========================

class TarotCoreError(Exception):
    """Base class for tarot-core errors."""


class InvalidArgumentError(TarotCoreError):
    """Raised when an input parameter is invalid (e.g. a non-positive bound)."""


class InsufficientDeckError(TarotCoreError):
    """Raised when more cards are requested than the deck holds."""


class InvalidSpreadError(TarotCoreError):
    """Raised when a spread key is not registered."""


Orientation = Literal["upright", "reversed"]
Suit = Literal["major", "wands", "cups", "swords", "pentacles"]

UPRIGHT: Orientation = "upright"
REVERSED: Orientation = "reversed"


@dataclass(frozen=True)
class Card:
    """Card definition (RWS)."""
    id: str              # e.g., "major_00_the_fool", "minor_wands_ace"
    name: str            # e.g., "The Fool", "Ace of Wands"
    suit: Suit
    rank: str            # major: "0".."21"; minor: "ace","2",...,"king"
    image: str           # e.g., "assets/cards/major_00_the_fool.png"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "suit": self.suit,
            "rank": self.rank,
            "img": self.image,
        }


@dataclass(frozen=True)
class Spread:
    """Spread definition: a key, a display label and ordered position labels."""
    key: str
    label: str
    positions: Tuple[str, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {"key": self.key, "label": self.label, "positions": list(self.positions)}


@dataclass(frozen=True)
class DrawnCard:
    """A single drawn card (structured for rendering and the interpretation request)."""
    card: Card
    orientation: Orientation
    position: str

    @property
    def reversed(self) -> bool:
        return self.orientation == REVERSED

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.card.id,
            "name": self.card.name,
            "img": self.card.image,
            "orientation": self.orientation,
            "position": self.position,
        }


# =========================
# Spread registry
# =========================

SPREAD_REGISTRY: Dict[str, Spread] = {
    "single": Spread(
        key="single",
        label="Single Card",
        positions=("Insight",),
    ),
    "three": Spread(
        key="three",
        label="Three Card",
        positions=("Past", "Present", "Future"),
    ),
    "celtic": Spread(
        key="celtic",
        label="Celtic Cross (10)",
        positions=(
            "Present",
            "Challenge",
            "Past",
            "Future",
            "Above (Conscious)",
            "Below (Subconscious)",
            "Advice",
            "External Influences",
            "Hopes & Fears",
            "Outcome",
        ),
    ),
    "horseshoe": Spread(
        key="horseshoe",
        label="Horseshoe (7)",
        positions=(
            "Recent Past",
            "Present",
            "Near Future",
            "Questions / Goals",
            "Your Perspective",
            "Other's Perspective",
            "Outcome",
        ),
    ),
}

DEFAULT_SPREAD = "single"


def list_spreads() -> List[Spread]:
    """Return all available spreads, in registry order."""
    return list(SPREAD_REGISTRY.values())


def get_spread(spread_key: str) -> Spread:
    """Get a single spread definition; raise if not registered."""
    if spread_key not in SPREAD_REGISTRY:
        raise InvalidSpreadError(f"Spread '{spread_key}' is not registered.")
    return SPREAD_REGISTRY[spread_key]


# =========================
# RWS 78-card deck definition
# =========================

CARD_ASSETS_PREFIX = "assets/cards"


def _slug(s: str) -> str:
    return (
        s.lower()
        .replace(" ", "_")
        .replace("-", "_")
        .replace("’", "")
        .replace("'", "")
    )


def _card(cid: str, name: str, suit: Suit, rank: str) -> Card:
    return Card(id=cid, name=name, suit=suit, rank=rank, image=f"{CARD_ASSETS_PREFIX}/{cid}.png")


def _build_rws_registry() -> Tuple[Card, ...]:
    """Build the RWS 78-card registry (stable order; useful for tests)."""
    majors = [
        "The Fool", "The Magician", "The High Priestess", "The Empress",
        "The Emperor", "The Hierophant", "The Lovers", "The Chariot",
        "Strength", "The Hermit", "Wheel of Fortune", "Justice",
        "The Hanged Man", "Death", "Temperance", "The Devil",
        "The Tower", "The Star", "The Moon", "The Sun",
        "Judgement", "The World",
    ]

    registry: List[Card] = []
    for i, name in enumerate(majors):
        registry.append(_card(f"major_{i:02d}_{_slug(name)}", name, "major", str(i)))

    # Minor Arcana
    suits: List[Tuple[Suit, str]] = [
        ("wands", "Wands"),
        ("cups", "Cups"),
        ("swords", "Swords"),
        ("pentacles", "Pentacles"),
    ]
    ranks = [
        ("ace", "Ace"),
        ("2", "Two"),
        ("3", "Three"),
        ("4", "Four"),
        ("5", "Five"),
        ("6", "Six"),
        ("7", "Seven"),
        ("8", "Eight"),
        ("9", "Nine"),
        ("10", "Ten"),
        ("page", "Page"),
        ("knight", "Knight"),
        ("queen", "Queen"),
        ("king", "King"),
    ]

    for suit_key, suit_name in suits:
        for rank_key, rank_name in ranks:
            registry.append(_card(
                f"minor_{suit_key}_{rank_key}", f"{rank_name} of {suit_name}", suit_key, rank_key
            ))

    if len(registry) != 78:
        raise TarotCoreError(f"RWS registry size should be 78, got {len(registry)}")
    return tuple(registry)


DECK: Tuple[Card, ...] = _build_rws_registry()
CARD_ID_INDEX: Dict[str, int] = {c.id: idx for idx, c in enumerate(DECK)}  # quick lookup by id

if len(CARD_ID_INDEX) != len(DECK):
    raise TarotCoreError("Duplicate card ids detected.")
if len(DECK) < max(len(s.positions) for s in SPREAD_REGISTRY.values()):
    raise TarotCoreError("Deck is smaller than the largest registered spread.")


def build_deck() -> List[Card]:
    """Return the ordered RWS deck as a new list."""
    return list(DECK)


def get_card(card_id: str) -> Card:
    idx = CARD_ID_INDEX.get(card_id)
    if idx is None:
        raise InvalidArgumentError(f"Unknown card id: {card_id}")
    return DECK[idx]


# =========================
# RNG / Shuffling
# =========================

# Candidates are 31-bit, i.e. uniform over [0, 2**31).
_SOURCE_BITS = 31
_SOURCE_RANGE = 1 << _SOURCE_BITS


def _entropy() -> int:
    """One raw candidate from the OS CSPRNG."""
    return secrets.randbits(_SOURCE_BITS)


def uniform_random_index(bound: int) -> int:
    """
    Cryptographically strong integer uniformly distributed over [0, bound).

    Candidates at or above the largest multiple of `bound` that fits in the
    source range are discarded and redrawn, so `candidate % bound` has no
    modulo bias.
    """
    # bool is an int subclass; True would silently act as 1
    if isinstance(bound, bool) or not isinstance(bound, int) or bound <= 0:
        raise InvalidArgumentError(f"bound must be a positive integer; got {bound!r}")
    if bound > _SOURCE_RANGE:
        raise InvalidArgumentError(f"bound must not exceed {_SOURCE_RANGE}; got {bound}")

    limit = (_SOURCE_RANGE // bound) * bound
    while True:
        x = _entropy()
        if x < limit:
            return x % bound


def shuffle(items: MutableSequence[T]) -> MutableSequence[T]:
    """
    Fisher–Yates (Knuth) shuffle driven by uniform_random_index.
    Mutates `items` in place and returns it.
    """
    for i in range(len(items) - 1, 0, -1):
        j = uniform_random_index(i + 1)  # [0, i]
        items[i], items[j] = items[j], items[i]
    return items


# =========================
# Draw
# =========================

def draw_unique(deck: Sequence[T], count: int) -> List[T]:
    """
    Pick `count` distinct entries from `deck` in uniformly random order
    (drawing without replacement). The deck itself is not modified.
    """
    if isinstance(count, bool) or not isinstance(count, int) or count < 0:
        raise InvalidArgumentError(f"count must be a non-negative integer; got {count!r}")
    if count > len(deck):
        raise InsufficientDeckError(
            f"Not enough cards in deck: requested {count}, deck holds {len(deck)}"
        )

    indices = shuffle(list(range(len(deck))))
    return [deck[i] for i in indices[:count]]


def random_orientation() -> Orientation:
    """50/50 upright/reversed from the same unbiased source."""
    return REVERSED if uniform_random_index(2) == 1 else UPRIGHT


def draw(deck: Sequence[Card], spread: Spread) -> List[DrawnCard]:
    """
    Core entry point: draw one card per spread position, orient each card
    independently and pair it with the position label at the same index.
    """
    picked = draw_unique(deck, len(spread.positions))
    result = [
        DrawnCard(card=card, orientation=random_orientation(), position=position)
        for card, position in zip(picked, spread.positions)
    ]
    logger.debug("Drew %s: %s", spread.key, [d.card.id for d in result])
    return result


# =========================
# __main__ demo (structured pprint)
# =========================

if __name__ == "__main__":
    from pprint import pprint

    for key in SPREAD_REGISTRY:
        spread = get_spread(key)
        print(f"=== {spread.label} ===")
        pprint([d.to_dict() for d in draw(DECK, spread)], sort_dicts=False)
        print()
