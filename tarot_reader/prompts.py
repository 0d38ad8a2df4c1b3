"""
prompts.py — Prompt assembly for the interpretation endpoint.

One prompt layout for every reading; only the ROLE/STYLE header changes with
the configured tone. Cards are listed in draw order.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Sequence

SYSTEM_INSTRUCTION = (
    "You are a precise, responsible tarot expert who explains upright vs reversed "
    "meanings and stays respectful and supportive."
)

# tone -> (ROLE, STYLE)
TONES: Dict[str, tuple] = {
    "compassionate": (
        "You are a compassionate, world-class tarot reader.",
        "Insightful, grounded, empowering. No medical/financial/legal directives.",
    ),
    "direct": (
        "You are a plain-spoken, experienced tarot reader.",
        "Clear and concrete, no filler. No medical/financial/legal directives.",
    ),
    "strict": (
        "You are a rigorous tarot scholar who stays close to traditional meanings.",
        "Precise and sober. Distinguish upright from reversed meanings explicitly. "
        "No medical/financial/legal directives.",
    ),
}

_OUTPUT_LINES = [
    "OUTPUT:",
    "1) A short overview (2–3 sentences).",
    "2) Position-by-position insight (1–3 sentences each).",
    "3) Practical guidance and a gentle closing.",
]


def available_tones() -> List[str]:
    return list(TONES)


def format_card_line(index: int, card: Mapping[str, Any]) -> str:
    # e.g., "  1. Past: The Fool (upright)"
    return f"  {index}. {card.get('position')}: {card.get('name')} ({card.get('orientation')})"


def build_prompt(
    question: Any,
    spread_label: Any,
    cards: Sequence[Mapping[str, Any]],
    tone: str = "compassionate",
) -> str:
    """
    Build the user prompt for one reading.

    `cards` are mappings with at least `position`, `name` and `orientation`,
    as sent in the interpretation request body.
    """
    if tone not in TONES:
        raise ValueError(f"Unknown prompt tone '{tone}'. Choose one of: {', '.join(TONES)}")
    role, style = TONES[tone]

    q = ("" if question is None else str(question)).strip() or "(none provided)"
    label = ("" if spread_label is None else str(spread_label)).strip() or "Unknown Spread"

    lines: List[str] = [
        f"ROLE: {role}",
        "GOAL: Answer the user's question using the spread and drawn cards.",
        f"STYLE: {style}",
        "",
        f"QUESTION: {q}",
        f"SPREAD: {label}",
        "CARDS:",
    ]
    lines.extend(format_card_line(i, c) for i, c in enumerate(cards, start=1))
    lines.append("")
    lines.extend(_OUTPUT_LINES)
    return "\n".join(lines)
