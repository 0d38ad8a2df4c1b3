from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

load_dotenv()

DEFAULT_MODEL = "gemini-2.5-flash"
DEFAULT_TEMPERATURE = 0.8
DEFAULT_TONE = "compassionate"
DEFAULT_INTERPRET_URL = "http://localhost:8000/api/interpret"


@dataclass(frozen=True)
class Settings:
    gemini_token: Optional[str]
    model: str = DEFAULT_MODEL
    temperature: float = DEFAULT_TEMPERATURE
    tone: str = DEFAULT_TONE
    interpret_url: str = DEFAULT_INTERPRET_URL
    http_timeout: Optional[float] = None
    log_level: str = "INFO"


def _optional_float(name: str) -> Optional[float]:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return None
    try:
        return float(raw)
    except ValueError as e:
        raise RuntimeError(f"{name} must be a number; got {raw!r}") from e


def load_settings() -> Settings:
    """
    Read settings from the environment (a .env file is loaded on import).
    Re-reads on every call so tests can monkeypatch the environment.
    """
    temperature = _optional_float("TAROT_TEMPERATURE")
    return Settings(
        gemini_token=os.getenv("GEMINI_TOKEN") or None,
        model=os.getenv("GEMINI_MODEL", DEFAULT_MODEL),
        temperature=DEFAULT_TEMPERATURE if temperature is None else temperature,
        tone=os.getenv("TAROT_PROMPT_TONE", DEFAULT_TONE).strip().lower(),
        interpret_url=os.getenv("TAROT_INTERPRET_URL", DEFAULT_INTERPRET_URL),
        http_timeout=_optional_float("TAROT_HTTP_TIMEOUT"),
        log_level=os.getenv("TAROT_LOG_LEVEL", "INFO"),
    )
