from __future__ import annotations

import logging
from typing import Optional

# pip install google-generativeai python-dotenv
import google.generativeai as genai

from .config import DEFAULT_MODEL, DEFAULT_TEMPERATURE

logger = logging.getLogger(__name__)


class MissingCredentialsError(RuntimeError):
    """Raised when no API key is available for the upstream LLM."""


def _extract_text(resp) -> str:
    """
    Safely extract plain text from a Gemini response, even if Parts are present.
    """
    # 1) Try the SDK's aggregated .text (raises when the candidate has no parts)
    try:
        t = getattr(resp, "text", None)
        if t:
            return t
    except ValueError:
        pass

    # 2) Fallback: manually join candidate parts' text
    texts = []
    for cand in getattr(resp, "candidates", []) or []:
        content = getattr(cand, "content", None)
        parts = getattr(content, "parts", None) if content else None
        if parts:
            for p in parts:
                pt = getattr(p, "text", None)
                if pt:
                    texts.append(pt)
    return "\n".join(texts).strip()


def chat(
    prompt: str,
    *,
    api_key: Optional[str],
    model: Optional[str] = None,
    temperature: float = DEFAULT_TEMPERATURE,
    system_instruction: Optional[str] = None,
) -> str:
    """
    Single-turn chat with Gemini. Returns plain text (possibly empty).
    Raises MissingCredentialsError without a key; SDK errors propagate.
    """
    if not api_key:
        raise MissingCredentialsError(
            "Missing GEMINI_TOKEN in environment. "
            "Create one in Google AI Studio and set it in your .env."
        )

    genai.configure(api_key=api_key)
    model_name = model or DEFAULT_MODEL
    gmodel = genai.GenerativeModel(model_name=model_name, system_instruction=system_instruction)

    gen_cfg = {"temperature": float(temperature)}

    logger.info("Calling %s (temperature=%s)", model_name, temperature)
    try:
        resp = gmodel.generate_content(prompt, generation_config=gen_cfg)
    except Exception as e:
        # Older SDKs reject some generation_config fields; retry without it
        if "GenerationConfig" in str(e) or "generation_config" in str(e):
            logger.warning("generation_config rejected by SDK, retrying without it: %s", e)
            resp = gmodel.generate_content(prompt)
        else:
            raise

    return _extract_text(resp) or ""
