"""
client.py — HTTP client for the interpretation endpoint.

Posts a reading session as JSON and returns the interpretation text. Every
failure mode (network, non-200, `{error}` body, empty text) surfaces as an
InterpretationError so callers have one thing to catch.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, TYPE_CHECKING

import requests

if TYPE_CHECKING:
    from .logic import ReadingSession

logger = logging.getLogger(__name__)


class InterpretationError(Exception):
    """An interpretation request failed; `status` is the HTTP status when known."""

    def __init__(self, message: str, status: Optional[int] = None, details: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.status = status
        self.details = details

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"error": self.message}
        if self.details:
            body["details"] = self.details
        return body


class InterpretationClient:
    def __init__(self, url: str, timeout: Optional[float] = None, session: Optional[requests.Session] = None):
        self.url = url
        self.timeout = timeout
        self._http = session or requests.Session()

    def interpret(self, reading: "ReadingSession") -> str:
        try:
            res = self._http.post(self.url, json=reading.to_payload(), timeout=self.timeout)
        except requests.RequestException as e:
            logger.warning("Interpretation request to %s failed: %s", self.url, e)
            raise InterpretationError(str(e) or type(e).__name__) from e

        # Try to parse JSON even on non-200
        try:
            data = res.json()
        except ValueError:
            data = {}
        if not isinstance(data, dict):
            data = {}

        if not res.ok:
            raise InterpretationError(
                f"Server error {res.status_code}: {data.get('error') or 'Unknown error'}",
                status=res.status_code,
                details=data.get("details"),
            )
        if data.get("error"):
            raise InterpretationError(str(data["error"]), status=res.status_code)

        text = data.get("text")
        if not isinstance(text, str) or not text.strip():
            raise InterpretationError("Empty response from API.", status=res.status_code)
        return text
