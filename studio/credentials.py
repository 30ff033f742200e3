"""
Credential gate for the Gemini API key.

The browser picks a key; the backend only needs to know whether one is
selected and to flag that a new one is needed when the service rejects it.
"""

import logging
from typing import Optional

from . import config

logger = logging.getLogger(__name__)


class CredentialGate:
    """Holds the selected API key and the "please pick a key" flag."""

    def __init__(self, api_key: Optional[str] = None):
        self._api_key = config.GEMINI_API_KEY if api_key is None else api_key
        self.selection_required = not self._api_key

    @property
    def api_key(self) -> str:
        return self._api_key

    def has_credential(self) -> bool:
        return bool(self._api_key) and not self.selection_required

    def prompt_for_credential(self) -> None:
        """Ask the user to (re)select a key. Does not retry anything."""
        self.selection_required = True
        logger.warning("API key selection requested")

    def select(self, api_key: str) -> None:
        api_key = (api_key or "").strip()
        if not api_key:
            raise ValueError("API key must not be empty")
        self._api_key = api_key
        self.selection_required = False
        logger.info("API key selected")
