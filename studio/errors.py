"""
Error taxonomy for the generation pipeline.

Validation problems are plain ValueError. Everything raised here comes from
an external call or from a result that cannot be used.
"""

from typing import Optional

# Text the service puts in "entity not found" failures for unusable keys.
ENTITY_NOT_FOUND = "Requested entity was not found"


class GeminiAPIError(Exception):
    """Non-2xx response (or error payload) from the Gemini REST API."""

    def __init__(self, message: str, status_code: int = 0, status: str = ""):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.status = status


class CredentialError(GeminiAPIError):
    """The API key is missing, or the service no longer accepts it."""


class NoResultError(RuntimeError):
    """The video job finished without a downloadable result."""


class NoImageProducedError(RuntimeError):
    """The edit response carried no inline image data."""


class GenerationInProgressError(RuntimeError):
    """A video generation is already running."""


def is_credential_failure(
    status_code: int = 0, status: str = "", message: Optional[str] = ""
) -> bool:
    """True for the 'entity not found' class of failure that calls for a new key."""
    if ENTITY_NOT_FOUND in (message or ""):
        return True
    return status == "NOT_FOUND" and status_code in (0, 404)


def is_credential_error(error: BaseException) -> bool:
    """Route-to-reauthentication check for any pipeline failure."""
    if isinstance(error, CredentialError):
        return True
    return ENTITY_NOT_FOUND in str(error)
