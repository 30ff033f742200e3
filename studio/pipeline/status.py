"""
Generation status projection.

Pipeline milestones map to complete GenerationStatus snapshots. The
StatusChannel holds the latest snapshot and broadcasts every new one;
StudioService is its only writer.
"""

import asyncio
import logging
from enum import Enum
from typing import AsyncIterator, Optional

from .models import GenerationStatus

logger = logging.getLogger(__name__)


class GenerationEvent(str, Enum):
    START = "START"
    PROMPT_READY = "PROMPT_READY"
    RESOLVED = "RESOLVED"
    FAILED = "FAILED"
    CANCELLED = "CANCELLED"


ANALYZING_MESSAGE = "Analyzing visual narrative with Gemini..."
SYNTHESIZING_MESSAGE = "Synthesizing cinematic transition with Veo (may take a few minutes)..."
SUCCESS_MESSAGE = "Video generated successfully!"
CANCELLED_MESSAGE = "Generation cancelled"


def error_message(error: Optional[BaseException]) -> str:
    text = str(error) if error is not None else ""
    return f"Error: {text or 'Something went wrong'}"


def project_status(
    event: GenerationEvent,
    result_handle: Optional[str] = None,
    error: Optional[BaseException] = None,
) -> GenerationStatus:
    """Pure mapping from a pipeline event to the status shown to the user."""
    if event == GenerationEvent.START:
        return GenerationStatus(is_generating=True, status_message=ANALYZING_MESSAGE, progress=10)
    if event == GenerationEvent.PROMPT_READY:
        return GenerationStatus(is_generating=True, status_message=SYNTHESIZING_MESSAGE, progress=30)
    if event == GenerationEvent.RESOLVED:
        if result_handle is None:
            raise ValueError("RESOLVED needs a result handle")
        return GenerationStatus(
            is_generating=False,
            status_message=SUCCESS_MESSAGE,
            progress=100,
            result_handle=result_handle,
        )
    if event == GenerationEvent.CANCELLED:
        return GenerationStatus(is_generating=False, status_message=CANCELLED_MESSAGE, progress=0)
    return GenerationStatus(is_generating=False, status_message=error_message(error), progress=0)


class StatusChannel:
    """Latest-value broadcast of GenerationStatus snapshots."""

    def __init__(self, initial: Optional[GenerationStatus] = None):
        self._current = initial or GenerationStatus()
        self._subscribers: set[asyncio.Queue] = set()

    @property
    def current(self) -> GenerationStatus:
        return self._current

    def publish(self, status: GenerationStatus) -> None:
        self._current = status
        for queue in list(self._subscribers):
            queue.put_nowait(status)
        logger.info(
            f"{'GENERATING' if status.is_generating else 'IDLE'} → "
            f"{status.status_message} ({status.progress}%)"
        )

    async def subscribe(self) -> AsyncIterator[GenerationStatus]:
        """Yield the current snapshot, then every published one."""
        queue: asyncio.Queue = asyncio.Queue()
        self._subscribers.add(queue)
        try:
            yield self._current
            while True:
                yield await queue.get()
        finally:
            self._subscribers.discard(queue)
