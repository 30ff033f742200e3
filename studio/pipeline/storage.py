"""
In-memory media store.

Generated binaries are exposed to the presentation layer through opaque
handles, served from `/media/{handle}`. The caller releases a handle once
the media is no longer displayed.
"""

import logging
import threading
import uuid
from typing import NamedTuple, Optional

logger = logging.getLogger(__name__)


class MediaItem(NamedTuple):
    data: bytes
    mime_type: str


class MediaStore:

    def __init__(self):
        self._items: dict[str, MediaItem] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, handle: str) -> bool:
        return handle in self._items

    def register(self, data: bytes, mime_type: str) -> str:
        """Store a payload and return its handle."""
        handle = uuid.uuid4().hex
        with self._lock:
            self._items[handle] = MediaItem(data, mime_type)
        logger.info(f"Registered media {handle} ({mime_type}, {len(data)} bytes)")
        return handle

    def get(self, handle: str) -> Optional[MediaItem]:
        return self._items.get(handle)

    def release(self, handle: str) -> None:
        with self._lock:
            if self._items.pop(handle, None) is not None:
                logger.info(f"Released media {handle}")
