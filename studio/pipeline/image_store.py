"""
Image Set Store — the ordered sequence of uploaded images.

Insertion order is the narrative order: the synthesizer reads the images in
this order and the video job uses the first and last as its anchor frames.
"""

import logging
import uuid
from typing import Iterable, Iterator, Optional

from .. import config
from .models import CandidateFile, UploadedImage

logger = logging.getLogger(__name__)


class ImageSetStore:
    """In-memory image set capped at `max_images`. Filtering is silent."""

    def __init__(self, max_images: Optional[int] = None):
        self.max_images = max_images if max_images is not None else config.MAX_IMAGES
        self._images: list[UploadedImage] = []

    def __len__(self) -> int:
        return len(self._images)

    def __iter__(self) -> Iterator[UploadedImage]:
        return iter(list(self._images))

    def snapshot(self) -> tuple[UploadedImage, ...]:
        """Immutable copy of the current set, in order."""
        return tuple(self._images)

    def get(self, image_id: str) -> Optional[UploadedImage]:
        return next((img for img in self._images if img.id == image_id), None)

    def add(self, files: Iterable[CandidateFile]) -> list[UploadedImage]:
        """
        Append a batch of candidate files.

        Non-image types are dropped, and the set is truncated to the oldest
        `max_images` entries. Returns the images from this batch that were kept.
        """
        accepted = []
        skipped = 0
        for file in files:
            if not (file.mime_type or "").startswith("image/"):
                skipped += 1
                continue
            accepted.append(UploadedImage(
                id=uuid.uuid4().hex,
                payload=bytes(file.data),
                mime_type=file.mime_type,
                display_name=file.name,
            ))

        combined = (self._images + accepted)[: self.max_images]
        kept = combined[len(self._images):]
        self._images = combined

        if skipped or len(kept) < len(accepted):
            logger.info(
                f"Image batch filtered: {skipped} non-image, "
                f"{len(accepted) - len(kept)} over the {self.max_images} cap"
            )
        logger.info(f"Image set now holds {len(self._images)} image(s)")
        return kept

    def remove(self, image_id: str) -> None:
        self._images = [img for img in self._images if img.id != image_id]

    def clear(self) -> None:
        self._images = []
