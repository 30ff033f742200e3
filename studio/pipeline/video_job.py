"""
Step 2: The Motion — Veo 3.1 Fast via the Gemini API.

Only the first and last images anchor the job (start frame / last frame);
every other image influenced the prompt text alone.

The job is polled every POLL_INTERVAL seconds until Veo reports `done`.
There is no attempt limit: the job service decides when it is finished.
Cancelling the awaiting task stops polling at the next sleep; the remote
job keeps running.
"""

import asyncio
import logging
from typing import Optional, Sequence

from .. import config, metrics
from ..errors import GeminiAPIError, NoResultError
from ..gemini import GeminiClient
from .models import AspectRatio, JobHandle, UploadedImage
from .storage import MediaStore

logger = logging.getLogger(__name__)


def _frame(image: UploadedImage) -> dict:
    return {"bytesBase64Encoded": image.b64, "mimeType": image.mime_type}


class VideoJobOrchestrator:
    """Submits a Veo job, polls it to completion and resolves the result."""

    def __init__(
        self,
        client: GeminiClient,
        media: MediaStore,
        model: Optional[str] = None,
        resolution: Optional[str] = None,
        poll_interval: Optional[float] = None,
    ):
        self.client = client
        self.media = media
        self.model = model or config.VIDEO_MODEL
        self.resolution = resolution or config.VIDEO_RESOLUTION
        self.poll_interval = (
            poll_interval if poll_interval is not None else config.POLL_INTERVAL
        )

    def build_request(
        self,
        start_image: UploadedImage,
        end_image: UploadedImage,
        prompt: str,
        aspect_ratio: AspectRatio,
    ) -> tuple[dict, dict]:
        """Returns the (instance, parameters) pair for predictLongRunning."""
        instance = {
            "prompt": prompt,
            "image": _frame(start_image),
            "lastFrame": _frame(end_image),
        }
        parameters = {
            "sampleCount": 1,
            "resolution": self.resolution,
            "aspectRatio": AspectRatio(aspect_ratio).value,
        }
        return instance, parameters

    async def submit(
        self,
        images: Sequence[UploadedImage],
        prompt: str,
        aspect_ratio: AspectRatio,
    ) -> JobHandle:
        if not images:
            raise ValueError("Video generation needs at least one image")

        instance, parameters = self.build_request(images[0], images[-1], prompt, aspect_ratio)
        operation = await self.client.submit_video_job(self.model, instance, parameters)
        return JobHandle.from_operation(operation)

    async def poll(self, handle: JobHandle) -> JobHandle:
        operation = await self.client.get_operation(handle.name)
        metrics.inc_counter("veo.polls")
        return JobHandle.from_operation({"name": handle.name, **operation})

    async def wait_for_completion(self, handle: JobHandle) -> JobHandle:
        attempt = 0
        while not handle.done:
            await asyncio.sleep(self.poll_interval)
            attempt += 1
            handle = await self.poll(handle)
            logger.info(f"Veo poll #{attempt}: done={handle.done}")
        return handle

    async def resolve(self, handle: JobHandle) -> str:
        """Download the first result and register it. Returns the media handle."""
        if handle.error:
            raise GeminiAPIError(f"Video generation failed: {handle.error}")
        if not handle.result_uris:
            raise NoResultError("Video generation failed: no result returned")

        data, mime_type = await self.client.download(handle.result_uris[0])
        return self.media.register(data, mime_type)

    async def generate(
        self,
        images: Sequence[UploadedImage],
        prompt: str,
        aspect_ratio: AspectRatio,
    ) -> str:
        """
        Run the whole job: submit → poll until done → fetch the video.

        Args:
            images:       Ordered image set; first and last become anchor frames.
            prompt:       Synthesized transition prompt.
            aspect_ratio: "16:9" or "9:16".

        Returns:
            Media store handle of the downloaded video.

        Any failure (submit, poll k, fetch) ends the run; nothing is resumed.
        """
        with metrics.timed("video_job"):
            handle = await self.submit(images, prompt, aspect_ratio)
            handle = await self.wait_for_completion(handle)
            media_handle = await self.resolve(handle)
        logger.info(f"Veo job {handle.name} resolved to media {media_handle}")
        return media_handle
