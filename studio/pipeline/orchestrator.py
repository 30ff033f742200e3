"""
StudioService — main pipeline orchestrator.

Chains the video path with status tracking:
  Step 1: Prompt Synthesis (Gemini Flash, all images)
  Step 2: Veo job (first + last image) → poll → download
and runs the independent single-shot image edit.

Generations are serialized: one at a time, a second start is refused.
"""

import asyncio
import contextlib
import logging
from typing import Optional

from .. import config, metrics
from ..credentials import CredentialGate
from ..errors import CredentialError, GenerationInProgressError, is_credential_error
from ..gemini import GeminiClient
from .image_edit import ImageEditor
from .image_store import ImageSetStore
from .models import GenerationSettings, GenerationStatus
from .prompt_synth import PromptSynthesizer
from .status import GenerationEvent, StatusChannel, project_status
from .storage import MediaStore
from .video_job import VideoJobOrchestrator

logger = logging.getLogger(__name__)


class StudioService:
    """
    Top-level invocation for the studio.

    Usage:
        service = StudioService()
        service.images.add(files)

        # Video path (publishes GenerationStatus snapshots on service.status)
        final = await service.generate_video("slow reveal", GenerationSettings())

        # Edit path
        data_url = await service.edit_image("make it night")
    """

    def __init__(
        self,
        credentials: Optional[CredentialGate] = None,
        client: Optional[GeminiClient] = None,
        images: Optional[ImageSetStore] = None,
        media: Optional[MediaStore] = None,
        synthesizer: Optional[PromptSynthesizer] = None,
        video_jobs: Optional[VideoJobOrchestrator] = None,
        editor: Optional[ImageEditor] = None,
        status: Optional[StatusChannel] = None,
        min_images: Optional[int] = None,
    ):
        self.credentials = credentials or CredentialGate()
        self.client = client or GeminiClient(self.credentials)
        self.images = images or ImageSetStore()
        self.media = media or MediaStore()
        self.synthesizer = synthesizer or PromptSynthesizer(self.client)
        self.video_jobs = video_jobs or VideoJobOrchestrator(self.client, self.media)
        self.editor = editor or ImageEditor(self.client)
        self.status = status or StatusChannel()
        self.min_images = min_images if min_images is not None else config.MIN_IMAGES_FOR_VIDEO

        self._busy = False
        self._task: Optional[asyncio.Task] = None

    def get_status(self) -> GenerationStatus:
        return self.status.current

    def _publish(self, event: GenerationEvent, **kwargs) -> None:
        self.status.publish(project_status(event, **kwargs))

    def is_running(self) -> bool:
        return self._busy or (self._task is not None and not self._task.done())

    def _check_image_count(self) -> None:
        if len(self.images) < self.min_images:
            raise ValueError(f"Please upload at least {self.min_images} images.")

    def _ensure_credential(self) -> None:
        if self.credentials.has_credential():
            return
        self.credentials.prompt_for_credential()
        if not self.credentials.has_credential():
            raise CredentialError("No API key selected. Please select an API key.")

    # ── Video path ───────────────────────────────────────────────────────

    def _prepare(self) -> Optional[list]:
        """
        Synchronous half of a generation: validate, snapshot the set, publish START.

        Returns the image snapshot, or None when a missing key already turned
        into the failure status.
        """
        if self.is_running():
            raise GenerationInProgressError("A video generation is already in progress")
        self._check_image_count()
        images = self.images.snapshot()
        metrics.inc_counter("requests.generate")

        try:
            self._ensure_credential()
        except CredentialError as e:
            self._fail(e)
            return None

        self._busy = True
        metrics.set_gauge("active_generations", 1)
        self._publish(GenerationEvent.START)
        return images

    def _fail(self, error: Exception) -> None:
        logger.error(f"Video generation failed: {error}", exc_info=True)
        metrics.inc_counter("generations.failed")
        metrics.record_error("generate", type(error).__name__, str(error))
        self._publish(GenerationEvent.FAILED, error=error)
        if is_credential_error(error):
            self.credentials.prompt_for_credential()

    def _finish(self) -> None:
        self._busy = False
        metrics.set_gauge("active_generations", 0)

    async def _run(
        self, images: list, instruction: str, settings: GenerationSettings
    ) -> GenerationStatus:
        try:
            prompt = await self.synthesizer.synthesize(images, instruction, settings)

            self._publish(GenerationEvent.PROMPT_READY)
            media_handle = await self.video_jobs.generate(images, prompt, settings.aspect_ratio)

            self._publish(GenerationEvent.RESOLVED, result_handle=media_handle)
            metrics.inc_counter("generations.completed")

        except asyncio.CancelledError:
            logger.warning("Video generation cancelled; the remote job keeps running")
            self._publish(GenerationEvent.CANCELLED)
            metrics.inc_counter("generations.cancelled")
            raise

        except Exception as e:
            self._fail(e)

        finally:
            self._finish()

        return self.get_status()

    async def generate_video(
        self, instruction: str, settings: GenerationSettings
    ) -> GenerationStatus:
        """
        Run prompt synthesis then the Veo job, publishing status at each milestone.

        Validation errors raise before anything is published. Every later
        failure becomes the failure status and is returned, not raised;
        cancellation publishes the cancelled status and propagates.
        """
        images = self._prepare()
        if images is None:
            return self.get_status()
        return await self._run(images, instruction, settings)

    async def start_generation(
        self, instruction: str, settings: GenerationSettings
    ) -> GenerationStatus:
        """
        Fire-and-forget variant of generate_video.

        Validation, the image snapshot and the START status all happen before
        this returns, so the returned status already reflects the new run.
        """
        images = self._prepare()
        if images is not None:
            self._task = asyncio.create_task(self._run(images, instruction, settings))
        return self.get_status()

    async def cancel_generation(self) -> bool:
        """Stop polling the running generation. Returns False if none was running."""
        task = self._task
        if task is None or task.done():
            return False
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task
        if self._busy:
            # cancelled before the task body ran
            self._finish()
            self._publish(GenerationEvent.CANCELLED)
            metrics.inc_counter("generations.cancelled")
        return True

    def release_media(self, handle: str) -> None:
        self.media.release(handle)

    # ── Edit path ────────────────────────────────────────────────────────

    async def edit_image(self, prompt: str) -> str:
        """Edit the first image of the set. Returns a data: URL."""
        images = self.images.snapshot()
        if not images:
            raise ValueError("Upload an image to edit first.")
        if not prompt or not prompt.strip():
            raise ValueError("Please enter an edit prompt.")

        metrics.inc_counter("requests.edit")
        first = images[0]
        try:
            return await self.editor.edit(first.payload, first.mime_type, prompt)
        except Exception as e:
            logger.error(f"Image edit failed: {e}", exc_info=True)
            metrics.record_error("edit", type(e).__name__, str(e))
            if is_credential_error(e):
                self.credentials.prompt_for_credential()
            raise
