"""
FastAPI routes for the studio pipeline.

Image Endpoints:
  POST   /images              — Add a batch (non-images dropped, capped at 40)
  GET    /images              — List the ordered set
  DELETE /images/{id}         — Remove one image
  DELETE /images              — Clear the set

Generation Endpoints:
  POST /generation            — Start a video generation (async)
  GET  /generation/status     — Current GenerationStatus
  GET  /generation/events     — Server-sent stream of status snapshots
  POST /generation/cancel     — Stop polling the running generation

Edit / Media / Credential Endpoints:
  POST   /edit                — Edit the first image
  GET    /media/{handle}      — Download a generated video
  DELETE /media/{handle}      — Release a generated video
  GET    /credential          — Credential gate state
  POST   /credential          — Select an API key
"""

import logging

import httpx
from fastapi import APIRouter, Depends, HTTPException, Response
from fastapi.responses import StreamingResponse

from ..errors import CredentialError, GeminiAPIError, GenerationInProgressError, NoImageProducedError
from .models import (
    CredentialRequest,
    CredentialStatus,
    EditRequest,
    EditResponse,
    GenerationRequest,
    GenerationStatus,
    ImageBatchRequest,
    ImageSummary,
)
from .orchestrator import StudioService

logger = logging.getLogger(__name__)

# Singleton service instance
_service = StudioService()


def get_service() -> StudioService:
    return _service


# ═════════════════════════════════════════════════════════════════════════════
# Image Router
# ═════════════════════════════════════════════════════════════════════════════

image_router = APIRouter(prefix="/images", tags=["images"])


@image_router.post("", response_model=list[ImageSummary])
async def add_images(request: ImageBatchRequest, service: StudioService = Depends(get_service)):
    """Add a batch of files. Returns the whole set after the add."""
    try:
        candidates = [f.to_candidate() for f in request.files]
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    service.images.add(candidates)
    return [ImageSummary.of(img) for img in service.images]


@image_router.get("", response_model=list[ImageSummary])
async def list_images(service: StudioService = Depends(get_service)):
    return [ImageSummary.of(img) for img in service.images]


@image_router.delete("/{image_id}", status_code=204)
async def remove_image(image_id: str, service: StudioService = Depends(get_service)):
    service.images.remove(image_id)
    return Response(status_code=204)


@image_router.delete("", status_code=204)
async def clear_images(service: StudioService = Depends(get_service)):
    service.images.clear()
    return Response(status_code=204)


# ═════════════════════════════════════════════════════════════════════════════
# Generation Router
# ═════════════════════════════════════════════════════════════════════════════

generation_router = APIRouter(prefix="/generation", tags=["generation"])


@generation_router.post("", response_model=GenerationStatus, status_code=202)
async def start_generation(request: GenerationRequest, service: StudioService = Depends(get_service)):
    """
    Start prompt synthesis + Veo generation in the background.

    Errors:
      - 400: Fewer than 5 images
      - 409: A generation is already running
    """
    try:
        return await service.start_generation(request.instruction, request.settings())
    except GenerationInProgressError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Generation start failed: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))


@generation_router.get("/status", response_model=GenerationStatus)
async def get_generation_status(service: StudioService = Depends(get_service)):
    return service.get_status()


@generation_router.get("/events")
async def stream_generation_events(service: StudioService = Depends(get_service)):
    """Server-sent events: one `data:` line per published snapshot."""

    async def event_source():
        async for status in service.status.subscribe():
            yield f"data: {status.model_dump_json()}\n\n"

    return StreamingResponse(event_source(), media_type="text/event-stream")


@generation_router.post("/cancel")
async def cancel_generation(service: StudioService = Depends(get_service)):
    cancelled = await service.cancel_generation()
    return {"cancelled": cancelled, "status": service.get_status()}


# ═════════════════════════════════════════════════════════════════════════════
# Edit / Media / Credential Router
# ═════════════════════════════════════════════════════════════════════════════

studio_router = APIRouter(tags=["studio"])


@studio_router.post("/edit", response_model=EditResponse)
async def edit_image(request: EditRequest, service: StudioService = Depends(get_service)):
    """
    Edit the first uploaded image.

    Errors:
      - 400: No image, or empty prompt
      - 401: API key missing or rejected
      - 502: Gemini failed, was unreachable, or produced no image
    """
    try:
        return EditResponse(image=await service.edit_image(request.prompt))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except CredentialError as e:
        raise HTTPException(status_code=401, detail=str(e))
    except (NoImageProducedError, GeminiAPIError) as e:
        raise HTTPException(status_code=502, detail=str(e))
    except httpx.HTTPError as e:
        raise HTTPException(status_code=502, detail=f"Gemini request failed: {e}")
    except Exception as e:
        logger.error(f"Image edit failed: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))


@studio_router.get("/media/{handle}")
async def get_media(handle: str, service: StudioService = Depends(get_service)):
    item = service.media.get(handle)
    if item is None:
        raise HTTPException(status_code=404, detail="Media not found")
    return Response(content=item.data, media_type=item.mime_type)


@studio_router.delete("/media/{handle}", status_code=204)
async def release_media(handle: str, service: StudioService = Depends(get_service)):
    service.release_media(handle)
    return Response(status_code=204)


@studio_router.get("/credential", response_model=CredentialStatus)
async def get_credential(service: StudioService = Depends(get_service)):
    return CredentialStatus(
        has_credential=service.credentials.has_credential(),
        selection_required=service.credentials.selection_required,
    )


@studio_router.post("/credential", response_model=CredentialStatus)
async def select_credential(request: CredentialRequest, service: StudioService = Depends(get_service)):
    try:
        service.credentials.select(request.api_key)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return CredentialStatus(
        has_credential=service.credentials.has_credential(),
        selection_required=service.credentials.selection_required,
    )
