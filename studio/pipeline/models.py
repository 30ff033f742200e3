"""
Pydantic models and enums for the generation pipeline.
"""

import base64
import binascii
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


# ── Settings Enums ───────────────────────────────────────────────────────────

class TransitionStyle(str, Enum):
    NONE = "none"
    FADE = "fade"
    DISSOLVE = "dissolve"
    ZOOM = "zoom"
    PAN = "pan"
    CUT = "cut"
    MORPH = "morph"


class VideoPacing(str, Enum):
    SLOW = "slow"
    NORMAL = "normal"
    FAST = "fast"
    RHYTHMIC = "rhythmic"


class AspectRatio(str, Enum):
    LANDSCAPE = "16:9"
    PORTRAIT = "9:16"


class GenerationSettings(BaseModel):
    """Snapshot of the user's choices at the moment generation is requested."""
    model_config = ConfigDict(frozen=True)

    transition_style: TransitionStyle = TransitionStyle.MORPH
    pacing: VideoPacing = VideoPacing.NORMAL
    aspect_ratio: AspectRatio = AspectRatio.LANDSCAPE


# ── Images ───────────────────────────────────────────────────────────────────

class CandidateFile(BaseModel):
    """A file offered for upload, before type filtering."""
    name: str
    mime_type: str = ""
    data: bytes = b""


class UploadedImage(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    payload: bytes
    mime_type: str
    display_name: str

    @field_validator("mime_type")
    @classmethod
    def _must_be_image(cls, value: str) -> str:
        if not value.startswith("image/"):
            raise ValueError(f"not an image type: {value!r}")
        return value

    @property
    def b64(self) -> str:
        return base64.b64encode(self.payload).decode("ascii")

    def inline_part(self) -> dict:
        """The image as a Gemini inlineData part."""
        return {"inlineData": {"mimeType": self.mime_type, "data": self.b64}}


# ── Status ───────────────────────────────────────────────────────────────────

class GenerationStatus(BaseModel):
    """The only thing the presentation layer observes. Replaced, never patched."""
    model_config = ConfigDict(frozen=True)

    is_generating: bool = False
    status_message: str = ""
    progress: int = Field(0, ge=0, le=100)
    result_handle: Optional[str] = None

    @model_validator(mode="after")
    def _no_result_while_generating(self):
        if self.is_generating and self.result_handle is not None:
            raise ValueError("a generating status cannot carry a result")
        return self


# ── Video Job ────────────────────────────────────────────────────────────────

class JobHandle(BaseModel):
    """Reference to a running Veo operation, refreshed on each poll."""
    name: str
    done: bool = False
    result_uris: list[str] = Field(default_factory=list)
    error: Optional[str] = None

    @classmethod
    def from_operation(cls, operation: dict) -> "JobHandle":
        response = operation.get("response") or {}
        # REST shape first, SDK shape second
        samples = (
            (response.get("generateVideoResponse") or {}).get("generatedSamples")
            or response.get("generatedVideos")
            or []
        )
        uris = []
        for sample in samples:
            uri = (sample.get("video") or {}).get("uri")
            if uri:
                uris.append(uri)

        error = operation.get("error")
        if isinstance(error, dict):
            error = error.get("message") or str(error)
        return cls(
            name=operation.get("name", ""),
            done=bool(operation.get("done", False)),
            result_uris=uris,
            error=str(error) if error else None,
        )


# ── API Request / Response Models ────────────────────────────────────────────

class ImageUpload(BaseModel):
    name: str
    mime_type: str = ""
    data: str = Field(..., description="Base64 payload or a data: URL")

    def to_candidate(self) -> CandidateFile:
        b64data = self.data
        mime = self.mime_type
        if b64data.startswith("data:"):
            header, b64data = b64data.split(",", 1)
            mime = mime or header.split(":")[1].split(";")[0]
        try:
            raw = base64.b64decode(b64data, validate=True)
        except binascii.Error as e:
            raise ValueError(f"Invalid base64 data for {self.name}: {e}")
        return CandidateFile(name=self.name, mime_type=mime, data=raw)


class ImageBatchRequest(BaseModel):
    files: list[ImageUpload] = Field(default_factory=list)


class ImageSummary(BaseModel):
    id: str
    name: str
    mime_type: str
    size: int

    @classmethod
    def of(cls, image: UploadedImage) -> "ImageSummary":
        return cls(
            id=image.id,
            name=image.display_name,
            mime_type=image.mime_type,
            size=len(image.payload),
        )


class GenerationRequest(BaseModel):
    instruction: str = ""
    transition_style: TransitionStyle = TransitionStyle.MORPH
    pacing: VideoPacing = VideoPacing.NORMAL
    aspect_ratio: AspectRatio = AspectRatio.LANDSCAPE

    def settings(self) -> GenerationSettings:
        return GenerationSettings(
            transition_style=self.transition_style,
            pacing=self.pacing,
            aspect_ratio=self.aspect_ratio,
        )


class EditRequest(BaseModel):
    prompt: str = ""


class EditResponse(BaseModel):
    image: str = Field(..., description="data: URL of the edited image")


class CredentialRequest(BaseModel):
    api_key: str


class CredentialStatus(BaseModel):
    has_credential: bool
    selection_required: bool
