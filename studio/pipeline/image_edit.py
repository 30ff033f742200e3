"""
Image Edit — Gemini 2.5 Flash Image.

One generateContent call with the source image and the instruction. The first
returned part carrying inline image data is the result.
"""

import base64
import logging
from typing import Optional

from .. import config, metrics
from ..errors import NoImageProducedError
from ..gemini import GeminiClient

logger = logging.getLogger(__name__)


def first_inline_image(response: dict) -> Optional[dict]:
    """The first inlineData part of the first candidate, if any."""
    candidates = response.get("candidates") or []
    if not candidates:
        return None
    for part in (candidates[0].get("content") or {}).get("parts") or []:
        inline = part.get("inlineData") or part.get("inline_data")
        if inline and inline.get("data"):
            return inline
    return None


def to_data_url(data_b64: str, mime_type: str) -> str:
    return f"data:{mime_type};base64,{data_b64}"


class ImageEditor:

    def __init__(self, client: GeminiClient, model: Optional[str] = None):
        self.client = client
        self.model = model or config.EDIT_MODEL

    async def edit(self, image: bytes, mime_type: str, prompt: str) -> str:
        """
        Edit `image` following `prompt`.

        Returns:
            data: URL of the edited image.

        Raises:
            NoImageProducedError: the response had no inline image part.
        """
        parts = [
            {"inlineData": {"mimeType": mime_type, "data": base64.b64encode(image).decode("ascii")}},
            {"text": prompt},
        ]

        with metrics.timed("image_edit"):
            response = await self.client.generate_content(model=self.model, parts=parts)

        inline = first_inline_image(response)
        if inline is None:
            raise NoImageProducedError("No image was produced by the edit model.")

        out_mime = inline.get("mimeType") or inline.get("mime_type") or mime_type
        logger.info(f"Image edit produced {out_mime} ({len(inline['data'])} b64 chars)")
        return to_data_url(inline["data"], out_mime)
