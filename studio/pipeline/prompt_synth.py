"""
Step 1: Prompt Synthesis — Gemini Flash (vision).

Sends every image, in order, plus a directive built from the user's
instruction and the canonical transition / pacing phrases. Gemini answers
with one cinematic prompt for Veo.
"""

import logging
from typing import Optional, Sequence

from .. import config, metrics
from ..gemini import GeminiClient
from ..presets import (
    DEFAULT_INSTRUCTION,
    DIRECTIVE_TEMPLATE,
    DIRECTOR_SYSTEM_INSTRUCTION,
    FALLBACK_PROMPT,
    pacing_phrase,
    transition_phrase,
)
from .models import GenerationSettings, TransitionStyle, UploadedImage, VideoPacing

logger = logging.getLogger(__name__)


def build_directive(
    image_count: int,
    instruction: str,
    transition_style: TransitionStyle,
    pacing: VideoPacing,
) -> str:
    """The text part sent alongside the images."""
    style = TransitionStyle(transition_style).value
    pace = VideoPacing(pacing).value
    return DIRECTIVE_TEMPLATE.format(
        count=image_count,
        instruction=instruction.strip() or DEFAULT_INSTRUCTION,
        transition_phrase=transition_phrase(style),
        pacing_phrase=pacing_phrase(pace),
        transition=style,
        pacing=pace,
    )


def extract_text(response: dict) -> str:
    """Concatenate the text parts of the first candidate ("" if there are none)."""
    candidates = response.get("candidates") or []
    if not candidates:
        return ""
    parts = (candidates[0].get("content") or {}).get("parts") or []
    return "".join(part.get("text", "") for part in parts if not part.get("thought"))


class PromptSynthesizer:

    def __init__(self, client: GeminiClient, model: Optional[str] = None):
        self.client = client
        self.model = model or config.PROMPT_MODEL

    async def synthesize(
        self,
        images: Sequence[UploadedImage],
        instruction: str,
        settings: GenerationSettings,
    ) -> str:
        """
        Produce one transition prompt for the image sequence.

        An empty answer yields FALLBACK_PROMPT. Errors from the call itself
        (quota, auth, network) propagate unchanged.
        """
        if not images:
            raise ValueError("Prompt synthesis needs at least one image")

        directive = build_directive(
            len(images), instruction, settings.transition_style, settings.pacing
        )
        parts = [img.inline_part() for img in images]
        parts.append({"text": directive})

        with metrics.timed("prompt_synth"):
            response = await self.client.generate_content(
                model=self.model,
                parts=parts,
                system_instruction=DIRECTOR_SYSTEM_INSTRUCTION,
            )

        text = extract_text(response)
        if not text.strip():
            logger.warning("Gemini returned no prompt text, using fallback prompt")
            return FALLBACK_PROMPT

        logger.info(f"Synthesized prompt ({len(text)} chars): {text[:80]}...")
        return text
