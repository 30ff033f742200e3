"""
Video Transition Pipeline

  Image Set → Prompt Synthesis (Gemini) → Veo job + polling → Status / Media
  Image Edit — independent single-shot path over the same image set
"""

from .orchestrator import StudioService
from .routes import image_router, generation_router, studio_router
from .models import GenerationSettings, GenerationStatus

__all__ = [
    "StudioService",
    "image_router",
    "generation_router",
    "studio_router",
    "GenerationSettings",
    "GenerationStatus",
]
