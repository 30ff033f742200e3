"""
Visionary Studio backend.

Turns an ordered set of uploaded images into a Veo transition video:
  Image Set → Prompt Synthesis (Gemini) → Veo job + polling → status / media
and offers a single-shot Gemini image edit on the side.
"""

__version__ = "0.1.0"
