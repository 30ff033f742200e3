"""
Prompt library for transition synthesis.
The user picks a transition style and a pacing; we inject the canonical phrase.
"""

TRANSITION_PHRASES = {
    "none": "direct transitions",
    "fade": "soft fades to black between key frames",
    "dissolve": "smooth cross-dissolve transitions",
    "zoom": "dynamic camera zooms transitioning between scenes",
    "pan": "seamless cinematic pans connecting the visuals",
    "cut": "sharp, rhythmic cuts between images",
    "morph": "fluid AI morphing and liquid transitions",
}

PACING_PHRASES = {
    "slow": "lingering, meditative pacing",
    "normal": "balanced cinematic flow",
    "fast": "energetic and rapid movement",
    "rhythmic": "timed to a clear beat with consistent intervals",
}

DEFAULT_INSTRUCTION = "Create a cinematic transition through these images."

FALLBACK_PROMPT = "A cinematic animation following the sequence of images."

DIRECTOR_SYSTEM_INSTRUCTION = (
    "You are an expert film director and AI prompt engineer. Your goal is to "
    "synthesize multiple images into a single cohesive video generation prompt "
    "with specific focus on transition aesthetics."
)

DIRECTIVE_TEMPLATE = """I have a sequence of {count} images uploaded in order.
Please analyze the context, characters, setting, and movement between these images.

User's Priority Instructions: "{instruction}"

TECHNICAL REQUIREMENTS:
- Transition Style: {transition_phrase}
- Pacing: {pacing_phrase}

Based on the images and technical requirements, write a single, detailed cinematic prompt for a video generator (Veo).
The prompt MUST explicitly describe how the camera moves and how the scene transitions from one image's content to the next using the requested "{transition}" style and "{pacing}" pace.

Only return the final prompt text."""


def transition_phrase(style: str) -> str:
    return TRANSITION_PHRASES[style]


def pacing_phrase(pacing: str) -> str:
    return PACING_PHRASES[pacing]
