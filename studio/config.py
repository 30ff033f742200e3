"""
Environment configuration.

Values come from the process environment, after a local `.env` file has been
loaded. Components read these as defaults and accept keyword overrides.
"""

import os

from dotenv import load_dotenv

load_dotenv()

# ── Credentials ──────────────────────────────────────────────────────────────

GEMINI_API_KEY = os.getenv("GEMINI_API_KEY") or os.getenv("GOOGLE_API_KEY", "")
GEMINI_API_BASE = os.getenv(
    "GEMINI_API_BASE", "https://generativelanguage.googleapis.com/v1beta"
)

# ── Models ───────────────────────────────────────────────────────────────────

PROMPT_MODEL = os.getenv("PROMPT_MODEL", "gemini-3-flash-preview")
EDIT_MODEL = os.getenv("EDIT_MODEL", "gemini-2.5-flash-image")
VIDEO_MODEL = os.getenv("VIDEO_MODEL", "veo-3.1-fast-generate-preview")
VIDEO_RESOLUTION = os.getenv("VIDEO_RESOLUTION", "1080p")

# ── Timing ───────────────────────────────────────────────────────────────────

POLL_INTERVAL = float(os.getenv("POLL_INTERVAL", "10"))  # seconds
HTTP_TIMEOUT = float(os.getenv("HTTP_TIMEOUT", "60"))

# ── Image set limits ─────────────────────────────────────────────────────────

MAX_IMAGES = int(os.getenv("MAX_IMAGES", "40"))
MIN_IMAGES_FOR_VIDEO = int(os.getenv("MIN_IMAGES_FOR_VIDEO", "5"))

# ── Server ───────────────────────────────────────────────────────────────────

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
PORT = int(os.getenv("PORT", "8080"))
