"""Runtime configuration: model tiers, limits and environment settings."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Tuple

from dotenv import load_dotenv

MIN_SLIDES = 1
MAX_SLIDES = 50
DEFAULT_SLIDE_COUNT = 5

# Prefix of the source text sent to the outline backend.
MAX_SOURCE_CHARS = 25000
TRUNCATION_SUFFIX = "..."

PAGE_WIDTH_PX = 1920
PAGE_HEIGHT_PX = 1080

DEFAULT_IMAGE_MODEL = "gemini-3-pro-image-preview"
DEFAULT_IMAGE_ASPECT_RATIO = "16:9"
DEFAULT_IMAGE_SIZE = "1K"

API_KEY_ENV_VARS = ("GEMINI_API_KEY", "GOOGLE_API_KEY")


@dataclass(frozen=True)
class OutlineTier:
    """One backend configuration in the outline fallback chain."""

    label: str
    model_name: str
    max_output_tokens: int
    thinking_budget: Optional[int] = None


DEFAULT_OUTLINE_TIERS: Tuple[OutlineTier, ...] = (
    OutlineTier("pro-thinking", "gemini-3-pro-preview", 16384, thinking_budget=8192),
    OutlineTier("pro-standard", "gemini-3-pro-preview", 12000),
    OutlineTier("flash", "gemini-3-flash-preview", 12000),
)


@dataclass
class Settings:
    """Process settings resolved from the environment (``.env`` supported)."""

    gemini_api_key: Optional[str] = None
    image_model: str = DEFAULT_IMAGE_MODEL
    image_size: str = DEFAULT_IMAGE_SIZE
    max_source_chars: int = MAX_SOURCE_CHARS
    outline_tiers: Tuple[OutlineTier, ...] = field(default=DEFAULT_OUTLINE_TIERS)
    log_level: str = "INFO"
    log_path: Optional[Path] = None

    @classmethod
    def from_env(cls, *, dotenv: bool = True) -> "Settings":
        if dotenv:
            load_dotenv()
        api_key = next((os.getenv(name) for name in API_KEY_ENV_VARS if os.getenv(name)), None)
        log_file = os.getenv("IMAGE_DECK_LOG_FILE")
        return cls(
            gemini_api_key=api_key,
            image_model=os.getenv("IMAGE_DECK_IMAGE_MODEL", DEFAULT_IMAGE_MODEL),
            image_size=os.getenv("IMAGE_DECK_IMAGE_SIZE", DEFAULT_IMAGE_SIZE),
            max_source_chars=int(os.getenv("IMAGE_DECK_MAX_SOURCE_CHARS", MAX_SOURCE_CHARS)),
            log_level=os.getenv("IMAGE_DECK_LOG_LEVEL", "INFO").upper(),
            log_path=Path(log_file) if log_file else None,
        )

    @property
    def has_credentials(self) -> bool:
        return bool(self.gemini_api_key)
