"""Data models representing deck requests, styles and per-slide state."""

from __future__ import annotations

import base64
import enum
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional

from .config import MAX_SLIDES, MIN_SLIDES


class SlideStatus(str, enum.Enum):
    """Lifecycle of a single slide render."""

    WAITING = "waiting"
    RENDERING = "rendering"
    DONE = "done"
    FAILED = "failed"


@dataclass(slots=True)
class StyleDefinition:
    """Catalog entry for a visual theme."""

    style_id: str
    name: str
    description: str
    prompt_modifier: str
    preview_color: str = "#64748b"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StyleDefinition":
        return cls(
            style_id=data.get("id", ""),
            name=data.get("name", ""),
            description=data.get("description", ""),
            prompt_modifier=data.get("prompt_modifier", ""),
            preview_color=data.get("preview_color", "#64748b"),
        )


@dataclass(frozen=True)
class DeckConfig:
    """Immutable parameters of one deck request."""

    source_text: str
    slide_count: int
    style_id: str
    custom_style_prompt: Optional[str] = None

    def __post_init__(self):
        if not self.source_text or not self.source_text.strip():
            raise ValueError("source_text must not be empty")
        if not MIN_SLIDES <= self.slide_count <= MAX_SLIDES:
            raise ValueError(
                f"slide_count must be between {MIN_SLIDES} and {MAX_SLIDES}, got {self.slide_count}"
            )
        if not self.style_id:
            raise ValueError("style_id must not be empty")


@dataclass(frozen=True, slots=True)
class SlideImage:
    """A rendered slide image as returned by the image backend."""

    data: bytes
    mime_type: str = "image/png"

    @property
    def data_uri(self) -> str:
        encoded = base64.b64encode(self.data).decode("ascii")
        return f"data:{self.mime_type};base64,{encoded}"

    @property
    def extension(self) -> str:
        return {"image/jpeg": "jpg", "image/webp": "webp"}.get(self.mime_type, "png")


@dataclass(slots=True)
class SlideRecord:
    """Content, render status and rendered artifact of one slide."""

    slide_id: str
    page_number: int
    title: str
    bullet_points: List[str] = field(default_factory=list)
    visual_prompt: str = ""
    status: SlideStatus = SlideStatus.WAITING
    rendered_image: Optional[SlideImage] = None
    last_error: Optional[str] = None

    def copy(self) -> "SlideRecord":
        return replace(self, bullet_points=list(self.bullet_points))

    @property
    def is_terminal(self) -> bool:
        return self.status in (SlideStatus.DONE, SlideStatus.FAILED)
