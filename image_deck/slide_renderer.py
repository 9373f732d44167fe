"""Render one slide record into one composited slide image."""

from __future__ import annotations

import logging
from typing import Optional

from model_api.data_classes import ImageGenerationRequest
from model_api.exceptions import LLMEmptyResponseError

from .config import DEFAULT_IMAGE_ASPECT_RATIO, DEFAULT_IMAGE_MODEL, DEFAULT_IMAGE_SIZE
from .exceptions import NoImageDataError
from .slide_models import SlideImage, SlideRecord
from .style_catalog import StyleCatalog, load_default_catalog

LOGGER = logging.getLogger(__name__)

MANDATORY_CONSTRAINTS = (
    "MANDATORY:",
    "- Compose a single high-quality presentation slide in 16:9 landscape aspect ratio.",
    "- Render the title and every bullet point as clearly legible text on the slide image itself.",
    "- Show only the slide: no application UI, window frames, toolbars, cursors, device mockups or watermarks.",
)


class SlideRenderer:
    """Build the render prompt for a slide and request exactly one image.

    No retries happen here; a failed call propagates to the caller.
    """

    def __init__(
        self,
        image_client,
        *,
        catalog: Optional[StyleCatalog] = None,
        model_name: str = DEFAULT_IMAGE_MODEL,
        aspect_ratio: str = DEFAULT_IMAGE_ASPECT_RATIO,
        image_size: str = DEFAULT_IMAGE_SIZE,
    ) -> None:
        self.image_client = image_client
        self.catalog = catalog or load_default_catalog()
        self.model_name = model_name
        self.aspect_ratio = aspect_ratio
        self.image_size = image_size

    def build_prompt(
        self,
        slide: SlideRecord,
        style_id: str,
        *,
        custom_style_prompt: Optional[str] = None,
    ) -> str:
        points = [f"- {point}" for point in slide.bullet_points] or ["- (no bullet points)"]
        sections = [
            self.catalog.style_directive(style_id, custom_style_prompt),
            "",
            f'Slide title: "{slide.title}"',
            "Bullet points:",
            *points,
            "",
            f"Visuals: {slide.visual_prompt}",
            "",
            *MANDATORY_CONSTRAINTS,
        ]
        return "\n".join(sections)

    def render(
        self,
        slide: SlideRecord,
        style_id: str,
        *,
        custom_style_prompt: Optional[str] = None,
    ) -> SlideImage:
        if self.image_client is None:
            raise RuntimeError("Image client is required to render slides")

        request = ImageGenerationRequest(
            prompt=self.build_prompt(slide, style_id, custom_style_prompt=custom_style_prompt),
            model_name=self.model_name,
            aspect_ratio=self.aspect_ratio,
            image_size=self.image_size,
        )
        LOGGER.debug("Rendering slide %s (page %d)", slide.slide_id, slide.page_number)
        try:
            response = self.image_client.generate_image(request)
        except LLMEmptyResponseError as exc:
            raise NoImageDataError("No image data") from exc

        image = response.first_image if response is not None else None
        if image is None:
            raise NoImageDataError("No image data")
        return SlideImage(data=image.data, mime_type=image.mime_type)
