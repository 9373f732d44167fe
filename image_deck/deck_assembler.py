"""Assemble rendered slide images into paginated PDF or PPTX files."""

from __future__ import annotations

import io
import logging
from typing import Iterable, List, Sequence, Tuple

from PIL import Image
from pptx import Presentation
from pptx.util import Emu

from .config import PAGE_HEIGHT_PX, PAGE_WIDTH_PX
from .exceptions import DeckIncompleteError
from .slide_models import SlideRecord, SlideStatus

LOGGER = logging.getLogger(__name__)

# python-pptx measures in EMU; 9525 EMU per pixel at 96 dpi.
EMU_PER_PX = 9525


class DeckAssembler:
    """Turn a fully rendered deck into one downloadable document.

    Each page holds exactly one slide image scaled to fill the whole page;
    nothing else is drawn.
    """

    def __init__(self, page_size: Tuple[int, int] = (PAGE_WIDTH_PX, PAGE_HEIGHT_PX)) -> None:
        self.page_size = page_size

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def compose_pages(self, slides: Iterable[SlideRecord]) -> List[Image.Image]:
        """Return one RGB page image per slide, in page order."""

        return [self._compose_page(slide) for slide in _ordered_done_slides(slides)]

    def assemble(self, slides: Iterable[SlideRecord]) -> bytes:
        """Return a PDF with one landscape page per slide."""

        pages = self.compose_pages(slides)
        buffer = io.BytesIO()
        pages[0].save(
            buffer,
            format="PDF",
            save_all=True,
            append_images=pages[1:],
            resolution=72.0,
        )
        LOGGER.info("Assembled PDF deck with %d pages", len(pages))
        return buffer.getvalue()

    def assemble_pptx(self, slides: Iterable[SlideRecord]) -> io.BytesIO:
        """Return a PPTX stream with one full-bleed picture per slide."""

        pages = self.compose_pages(slides)
        width_px, height_px = self.page_size

        presentation = Presentation()
        presentation.slide_width = Emu(width_px * EMU_PER_PX)
        presentation.slide_height = Emu(height_px * EMU_PER_PX)
        blank_layout = presentation.slide_layouts[6]

        for page in pages:
            slide = presentation.slides.add_slide(blank_layout)
            slide.shapes.add_picture(
                io.BytesIO(page_png_bytes(page)),
                0,
                0,
                presentation.slide_width,
                presentation.slide_height,
            )

        buffer = io.BytesIO()
        presentation.save(buffer)
        buffer.seek(0)
        LOGGER.info("Assembled PPTX deck with %d slides", len(pages))
        return buffer

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _compose_page(self, slide: SlideRecord) -> Image.Image:
        with Image.open(io.BytesIO(slide.rendered_image.data)) as source:
            source.load()
            rgb = source.convert("RGB")
        return rgb.resize(self.page_size, Image.Resampling.LANCZOS)


def page_png_bytes(page: Image.Image) -> bytes:
    buffer = io.BytesIO()
    page.save(buffer, format="PNG")
    return buffer.getvalue()


def _ordered_done_slides(slides: Iterable[SlideRecord]) -> Sequence[SlideRecord]:
    ordered = sorted(slides, key=lambda slide: slide.page_number)
    if not ordered:
        raise DeckIncompleteError("The deck has no slides")
    pending = [
        slide.page_number
        for slide in ordered
        if slide.status is not SlideStatus.DONE or slide.rendered_image is None
    ]
    if pending:
        raise DeckIncompleteError(f"Slides are not rendered yet: pages {pending}")
    return ordered
