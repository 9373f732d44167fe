"""Sequential slide rendering with per-slide status tracking."""

from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor

from .exceptions import SlideBusyError, SlideNotFoundError
from .messages import render_error_message
from .slide_models import DeckConfig, SlideRecord
from .slide_renderer import SlideRenderer
from .slide_store import SlideStore

LOGGER = logging.getLogger(__name__)


class GenerationScheduler:
    """Drive :class:`SlideRenderer` over the slides held in a :class:`SlideStore`.

    The bulk drive runs on a dedicated single-worker executor, so at most one
    bulk render request is outstanding at any time. Regenerate requests run on
    their own executor and never wait for the bulk drive. Every status change
    is written to the store as it happens.
    """

    def __init__(
        self,
        store: SlideStore,
        renderer: SlideRenderer,
        *,
        max_regenerate_workers: int = 2,
    ) -> None:
        self.store = store
        self.renderer = renderer
        self._bulk_executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="deck-bulk")
        self._regenerate_executor = ThreadPoolExecutor(
            max_workers=max_regenerate_workers, thread_name_prefix="deck-regenerate"
        )

    # ------------------------------------------------------------------
    # Bulk drive
    # ------------------------------------------------------------------
    def run_all(self, config: DeckConfig) -> None:
        """Render every slide once, in page order. Never raises for a slide failure."""

        slides = self.store.list()
        LOGGER.info("Bulk drive started for %d slides", len(slides))
        for slide in slides:
            try:
                self._render_one(slide.slide_id, config)
            except SlideBusyError:
                LOGGER.info("Slide %s is already rendering; bulk drive skips it", slide.slide_id)
            except SlideNotFoundError:
                LOGGER.info("Deck was replaced during the bulk drive; stopping")
                return
        LOGGER.info("Bulk drive finished")

    def start_all(self, config: DeckConfig) -> Future:
        """Queue a bulk drive in the background and return its future."""

        return self._bulk_executor.submit(self.run_all, config)

    # ------------------------------------------------------------------
    # Single-slide drive
    # ------------------------------------------------------------------
    def regenerate(self, slide_id: str, config: DeckConfig) -> SlideRecord:
        """Re-render one slide and return its final record.

        Raises :class:`SlideNotFoundError` for an unknown id and
        :class:`SlideBusyError` when the slide is already rendering.
        """

        return self._render_one(slide_id, config)

    def start_regenerate(self, slide_id: str, config: DeckConfig) -> Future:
        """Start :meth:`regenerate` in the background.

        The slide is claimed before this method returns, so a busy or
        unknown slide is reported synchronously.
        """

        snapshot = self.store.begin_render(slide_id)
        return self._regenerate_executor.submit(self._complete_render, snapshot, config)

    def shutdown(self, wait: bool = True) -> None:
        self._bulk_executor.shutdown(wait=wait)
        self._regenerate_executor.shutdown(wait=wait)

    # ------------------------------------------------------------------
    # internal helpers
    # ------------------------------------------------------------------
    def _render_one(self, slide_id: str, config: DeckConfig) -> SlideRecord:
        snapshot = self.store.begin_render(slide_id)
        return self._complete_render(snapshot, config)

    def _complete_render(self, snapshot: SlideRecord, config: DeckConfig) -> SlideRecord:
        try:
            image = self.renderer.render(
                snapshot,
                config.style_id,
                custom_style_prompt=config.custom_style_prompt,
            )
        except Exception as exc:
            LOGGER.warning(
                "Rendering slide %s (page %d) failed: %r",
                snapshot.slide_id,
                snapshot.page_number,
                exc,
            )
            return self.store.finish_failure(snapshot.slide_id, render_error_message(exc))
        LOGGER.info("Slide %s (page %d) rendered", snapshot.slide_id, snapshot.page_number)
        return self.store.finish_success(snapshot.slide_id, image)
