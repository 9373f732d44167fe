"""Facade tying outline extraction, rendering and assembly to one deck session."""

from __future__ import annotations

import logging
import weakref
from concurrent.futures import Future
from typing import Callable, List, Optional

from . import messages
from .config import Settings
from .deck_assembler import DeckAssembler
from .exceptions import ConfigurationError, EmptyOutlineError
from .outline import OutlineExtractor
from .scheduler import GenerationScheduler
from .slide_models import DeckConfig, SlideRecord
from .slide_renderer import SlideRenderer
from .slide_store import SlideStore
from .style_catalog import StyleCatalog, load_default_catalog

LOGGER = logging.getLogger(__name__)


class DeckPipeline:
    """One user session: a deck request, its slides and their renders.

    Starting a new outline discards the previous deck entirely.
    """

    def __init__(
        self,
        model_client,
        *,
        settings: Optional[Settings] = None,
        catalog: Optional[StyleCatalog] = None,
        credentials_available: Optional[Callable[[], bool]] = None,
    ) -> None:
        self.settings = settings or Settings()
        self.catalog = catalog or load_default_catalog()
        self.model_client = model_client
        self._credentials_available = credentials_available or (lambda: model_client is not None)
        self.store = SlideStore()
        self.extractor = OutlineExtractor(
            model_client,
            catalog=self.catalog,
            tiers=self.settings.outline_tiers,
            max_source_chars=self.settings.max_source_chars,
        )
        self.renderer = SlideRenderer(
            model_client,
            catalog=self.catalog,
            model_name=self.settings.image_model,
            image_size=self.settings.image_size,
        )
        self.scheduler = GenerationScheduler(self.store, self.renderer)
        # shut the executors down once a dropped session releases the pipeline
        self._finalizer = weakref.finalize(self, self.scheduler.shutdown, False)
        self.assembler = DeckAssembler()
        self._config: Optional[DeckConfig] = None

    @property
    def config(self) -> Optional[DeckConfig]:
        return self._config

    # ------------------------------------------------------------------
    # Outline
    # ------------------------------------------------------------------
    def create_outline(self, config: DeckConfig) -> List[SlideRecord]:
        """Extract a new outline for ``config`` and make it the current deck."""

        self._require_credentials()
        self.catalog.get_style(config.style_id)

        slides = self.extractor.extract(config.source_text, config.slide_count, config.style_id)
        if not slides:
            raise EmptyOutlineError(messages.OUTLINE_EMPTY)

        self.store.replace_all(slides)
        self._config = config
        LOGGER.info("New deck with %d slides (style=%s)", len(slides), config.style_id)
        return self.store.list()

    def was_truncated(self, config: DeckConfig) -> bool:
        return len(config.source_text) > self.settings.max_source_chars

    def slides(self) -> List[SlideRecord]:
        return self.store.list()

    def edit_slide(self, slide_id: str, **changes) -> SlideRecord:
        return self.store.edit_content(slide_id, **changes)

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------
    def start_generation(self) -> Future:
        """Start the background bulk drive over every slide."""

        config = self._require_deck()
        return self.scheduler.start_all(config)

    def generate_all(self) -> None:
        config = self._require_deck()
        self.scheduler.run_all(config)

    def regenerate(self, slide_id: str) -> SlideRecord:
        config = self._require_deck()
        return self.scheduler.regenerate(slide_id, config)

    def start_regenerate(self, slide_id: str) -> Future:
        config = self._require_deck()
        return self.scheduler.start_regenerate(slide_id, config)

    # ------------------------------------------------------------------
    # Assembly
    # ------------------------------------------------------------------
    def is_complete(self) -> bool:
        return self.store.all_done()

    def export_pdf(self) -> bytes:
        return self.assembler.assemble(self.store.list())

    def export_pptx(self) -> bytes:
        return self.assembler.assemble_pptx(self.store.list()).getvalue()

    # ------------------------------------------------------------------
    # Session lifecycle
    # ------------------------------------------------------------------
    def reset(self) -> None:
        self.store.clear()
        self._config = None

    def close(self) -> None:
        self._finalizer()

    @property
    def closed(self) -> bool:
        return not self._finalizer.alive

    # ------------------------------------------------------------------
    # internal helpers
    # ------------------------------------------------------------------
    def _require_credentials(self) -> None:
        if not self._credentials_available():
            raise ConfigurationError(messages.MISSING_API_KEY)

    def _require_deck(self) -> DeckConfig:
        self._require_credentials()
        if self._config is None or not len(self.store):
            raise RuntimeError("No deck has been created yet")
        return self._config
