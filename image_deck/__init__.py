"""Turn document text into an image-rendered slide deck."""

from .config import DEFAULT_OUTLINE_TIERS, OutlineTier, Settings
from .deck_assembler import DeckAssembler
from .exceptions import (
    ConfigurationError,
    DeckError,
    DeckIncompleteError,
    EmptyOutlineError,
    NoImageDataError,
    OutlineGenerationError,
    SlideBusyError,
    SlideNotFoundError,
    SlideRenderError,
    TextExtractionError,
)
from .outline import OutlineExtractor
from .pipeline import DeckPipeline
from .scheduler import GenerationScheduler
from .slide_models import DeckConfig, SlideImage, SlideRecord, SlideStatus, StyleDefinition
from .slide_renderer import SlideRenderer
from .slide_store import SlideStore
from .style_catalog import StyleCatalog, load_default_catalog
from .text_extraction import extract_text

__all__ = [
    "DEFAULT_OUTLINE_TIERS",
    "OutlineTier",
    "Settings",
    "DeckAssembler",
    "ConfigurationError",
    "DeckError",
    "DeckIncompleteError",
    "EmptyOutlineError",
    "NoImageDataError",
    "OutlineGenerationError",
    "SlideBusyError",
    "SlideNotFoundError",
    "SlideRenderError",
    "TextExtractionError",
    "OutlineExtractor",
    "DeckPipeline",
    "GenerationScheduler",
    "DeckConfig",
    "SlideImage",
    "SlideRecord",
    "SlideStatus",
    "StyleDefinition",
    "SlideRenderer",
    "SlideStore",
    "StyleCatalog",
    "load_default_catalog",
    "extract_text",
]
