"""Errors raised by the slide deck pipeline."""

from __future__ import annotations

from typing import List, Optional, Sequence, Tuple


class DeckError(Exception):
    """Base class for pipeline errors."""


class ConfigurationError(DeckError):
    """No usable credential is available; nothing was sent to a backend."""


class OutlineFormatError(DeckError):
    """A single outline tier answered with an unusable payload."""


class OutlineGenerationError(DeckError):
    """Every outline tier failed."""

    def __init__(
        self,
        message: str,
        *,
        tier_errors: Optional[Sequence[Tuple[str, Exception]]] = None,
    ) -> None:
        super().__init__(message)
        self.tier_errors: List[Tuple[str, Exception]] = list(tier_errors or [])

    @property
    def last_error(self) -> Optional[Exception]:
        return self.tier_errors[-1][1] if self.tier_errors else None


class EmptyOutlineError(OutlineGenerationError):
    """The backend returned a structurally valid but empty outline."""


class SlideRenderError(DeckError):
    """The image backend did not produce a slide image."""


class NoImageDataError(SlideRenderError):
    """The image backend response carried no inline image."""


class SlideNotFoundError(KeyError):
    """No slide with the requested id exists in the current deck."""


class SlideBusyError(DeckError):
    """A render for the slide is already in flight."""


class DeckIncompleteError(DeckError):
    """Assembly was requested while some slides are not done."""


class TextExtractionError(DeckError):
    """An uploaded file could not be converted into plain text."""
