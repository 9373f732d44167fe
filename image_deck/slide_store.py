"""Single source of truth for the slide records of the current deck."""

from __future__ import annotations

import threading
from typing import Iterable, List, Optional

from .exceptions import SlideBusyError, SlideNotFoundError
from .slide_models import SlideImage, SlideRecord, SlideStatus

EDITABLE_FIELDS = frozenset({"title", "bullet_points", "visual_prompt"})


class SlideStore:
    """Thread-safe store of :class:`SlideRecord` objects keyed by slide id.

    Every mutation goes through a method that holds the store lock for the
    duration of a single slide update, so concurrent writers never interleave
    inside one record. Readers always receive copies.
    """

    def __init__(self, slides: Optional[Iterable[SlideRecord]] = None) -> None:
        self._lock = threading.RLock()
        self._records: dict[str, SlideRecord] = {}
        if slides is not None:
            self.replace_all(slides)

    # ------------------------------------------------------------------
    # read access
    # ------------------------------------------------------------------
    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def get(self, slide_id: str) -> SlideRecord:
        with self._lock:
            return self._require(slide_id).copy()

    def list(self) -> List[SlideRecord]:
        """Return copies of all slides in ascending page order."""

        with self._lock:
            records = sorted(self._records.values(), key=lambda item: item.page_number)
            return [record.copy() for record in records]

    def all_done(self) -> bool:
        with self._lock:
            return bool(self._records) and all(
                record.status is SlideStatus.DONE for record in self._records.values()
            )

    def all_terminal(self) -> bool:
        with self._lock:
            return bool(self._records) and all(
                record.is_terminal for record in self._records.values()
            )

    # ------------------------------------------------------------------
    # mutation
    # ------------------------------------------------------------------
    def replace_all(self, slides: Iterable[SlideRecord]) -> None:
        """Discard the current deck and install ``slides``."""

        records = [slide.copy() for slide in slides]
        _validate_deck(records)
        with self._lock:
            self._records = {record.slide_id: record for record in records}

    def clear(self) -> None:
        with self._lock:
            self._records = {}

    def update(self, slide_id: str, **changes) -> SlideRecord:
        """Atomically apply field ``changes`` to one slide and return a copy."""

        with self._lock:
            record = self._require(slide_id)
            for name, value in changes.items():
                if name in ("slide_id", "page_number"):
                    raise AttributeError(f"{name} is fixed at outline creation")
                if not hasattr(record, name):
                    raise AttributeError(f"SlideRecord has no field '{name}'")
                if name == "bullet_points":
                    value = list(value)
                setattr(record, name, value)
            return record.copy()

    def edit_content(self, slide_id: str, **changes) -> SlideRecord:
        """Update user-editable content fields only."""

        unknown = set(changes) - EDITABLE_FIELDS
        if unknown:
            raise AttributeError(f"Fields are not editable: {sorted(unknown)}")
        return self.update(slide_id, **changes)

    def begin_render(self, slide_id: str) -> SlideRecord:
        """Move a slide to ``rendering`` and return a snapshot of its content.

        Raises :class:`SlideBusyError` when a render for the slide is already
        in flight. The previous image, if any, stays on the record.
        """

        with self._lock:
            record = self._require(slide_id)
            if record.status is SlideStatus.RENDERING:
                raise SlideBusyError(f"Slide '{slide_id}' is already rendering")
            record.status = SlideStatus.RENDERING
            record.last_error = None
            return record.copy()

    def finish_success(self, slide_id: str, image: SlideImage) -> SlideRecord:
        return self.update(slide_id, status=SlideStatus.DONE, rendered_image=image, last_error=None)

    def finish_failure(self, slide_id: str, message: str) -> SlideRecord:
        return self.update(slide_id, status=SlideStatus.FAILED, last_error=message)

    # ------------------------------------------------------------------
    # internal helpers
    # ------------------------------------------------------------------
    def _require(self, slide_id: str) -> SlideRecord:
        try:
            return self._records[slide_id]
        except KeyError as exc:
            raise SlideNotFoundError(f"Slide '{slide_id}' not found in deck") from exc


def _validate_deck(records: List[SlideRecord]) -> None:
    ids = [record.slide_id for record in records]
    if len(set(ids)) != len(ids):
        raise ValueError("Slide ids must be unique within a deck")
    pages = sorted(record.page_number for record in records)
    if pages != list(range(1, len(records) + 1)):
        raise ValueError(f"Page numbers must form a contiguous 1..N sequence, got {pages}")
