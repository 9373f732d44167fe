"""Read-only catalog of visual themes used to condition slide rendering."""

from __future__ import annotations

import functools
import json
from pathlib import Path
from typing import Dict, Iterable, Optional

from .slide_models import StyleDefinition

DEFAULT_MANIFEST_PATH = Path(__file__).resolve().parent / "assets" / "style_catalog.json"


class StyleCatalog:
    """Loads style definitions from a JSON manifest."""

    def __init__(self, manifest_path: Optional[Path] = None) -> None:
        self.manifest_path = Path(manifest_path or DEFAULT_MANIFEST_PATH)
        self._styles: Dict[str, StyleDefinition] = {}
        self._load_styles()

    # ------------------------------------------------------------------
    # manifest loading
    # ------------------------------------------------------------------
    def _load_styles(self) -> None:
        if not self.manifest_path.exists():
            raise FileNotFoundError(f"Style catalog manifest not found at {self.manifest_path}")
        data = json.loads(self.manifest_path.read_text(encoding="utf-8"))
        styles = [StyleDefinition.from_dict(entry) for entry in data.get("styles", [])]
        if not styles:
            raise ValueError(f"Style catalog at {self.manifest_path} defines no styles")
        self._styles = {style.style_id: style for style in styles}

    # ------------------------------------------------------------------
    # lookup helpers
    # ------------------------------------------------------------------
    def list_styles(self) -> Iterable[StyleDefinition]:
        return self._styles.values()

    def __contains__(self, style_id: object) -> bool:
        return style_id in self._styles

    def get_style(self, style_id: str) -> StyleDefinition:
        try:
            return self._styles[style_id]
        except KeyError as exc:
            raise KeyError(f"Unknown style id: {style_id}") from exc

    def style_directive(self, style_id: str, custom_style_prompt: Optional[str] = None) -> str:
        """Return the directive injected into every render prompt for ``style_id``."""

        directive = self.get_style(style_id).prompt_modifier
        if custom_style_prompt and custom_style_prompt.strip():
            directive = f"{directive}\nAdditional style notes: {custom_style_prompt.strip()}"
        return directive


@functools.lru_cache(maxsize=1)
def load_default_catalog() -> StyleCatalog:
    """Process-wide catalog, loaded on first use."""

    return StyleCatalog()
