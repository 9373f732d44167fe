"""Scripted model stubs for exercising the outline and render stages in tests."""

from __future__ import annotations

import io
import json
import threading
import time
from typing import Any, Callable, Dict, Iterable, List, Optional, Union

from PIL import Image

from model_api.data_classes import (
    GeneratedImage,
    ImageGenerationRequest,
    ImageGenerationResponse,
    StructuredOutputRequest,
    StructuredOutputResponse,
)

# A scripted outcome is either a payload to return or an exception to raise.
Outcome = Union[Exception, Any]


def png_bytes(size=(160, 90), color="#1e3a8a") -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", size, color).save(buffer, format="PNG")
    return buffer.getvalue()


def outline_items(count: int, prefix: str = "Topic") -> List[Dict[str, Any]]:
    return [
        {
            "title": f"{prefix} {idx}",
            "bulletPoints": [f"point {idx}-a", f"point {idx}-b"],
            "visualPrompt": f"diagram for {prefix.lower()} {idx}",
        }
        for idx in range(1, count + 1)
    ]


class ScriptedOutlineLLM:
    """Returns one scripted outcome per ``generate_structured_output`` call.

    Payloads are wrapped in a :class:`StructuredOutputResponse`; a string is
    treated as raw model text that failed to parse.
    """

    model_name = "stub-outline"

    def __init__(self, outcomes: Iterable[Outcome]) -> None:
        self.outcomes = list(outcomes)
        self.outline_requests: List[StructuredOutputRequest] = []

    def generate_structured_output(self, request: StructuredOutputRequest) -> StructuredOutputResponse:
        self.outline_requests.append(request)
        if not self.outcomes:
            raise AssertionError("No scripted outline outcome left")
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        if isinstance(outcome, str):
            return StructuredOutputResponse(
                text=outcome,
                parsed_output=None,
                validation_error="Malformed JSON",
                model_used=request.model_name,
            )
        return StructuredOutputResponse(
            text=json.dumps(outcome, ensure_ascii=False),
            parsed_output=outcome,
            model_used=request.model_name,
        )


class ScriptedImageModel:
    """Image stub keyed by slide title.

    ``failures`` maps a slide title to the exception raised for it. ``delay``
    holds each call open so in-flight states can be observed.
    """

    model_name = "stub-image"

    def __init__(
        self,
        *,
        failures: Optional[Dict[str, Exception]] = None,
        delay: float = 0.0,
        on_call: Optional[Callable[[ImageGenerationRequest], None]] = None,
    ) -> None:
        self.failures = dict(failures or {})
        self.delay = delay
        self.on_call = on_call
        self.image_requests: List[ImageGenerationRequest] = []
        self.active = 0
        self.max_active = 0
        self._lock = threading.Lock()

    def generate_image(self, request: ImageGenerationRequest) -> ImageGenerationResponse:
        with self._lock:
            self.image_requests.append(request)
            self.active += 1
            self.max_active = max(self.max_active, self.active)
        try:
            if self.on_call is not None:
                self.on_call(request)
            if self.delay:
                time.sleep(self.delay)
            for title, error in self.failures.items():
                if f'Slide title: "{title}"' in request.prompt:
                    raise error
            return ImageGenerationResponse(
                images=[GeneratedImage(data=png_bytes(), mime_type="image/png")],
                model_used=request.model_name,
            )
        finally:
            with self._lock:
                self.active -= 1

    def titles(self) -> List[str]:
        """Slide titles in the order their render requests arrived."""

        found = []
        for request in self.image_requests:
            line = next(line for line in request.prompt.splitlines() if line.startswith("Slide title:"))
            found.append(line.split('"')[1])
        return found


class DeckModel(ScriptedOutlineLLM, ScriptedImageModel):
    """Single client answering both outline and image requests."""

    def __init__(self, outcomes: Iterable[Outcome], **image_kwargs) -> None:
        ScriptedOutlineLLM.__init__(self, outcomes)
        ScriptedImageModel.__init__(self, **image_kwargs)
