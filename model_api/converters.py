import json
from typing import Any, List, Optional, Tuple

from google.genai import types

from .data_classes import (
    GeneratedImage,
    ImageGenerationRequest,
    StructuredOutputRequest,
)


class GeminiConverter:
    """Convert data classes to Gemini API format"""

    @staticmethod
    def convert_structured_output_request(
        request: StructuredOutputRequest,
    ) -> types.GenerateContentConfig:
        """Convert StructuredOutputRequest to a JSON-mode GenerateContentConfig"""
        config_kwargs = {
            "response_mime_type": "application/json",
            "response_schema": request.schema,
        }
        if request.instructions:
            config_kwargs["system_instruction"] = request.instructions
        if request.max_tokens:
            config_kwargs["max_output_tokens"] = request.max_tokens
        if request.temperature is not None:
            config_kwargs["temperature"] = request.temperature
        if request.thinking_budget is not None:
            config_kwargs["thinking_config"] = types.ThinkingConfig(
                thinking_budget=request.thinking_budget
            )
        return types.GenerateContentConfig(**config_kwargs)

    @staticmethod
    def convert_image_generation_request(
        request: ImageGenerationRequest,
    ) -> types.GenerateContentConfig:
        """Convert ImageGenerationRequest to a GenerateContentConfig with image settings"""
        return types.GenerateContentConfig(
            image_config=types.ImageConfig(
                aspect_ratio=request.aspect_ratio,
                image_size=request.image_size,
            )
        )

    @staticmethod
    def parse_json_text(text: Optional[str]) -> Tuple[Optional[Any], Optional[str]]:
        """Return ``(parsed, error)`` for a JSON-mode text payload"""
        if not text or not text.strip():
            return None, "Empty response"
        try:
            return json.loads(text.strip()), None
        except json.JSONDecodeError as exc:
            return None, f"Malformed JSON: {exc}"

    @staticmethod
    def extract_inline_images(response: Any) -> List[GeneratedImage]:
        """Collect inline image parts from the first candidate"""
        candidates = getattr(response, "candidates", None) or []
        if not candidates:
            return []
        content = getattr(candidates[0], "content", None)
        parts = getattr(content, "parts", None) or []
        images: List[GeneratedImage] = []
        for part in parts:
            inline_data = getattr(part, "inline_data", None)
            if inline_data is None or not getattr(inline_data, "data", None):
                continue
            images.append(
                GeneratedImage(
                    data=inline_data.data,
                    mime_type=getattr(inline_data, "mime_type", None) or "image/png",
                )
            )
        return images
