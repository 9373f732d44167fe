from typing import Optional

from google import genai
from google.genai import errors

from ..converters import GeminiConverter
from ..data_classes import (
    ImageGenerationRequest, ImageGenerationResponse,
    StructuredOutputRequest, StructuredOutputResponse,
    ProviderConfig
)
from ..decorators import log_request
from ..exceptions import (
    LLMAPIError, LLMAuthenticationError, LLMEmptyResponseError,
    LLMError, LLMPermissionDeniedError, LLMRateLimitError
)
from ._base_provider import BaseProvider

PERMISSION_MARKERS = ("PERMISSION_DENIED", "billing", "BILLING")


class GeminiModel(BaseProvider):
    """Gemini API implementation of CallModel using data classes"""

    api_key_env_vars = ("GEMINI_API_KEY", "GOOGLE_API_KEY")

    def __init__(self, api_key: Optional[str] = None, model_name: str = "gemini-3-flash-preview"):
        super().__init__(api_key=api_key, model_name=model_name)

    def _get_provider_config(self) -> ProviderConfig:
        """Get Gemini provider configuration"""
        return ProviderConfig(
            provider_name="Gemini",
            model_name=self.model_name or "gemini-3-flash-preview",
            supports_structured_output=True,
            supports_image_generation=True,
            max_tokens_limit=65536,
        )

    def setup_client(self):
        """Setup Gemini client"""
        self.client = genai.Client(api_key=self._get_api_key())

    @log_request
    def generate_structured_output(self, request: StructuredOutputRequest) -> StructuredOutputResponse:
        """Generate structured output using data classes"""
        self._validate_request(request)
        model = request.model_name or self.model_name
        try:
            response = self.client.models.generate_content(
                model=model,
                contents=request.prompt,
                config=GeminiConverter.convert_structured_output_request(request),
            )
        except Exception as exc:
            raise self._translate_error(exc) from exc

        text = getattr(response, "text", None) or ""
        parsed, validation_error = GeminiConverter.parse_json_text(text)
        if parsed is None and getattr(response, "parsed", None) is not None:
            parsed, validation_error = response.parsed, None
        return StructuredOutputResponse(
            text=text,
            parsed_output=parsed,
            validation_error=validation_error,
            model_used=model,
            usage=_usage_dict(response),
            raw_response=response
        )

    @log_request
    def generate_image(self, request: ImageGenerationRequest) -> ImageGenerationResponse:
        """Generate an image using data classes"""
        self._validate_request(request)
        model = request.model_name or self.model_name
        try:
            response = self.client.models.generate_content(
                model=model,
                contents=request.prompt,
                config=GeminiConverter.convert_image_generation_request(request),
            )
        except Exception as exc:
            raise self._translate_error(exc) from exc

        images = GeminiConverter.extract_inline_images(response)
        if not images:
            raise LLMEmptyResponseError(
                message="No image data",
                provider=self.get_provider_name(),
                error_type="no_image_data"
            )
        return ImageGenerationResponse(
            images=images,
            model_used=model,
            usage=_usage_dict(response),
            raw_response=response
        )

    def _translate_error(self, exc: Exception) -> LLMError:
        """Map SDK exceptions onto the provider-neutral hierarchy"""
        provider = self.get_provider_name()
        if isinstance(exc, LLMError):
            return exc
        if not isinstance(exc, errors.APIError):
            return LLMAPIError(
                message=str(exc) or exc.__class__.__name__,
                provider=provider,
                error_type="transport",
                original_error=exc
            )

        code = getattr(exc, "code", None)
        detail = f"{code} {getattr(exc, 'status', '') or ''} {getattr(exc, 'message', '') or ''}".strip()
        if code == 401 or "API_KEY_INVALID" in str(exc):
            return LLMAuthenticationError(
                message=detail, provider=provider, error_type="invalid_api_key", original_error=exc
            )
        if code == 403 or any(marker in str(exc) for marker in PERMISSION_MARKERS):
            return LLMPermissionDeniedError(
                message=detail, provider=provider, error_type="permission_denied", original_error=exc
            )
        if code == 429:
            return LLMRateLimitError(
                message=detail, provider=provider, error_type="rate_limited", original_error=exc
            )
        return LLMAPIError(
            message=detail, provider=provider, error_type="api_error", original_error=exc
        )


def _usage_dict(response) -> Optional[dict]:
    metadata = getattr(response, "usage_metadata", None)
    if metadata is None:
        return None
    usage = {
        "prompt_tokens": getattr(metadata, "prompt_token_count", None),
        "output_tokens": getattr(metadata, "candidates_token_count", None),
        "thinking_tokens": getattr(metadata, "thoughts_token_count", None),
    }
    return {key: value for key, value in usage.items() if isinstance(value, int)}
