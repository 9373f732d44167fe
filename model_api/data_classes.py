from dataclasses import dataclass, field
from typing import Optional, List, Dict, Any


# ========== Base Classes ==========

@dataclass
class BaseRequest:
    """全てのリクエストの基底クラス"""
    prompt: str = ""
    model_name: Optional[str] = None
    max_tokens: Optional[int] = None
    temperature: Optional[float] = None


@dataclass
class BaseResponse:
    """全てのレスポンスの基底クラス"""
    text: str = ""
    model_used: Optional[str] = None
    usage: Optional[Dict[str, int]] = None
    error: Optional[str] = None
    raw_response: Optional[Any] = None

    @property
    def success(self) -> bool:
        """リクエストが成功したか"""
        return self.error is None


# ========== Structured Output ==========

@dataclass
class StructuredOutputRequest(BaseRequest):
    """構造化出力リクエスト"""
    schema: Dict[str, Any] = field(default_factory=dict)  # JSON Schema
    schema_name: str = "response"
    instructions: Optional[str] = None  # system instruction
    thinking_budget: Optional[int] = None  # None = モデル既定


@dataclass
class StructuredOutputResponse(BaseResponse):
    """構造化出力レスポンス"""
    parsed_output: Optional[Any] = None  # dict or list
    validation_error: Optional[str] = None

    @property
    def success(self) -> bool:
        """パースが成功したか"""
        return self.error is None and self.validation_error is None and self.parsed_output is not None


# ========== Image Generation ==========

@dataclass
class ImageGenerationRequest(BaseRequest):
    """画像生成リクエスト"""
    aspect_ratio: str = "16:9"
    image_size: str = "1K"


@dataclass
class GeneratedImage:
    """インライン画像データ"""
    data: bytes = b""
    mime_type: str = "image/png"


@dataclass
class ImageGenerationResponse(BaseResponse):
    """画像生成レスポンス"""
    images: List[GeneratedImage] = field(default_factory=list)

    @property
    def has_images(self) -> bool:
        """画像データが含まれているか"""
        return any(image.data for image in self.images)

    @property
    def first_image(self) -> Optional[GeneratedImage]:
        """最初のインライン画像"""
        return next((image for image in self.images if image.data), None)


# ========== Provider-Specific Conversion Helpers ==========

@dataclass
class ProviderConfig:
    """プロバイダー固有の設定"""
    provider_name: str = ""
    model_name: str = ""
    supports_structured_output: bool = True
    supports_image_generation: bool = True

    # プロバイダー固有の制限
    max_tokens_limit: Optional[int] = None


# ========== Utility Functions ==========

def create_structured_output_request(
    prompt: str,
    schema: Dict[str, Any],
    schema_name: str = "response",
    **kwargs
) -> StructuredOutputRequest:
    """構造化出力リクエストの便利な生成関数"""
    return StructuredOutputRequest(
        prompt=prompt,
        schema=schema,
        schema_name=schema_name,
        **kwargs
    )


def create_image_generation_request(
    prompt: str,
    aspect_ratio: str = "16:9",
    image_size: str = "1K",
    **kwargs
) -> ImageGenerationRequest:
    """画像生成リクエストの便利な生成関数"""
    return ImageGenerationRequest(
        prompt=prompt,
        aspect_ratio=aspect_ratio,
        image_size=image_size,
        **kwargs
    )
