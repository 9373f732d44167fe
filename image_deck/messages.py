"""Fixed user-facing messages and render-error classification."""

from __future__ import annotations

import enum
import re

from model_api.exceptions import LLMAuthenticationError, LLMPermissionDeniedError

MISSING_API_KEY = "APIキーが設定されていません。GEMINI_API_KEY を設定してから再度お試しください。"
OUTLINE_FAILED = (
    "アウトラインの生成に失敗しました。APIクォータ不足またはサーバー混雑の可能性があります。"
    "素材を短くするか、ページ数を減らして再試行してください。詳細: {detail}"
)
OUTLINE_EMPTY = "生成されたアウトラインが空です。素材を変更するか、ページ数を減らして再試行してください。"
RENDER_PERMISSION_DENIED = "API権限が不足しています。キーが画像生成モデルと課金設定に対応しているか確認してください。"
RENDER_FAILED = "スライド画像の生成に失敗しました。ネットワークを確認して再試行してください。"

_PERMISSION_PATTERN = re.compile(r"\b403\b|permission[_ ]denied|billing", re.IGNORECASE)


class RenderErrorKind(str, enum.Enum):
    PERMISSION_DENIED = "permission_denied"
    TRANSIENT = "transient"


def classify_render_error(exc: BaseException) -> RenderErrorKind:
    """Return the user-facing category of a render failure."""

    if isinstance(exc, (LLMPermissionDeniedError, LLMAuthenticationError)):
        return RenderErrorKind.PERMISSION_DENIED
    if _PERMISSION_PATTERN.search(str(exc)):
        return RenderErrorKind.PERMISSION_DENIED
    return RenderErrorKind.TRANSIENT


def render_error_message(exc: BaseException) -> str:
    if classify_render_error(exc) is RenderErrorKind.PERMISSION_DENIED:
        return RENDER_PERMISSION_DENIED
    return RENDER_FAILED
