"""Outline extraction through a tiered structured-output fallback chain."""

from __future__ import annotations

import logging
import uuid
from typing import Any, Dict, List, Optional, Sequence

from model_api.data_classes import StructuredOutputRequest, StructuredOutputResponse
from model_api.exceptions import LLMAuthenticationError

from . import messages
from .config import DEFAULT_OUTLINE_TIERS, MAX_SOURCE_CHARS, TRUNCATION_SUFFIX, OutlineTier
from .exceptions import OutlineFormatError, OutlineGenerationError
from .slide_models import SlideRecord, SlideStatus
from .style_catalog import StyleCatalog, load_default_catalog

LOGGER = logging.getLogger(__name__)

FALLBACK_VISUAL_PROMPT = "Clean professional presentation background with subtle abstract shapes"

OUTLINE_SCHEMA: Dict[str, Any] = {
    "type": "array",
    "items": {
        "type": "object",
        "properties": {
            "title": {"type": "string"},
            "bulletPoints": {"type": "array", "items": {"type": "string"}},
            "visualPrompt": {"type": "string"},
        },
        "required": ["title", "bulletPoints", "visualPrompt"],
    },
}

SYSTEM_INSTRUCTION = "あなたはプロのプレゼンテーション設計者です。JSONのみを出力してください。"


def truncate_source(text: str, limit: int = MAX_SOURCE_CHARS) -> str:
    """Return the prefix of ``text`` that is sent to the backend."""

    if len(text) <= limit:
        return text
    return text[:limit] + TRUNCATION_SUFFIX


class OutlineExtractor:
    """Turn free-form text into ``slide_count`` slide records.

    Tiers are attempted strictly in order; the first tier that yields a
    parseable array wins and later tiers are never called. A missing or
    invalid credential aborts the chain at once.
    """

    def __init__(
        self,
        llm_client,
        *,
        catalog: Optional[StyleCatalog] = None,
        tiers: Sequence[OutlineTier] = DEFAULT_OUTLINE_TIERS,
        max_source_chars: int = MAX_SOURCE_CHARS,
    ) -> None:
        if not tiers:
            raise ValueError("At least one outline tier is required")
        self.llm_client = llm_client
        self.catalog = catalog or load_default_catalog()
        self.tiers = tuple(tiers)
        self.max_source_chars = max_source_chars

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def extract(self, source_text: str, slide_count: int, style_id: str) -> List[SlideRecord]:
        if self.llm_client is None:
            raise RuntimeError("LLM client is required to generate an outline")

        prompt = self.build_prompt(source_text, slide_count, style_id)
        tier_errors: List[tuple] = []

        for position, tier in enumerate(self.tiers, start=1):
            LOGGER.info("Outline tier %d/%d (%s, %s)", position, len(self.tiers), tier.label, tier.model_name)
            try:
                payload = self._call_tier(tier, prompt)
            except LLMAuthenticationError:
                raise
            except Exception as exc:
                LOGGER.warning("Outline tier %s failed: %s", tier.label, exc)
                tier_errors.append((tier.label, exc))
                continue
            LOGGER.info("Outline tier %s produced %d items", tier.label, len(payload))
            return self._build_records(payload, slide_count)

        last_label, last_error = tier_errors[-1]
        LOGGER.error("All %d outline tiers failed; last (%s): %s", len(self.tiers), last_label, last_error)
        raise OutlineGenerationError(
            messages.OUTLINE_FAILED.format(detail=last_error),
            tier_errors=tier_errors,
        ) from last_error

    def build_prompt(self, source_text: str, slide_count: int, style_id: str) -> str:
        style = self.catalog.get_style(style_id)
        sections = [
            "あなたは一流の戦略コンサルタントです。",
            "以下の[原資料]をもとに、深く網羅的でプロフェッショナルなプレゼンテーションのアウトラインを作成してください。",
            "",
            "[作成ルール]",
            f"1. 原資料の論理構造を分解し、ちょうど {slide_count} 枚のスライドに配分する。",
            "2. 各スライドには核心となる事実・主要なデータ・論理の詳細を含める。",
            "3. 各スライドの要点(bulletPoints)は5〜8項目とする。",
            "4. スライド全体のストーリーが明確につながるようにする。",
            "",
            f"[デザインスタイル]\n{style.name}",
            "",
            "[出力形式]",
            "- JSON配列のみを出力する。各要素は title, bulletPoints, visualPrompt を持つ。",
            "- title と bulletPoints: 原資料と同じ言語で記述する。",
            "- visualPrompt: 必ず英語で記述する(スライド画像のレイアウトと視覚要素の指示)。",
            "",
            "[原資料]",
            truncate_source(source_text, self.max_source_chars),
        ]
        return "\n".join(sections)

    # ------------------------------------------------------------------
    # internal helpers
    # ------------------------------------------------------------------
    def _call_tier(self, tier: OutlineTier, prompt: str) -> List[Any]:
        request = StructuredOutputRequest(
            prompt=prompt,
            model_name=tier.model_name,
            max_tokens=tier.max_output_tokens,
            thinking_budget=tier.thinking_budget,
            schema=OUTLINE_SCHEMA,
            schema_name="slide_outline",
            instructions=SYSTEM_INSTRUCTION,
        )
        response = self.llm_client.generate_structured_output(request)
        return self._extract_items(response)

    def _extract_items(self, response: Optional[StructuredOutputResponse]) -> List[Any]:
        if response is None:
            raise OutlineFormatError("Empty response")
        if response.error:
            raise OutlineFormatError(response.error)
        parsed = response.parsed_output
        if parsed is None:
            raise OutlineFormatError(response.validation_error or "Empty response")
        if isinstance(parsed, dict) and isinstance(parsed.get("slides"), list):
            parsed = parsed["slides"]
        if not isinstance(parsed, list):
            raise OutlineFormatError(f"Expected a JSON array, got {type(parsed).__name__}")
        return parsed

    def _build_records(self, items: List[Any], slide_count: int) -> List[SlideRecord]:
        if not items:
            return []
        if len(items) > slide_count:
            LOGGER.warning("Outline returned %d items, trimming to %d", len(items), slide_count)
            items = items[:slide_count]
        elif len(items) < slide_count:
            LOGGER.warning("Outline returned %d items, padding to %d", len(items), slide_count)
            items = list(items) + [{}] * (slide_count - len(items))

        batch = uuid.uuid4().hex[:8]
        return [
            _record_from_item(item, index, batch)
            for index, item in enumerate(items, start=1)
        ]


def _record_from_item(item: Any, page_number: int, batch: str) -> SlideRecord:
    data = item if isinstance(item, dict) else {}

    title = data.get("title")
    if not isinstance(title, str) or not title.strip():
        title = f"Slide {page_number}"

    raw_points = data.get("bulletPoints")
    bullet_points = (
        [str(point).strip() for point in raw_points if point is not None and str(point).strip()]
        if isinstance(raw_points, list)
        else []
    )

    visual_prompt = data.get("visualPrompt")
    if not isinstance(visual_prompt, str) or not visual_prompt.strip():
        visual_prompt = FALLBACK_VISUAL_PROMPT

    return SlideRecord(
        slide_id=f"slide-{batch}-{page_number:02d}",
        page_number=page_number,
        title=title.strip(),
        bullet_points=bullet_points,
        visual_prompt=visual_prompt.strip(),
        status=SlideStatus.WAITING,
    )
