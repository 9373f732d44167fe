"""Streamlit UI for turning document text into an image-rendered slide deck."""

from __future__ import annotations

import io
import json
import re
import textwrap
import time
from typing import Dict, List, Optional

import streamlit as st
from PIL import Image, ImageDraw, ImageFont

from model_api.data_classes import (
    GeneratedImage,
    ImageGenerationRequest,
    ImageGenerationResponse,
    StructuredOutputRequest,
    StructuredOutputResponse,
)
from model_api.exceptions import LLMError

from image_deck import messages
from image_deck.config import DEFAULT_SLIDE_COUNT, MAX_SLIDES, MIN_SLIDES, Settings
from image_deck.exceptions import (
    ConfigurationError,
    DeckIncompleteError,
    OutlineGenerationError,
    SlideBusyError,
    TextExtractionError,
)
from image_deck.logging_utils import setup_logging
from image_deck.pipeline import DeckPipeline
from image_deck.slide_models import DeckConfig, SlideRecord, SlideStatus
from image_deck.style_catalog import load_default_catalog
from image_deck.text_extraction import SUPPORTED_EXTENSIONS, extract_text

MODE_STUB = "スタブ生成"
MODE_GEMINI = "Gemini (環境変数)"

STEP_INPUT = "INPUT"
STEP_OUTLINE = "OUTLINE"
STEP_GENERATION = "GENERATION"

REFRESH_SECONDS = 1.5


def _extract_section(prompt: str, marker: str, *, max_width: Optional[int] = None) -> str:
    """Return the text after the last ``marker`` up to the next ``[`` section header."""

    if not prompt:
        return ""
    if marker in prompt:
        section = prompt.rsplit(marker, 1)[1]
        section = re.split(r"\n\[", section, maxsplit=1)[0]
    else:
        section = prompt
    section = section.strip()
    if max_width:
        return textwrap.shorten(section.replace("\n", " "), width=max_width, placeholder="…")
    return section


class StubDeckModel:
    """Offline stand-in for the Gemini provider used in demo mode and tests."""

    model_name = "stub-deck"

    def __init__(self, *, image_size: tuple = (1280, 720)) -> None:
        self.image_size = image_size

    # ------------------------------------------------------------------
    # Model compatible interface
    # ------------------------------------------------------------------
    def generate_structured_output(
        self, request: StructuredOutputRequest
    ) -> StructuredOutputResponse:
        match = re.search(r"ちょうど\s*(\d+)\s*枚", request.prompt)
        count = int(match.group(1)) if match else DEFAULT_SLIDE_COUNT
        source = _extract_section(request.prompt, "[原資料]")
        chunks = _split_source(source, count)

        payload: List[Dict[str, object]] = []
        for idx in range(count):
            chunk = chunks[idx] if idx < len(chunks) else []
            title = textwrap.shorten(chunk[0], width=40, placeholder="…") if chunk else f"Slide {idx + 1}"
            payload.append(
                {
                    "title": title,
                    "bulletPoints": [
                        textwrap.shorten(line, width=80, placeholder="…") for line in chunk[1:7]
                    ],
                    "visualPrompt": "Simple layout with a bold title band and an icon column on the right",
                }
            )
        return StructuredOutputResponse(
            text=json.dumps(payload, ensure_ascii=False),
            parsed_output=payload,
            model_used="stub-structured",
        )

    def generate_image(self, request: ImageGenerationRequest) -> ImageGenerationResponse:
        title_match = re.search(r'Slide title: "(.*)"', request.prompt)
        title = title_match.group(1) if title_match else "Slide"
        block = re.search(r"Bullet points:\n(.*?)\n\n", request.prompt, re.S)
        bullets = re.findall(r"^- (.+)$", block.group(1), re.M) if block else []

        image = Image.new("RGB", self.image_size, "#f8fafc")
        draw = ImageDraw.Draw(image)
        width, height = self.image_size
        draw.rectangle([0, 0, width, height // 6], fill="#1e3a8a")
        draw.text((40, height // 24), title, fill="white", font=_font(40))
        body_font = _font(24)
        for idx, bullet in enumerate(bullets[:8]):
            draw.text((60, height // 4 + idx * 48), f"• {bullet}", fill="#0f172a", font=body_font)

        buffer = io.BytesIO()
        image.save(buffer, format="PNG")
        return ImageGenerationResponse(
            images=[GeneratedImage(data=buffer.getvalue(), mime_type="image/png")],
            model_used="stub-image",
        )


def _split_source(source: str, count: int) -> List[List[str]]:
    lines = [line.strip(" #*-\t") for line in source.splitlines()]
    lines = [line for line in lines if line]
    if not lines:
        return []
    size = max(1, -(-len(lines) // count))
    return [lines[start:start + size] for start in range(0, len(lines), size)]


def _font(size: int):
    return ImageFont.load_default(size=size)


@st.cache_resource(show_spinner=False)
def load_settings() -> Settings:
    """Resolve settings once per process and configure logging."""

    settings = Settings.from_env()
    setup_logging(level=settings.log_level, log_path=settings.log_path)
    return settings


def _instantiate_model(choice: str, settings: Settings):
    if choice == MODE_GEMINI:
        if not settings.has_credentials:
            return None
        try:
            from model_api.providers.gemini import GeminiModel

            return GeminiModel(api_key=settings.gemini_api_key)
        except Exception as exc:  # pragma: no cover - depends on runtime secrets
            st.warning("Geminiクライアントの初期化に失敗しました。GEMINI_API_KEYを確認してください。")
            st.text(str(exc))
            return None
    return StubDeckModel()


def _get_pipeline(choice: str, settings: Settings) -> Optional[DeckPipeline]:
    current = st.session_state.get("pipeline")
    if current is not None and st.session_state.get("pipeline_mode") == choice:
        return current
    if current is not None:
        current.close()
    model = _instantiate_model(choice, settings)
    if model is None:
        st.session_state["pipeline"] = None
        return None
    pipeline = DeckPipeline(model, settings=settings)
    st.session_state["pipeline"] = pipeline
    st.session_state["pipeline_mode"] = choice
    st.session_state["step"] = STEP_INPUT
    return pipeline


def _render_input_step(pipeline: DeckPipeline) -> None:
    catalog = load_default_catalog()
    styles = list(catalog.list_styles())

    st.subheader("1. 素材の入力")
    upload = st.file_uploader(
        "ファイルをアップロード",
        type=[ext.lstrip(".") for ext in SUPPORTED_EXTENSIONS],
    )
    if upload is not None and st.session_state.get("uploaded_name") != upload.name:
        try:
            st.session_state["source_text"] = extract_text(upload.name, upload.getvalue())
            st.session_state["uploaded_name"] = upload.name
        except TextExtractionError as exc:
            st.error(f"ファイルを読み込めませんでした: {exc}")

    source_text = st.text_area(
        "テキスト素材",
        key="source_text",
        height=280,
        placeholder="レポート、記事、メモなどをここに貼り付けてください",
    )

    col_a, col_b = st.columns(2)
    with col_a:
        slide_count = st.slider("ページ数", MIN_SLIDES, MAX_SLIDES, DEFAULT_SLIDE_COUNT)
        custom_style = st.text_input("追加スタイル指示 (任意・英語推奨)")
    with col_b:
        style_id = st.radio(
            "デザインスタイル",
            [style.style_id for style in styles],
            format_func=lambda sid: f"{catalog.get_style(sid).name} ― {catalog.get_style(sid).description}",
        )

    if st.button("アウトラインを生成", type="primary", disabled=not source_text.strip()):
        try:
            config = DeckConfig(
                source_text=source_text,
                slide_count=int(slide_count),
                style_id=style_id,
                custom_style_prompt=custom_style or None,
            )
            with st.spinner("アウトラインを生成しています…"):
                pipeline.create_outline(config)
        except (ConfigurationError, OutlineGenerationError, LLMError, ValueError) as exc:
            st.error(str(exc))
            return
        if pipeline.was_truncated(config):
            st.session_state["notice"] = "素材が長いため、先頭部分のみを使用しました。"
        st.session_state["step"] = STEP_OUTLINE
        st.rerun()


def _render_outline_step(pipeline: DeckPipeline) -> None:
    st.subheader("2. アウトラインの確認")
    st.caption("画像生成の前に、各ページの内容とビジュアル指示を編集できます。")

    slides = pipeline.slides()
    with st.form("outline_form"):
        edits: Dict[str, Dict[str, object]] = {}
        for slide in slides:
            with st.container(border=True):
                st.markdown(f"**{slide.page_number} ページ目**")
                title = st.text_input("タイトル", value=slide.title, key=f"title_{slide.slide_id}")
                col_a, col_b = st.columns(2)
                with col_a:
                    bullets = st.text_area(
                        "要点 (1行に1項目)",
                        value="\n".join(slide.bullet_points),
                        key=f"bullets_{slide.slide_id}",
                        height=180,
                    )
                with col_b:
                    visual = st.text_area(
                        "ビジュアル指示 (Visual Prompt)",
                        value=slide.visual_prompt,
                        key=f"visual_{slide.slide_id}",
                        height=180,
                        help="画像生成モデルへのレイアウト指示です。英語での記述を推奨します。",
                    )
                edits[slide.slide_id] = {
                    "title": title,
                    "bullet_points": [line.strip() for line in bullets.splitlines() if line.strip()],
                    "visual_prompt": visual,
                }
        submitted = st.form_submit_button("確定して画像を生成", type="primary")

    if submitted:
        for slide_id, changes in edits.items():
            pipeline.edit_slide(slide_id, **changes)
        try:
            pipeline.start_generation()
        except ConfigurationError as exc:
            st.error(str(exc))
            return
        st.session_state["step"] = STEP_GENERATION
        st.rerun()


def _render_slide_card(pipeline: DeckPipeline, slide: SlideRecord) -> None:
    with st.container(border=True):
        st.markdown(f"**{slide.page_number} ページ目** ― {slide.title}")
        if slide.status is SlideStatus.WAITING:
            st.info("生成待ち…")
        elif slide.status is SlideStatus.RENDERING:
            if slide.rendered_image is not None:
                st.image(slide.rendered_image.data, use_container_width=True)
            st.info(f"{slide.page_number} ページ目を生成中です…")
        else:
            if slide.status is SlideStatus.FAILED:
                st.error(slide.last_error or messages.RENDER_FAILED)
            if slide.rendered_image is not None:
                st.image(slide.rendered_image.data, use_container_width=True)
            col_a, col_b = st.columns(2)
            with col_a:
                if st.button("再生成", key=f"regen_{slide.slide_id}"):
                    try:
                        pipeline.start_regenerate(slide.slide_id)
                    except SlideBusyError:
                        st.info("このページは現在生成中です。")
                    except ConfigurationError as exc:
                        st.error(str(exc))
                    st.rerun()
            with col_b:
                if slide.status is SlideStatus.DONE and slide.rendered_image is not None:
                    st.download_button(
                        "画像を保存",
                        data=slide.rendered_image.data,
                        file_name=f"slide-{slide.page_number}.{slide.rendered_image.extension}",
                        mime=slide.rendered_image.mime_type,
                        key=f"download_{slide.slide_id}",
                    )


def _render_generation_step(pipeline: DeckPipeline) -> None:
    slides = pipeline.slides()
    complete = pipeline.is_complete()

    st.subheader("3. スライドの生成")
    st.caption(
        "すべてのページが完成しました。確認してダウンロードしてください。"
        if complete
        else "ページ順に高品質なスライドを生成しています…"
    )

    pdf_bytes: Optional[bytes] = None
    pptx_bytes: Optional[bytes] = None
    if complete:
        try:
            pdf_bytes = pipeline.export_pdf()
            pptx_bytes = pipeline.export_pptx()
        except DeckIncompleteError:
            complete = False

    col_pdf, col_pptx = st.columns(2)
    with col_pdf:
        st.download_button(
            "PDFをダウンロード",
            data=pdf_bytes or b"",
            file_name="presentation.pdf",
            mime="application/pdf",
            disabled=not complete,
        )
    with col_pptx:
        st.download_button(
            "PPTXをダウンロード",
            data=pptx_bytes or b"",
            file_name="presentation.pptx",
            mime="application/vnd.openxmlformats-officedocument.presentationml.presentation",
            disabled=not complete,
        )

    columns = st.columns(2)
    for idx, slide in enumerate(slides):
        with columns[idx % 2]:
            _render_slide_card(pipeline, slide)

    if not pipeline.store.all_terminal():
        time.sleep(REFRESH_SECONDS)
        st.rerun()


def main() -> None:
    st.set_page_config(page_title="Image Deck Studio", layout="wide")
    st.title("Image Deck Studio")

    settings = load_settings()
    st.session_state.setdefault("step", STEP_INPUT)
    st.session_state.setdefault("source_text", "")

    with st.sidebar:
        st.header("生成設定")
        mode = st.radio(
            "生成モード",
            (MODE_STUB, MODE_GEMINI),
            index=1 if settings.has_credentials else 0,
            help="APIキーが未設定の場合はスタブ生成でワークフローを試せます。",
        )
        if st.button("新しいデッキを作成"):
            pipeline = st.session_state.get("pipeline")
            if pipeline is not None:
                pipeline.reset()
            st.session_state["step"] = STEP_INPUT
            st.rerun()

    pipeline = _get_pipeline(mode, settings)
    if pipeline is None:
        st.error(messages.MISSING_API_KEY)
        st.markdown("[Gemini APIの課金設定について](https://ai.google.dev/gemini-api/docs/billing)")
        return

    notice = st.session_state.pop("notice", None)
    if notice:
        st.info(notice)

    step = st.session_state["step"]
    if step == STEP_INPUT or pipeline.config is None:
        _render_input_step(pipeline)
    elif step == STEP_OUTLINE:
        _render_outline_step(pipeline)
    else:
        _render_generation_step(pipeline)


if __name__ == "__main__":  # pragma: no cover - Streamlit handles execution
    main()
