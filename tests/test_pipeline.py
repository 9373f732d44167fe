import gc

import pymupdf
import pytest

from model_api.exceptions import LLMAPIError

from image_deck import messages
from image_deck.config import Settings
from image_deck.exceptions import ConfigurationError, DeckIncompleteError, EmptyOutlineError
from image_deck.pipeline import DeckPipeline
from image_deck.slide_models import DeckConfig, SlideStatus

from tests.model_stubs import DeckModel, outline_items


@pytest.fixture
def make_pipeline():
    created = []

    def factory(model, **kwargs):
        pipeline = DeckPipeline(model, settings=Settings(gemini_api_key="test-key"), **kwargs)
        created.append(pipeline)
        return pipeline

    yield factory
    for pipeline in created:
        pipeline.close()


def _config(count=3, text="新製品の市場調査レポート"):
    return DeckConfig(source_text=text, slide_count=count, style_id="PROFESSIONAL")


def test_full_flow_produces_pdf_and_pptx(make_pipeline):
    model = DeckModel([outline_items(3)])
    pipeline = make_pipeline(model)

    slides = pipeline.create_outline(_config())
    assert [slide.status for slide in slides] == [SlideStatus.WAITING] * 3

    pipeline.edit_slide(slides[0].slide_id, title="表紙")
    pipeline.start_generation().result(timeout=10)

    assert pipeline.is_complete()
    assert model.titles() == ["表紙", "Topic 2", "Topic 3"]
    with pymupdf.open(stream=pipeline.export_pdf(), filetype="pdf") as document:
        assert document.page_count == 3
    assert pipeline.export_pptx().startswith(b"PK")


def test_failed_slide_blocks_export_until_regenerated(make_pipeline):
    model = DeckModel([outline_items(2)], failures={"Topic 2": LLMAPIError("timeout", provider="Gemini")})
    pipeline = make_pipeline(model)
    pipeline.create_outline(_config(2))

    pipeline.generate_all()

    failed = pipeline.slides()[1]
    assert failed.status is SlideStatus.FAILED
    assert failed.last_error == messages.RENDER_FAILED
    assert not pipeline.is_complete()
    with pytest.raises(DeckIncompleteError):
        pipeline.export_pdf()

    model.failures.clear()
    record = pipeline.start_regenerate(failed.slide_id).result(timeout=10)

    assert record.status is SlideStatus.DONE
    assert pipeline.is_complete()
    assert pipeline.export_pdf().startswith(b"%PDF")


def test_missing_credentials_block_every_backend_call(make_pipeline):
    model = DeckModel([outline_items(1)])
    pipeline = make_pipeline(model, credentials_available=lambda: False)

    with pytest.raises(ConfigurationError) as excinfo:
        pipeline.create_outline(_config(1))

    assert str(excinfo.value) == messages.MISSING_API_KEY
    assert model.outline_requests == []

    unconfigured = make_pipeline(None)
    with pytest.raises(ConfigurationError):
        unconfigured.create_outline(_config(1))


def test_empty_outline_keeps_previous_deck(make_pipeline):
    model = DeckModel([outline_items(2), []])
    pipeline = make_pipeline(model)
    previous = pipeline.create_outline(_config(2))

    with pytest.raises(EmptyOutlineError) as excinfo:
        pipeline.create_outline(_config(4))

    assert str(excinfo.value) == messages.OUTLINE_EMPTY
    assert [slide.slide_id for slide in pipeline.slides()] == [slide.slide_id for slide in previous]
    assert pipeline.config.slide_count == 2


def test_new_outline_replaces_previous_deck(make_pipeline):
    model = DeckModel([outline_items(2, prefix="Old"), outline_items(3, prefix="New")])
    pipeline = make_pipeline(model)
    old_ids = {slide.slide_id for slide in pipeline.create_outline(_config(2))}

    new_slides = pipeline.create_outline(_config(3))

    assert [slide.title for slide in new_slides] == ["New 1", "New 2", "New 3"]
    assert old_ids.isdisjoint(slide.slide_id for slide in new_slides)


def test_truncation_notice_and_reset(make_pipeline):
    pipeline = make_pipeline(DeckModel([outline_items(1)]))

    assert pipeline.was_truncated(_config(1, text="x" * 30000))
    assert not pipeline.was_truncated(_config(1, text="short"))

    with pytest.raises(RuntimeError):
        pipeline.start_generation()

    pipeline.create_outline(_config(1))
    pipeline.reset()
    assert pipeline.slides() == []
    assert pipeline.config is None


def test_close_shuts_down_executors_once():
    pipeline = DeckPipeline(DeckModel([]), settings=Settings(gemini_api_key="test-key"))

    pipeline.close()
    pipeline.close()

    assert pipeline.closed
    with pytest.raises(RuntimeError):
        pipeline.scheduler.start_all(_config(1))


def test_released_pipeline_shuts_down_its_executors():
    pipeline = DeckPipeline(DeckModel([]), settings=Settings(gemini_api_key="test-key"))
    scheduler = pipeline.scheduler

    del pipeline
    gc.collect()

    with pytest.raises(RuntimeError):
        scheduler.start_all(_config(1))