from pathlib import Path

import pytest

from model_api.exceptions import LLMAPIError, LLMAuthenticationError, LLMPermissionDeniedError

from image_deck import config, messages
from image_deck.exceptions import NoImageDataError
from image_deck.slide_models import DeckConfig, SlideImage

ENV_NAMES = (
    "GEMINI_API_KEY",
    "GOOGLE_API_KEY",
    "IMAGE_DECK_IMAGE_MODEL",
    "IMAGE_DECK_IMAGE_SIZE",
    "IMAGE_DECK_MAX_SOURCE_CHARS",
    "IMAGE_DECK_LOG_LEVEL",
    "IMAGE_DECK_LOG_FILE",
)


@pytest.fixture
def clean_env(monkeypatch):
    for name in ENV_NAMES:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_settings_defaults_without_environment(clean_env):
    settings = config.Settings.from_env(dotenv=False)

    assert not settings.has_credentials
    assert settings.image_model == config.DEFAULT_IMAGE_MODEL
    assert settings.max_source_chars == config.MAX_SOURCE_CHARS
    assert settings.outline_tiers == config.DEFAULT_OUTLINE_TIERS
    assert settings.log_path is None


def test_settings_read_from_environment(clean_env):
    clean_env.setenv("GOOGLE_API_KEY", "google-key")
    clean_env.setenv("IMAGE_DECK_MAX_SOURCE_CHARS", "1000")
    clean_env.setenv("IMAGE_DECK_LOG_LEVEL", "debug")
    clean_env.setenv("IMAGE_DECK_LOG_FILE", "logs/deck.log")

    settings = config.Settings.from_env(dotenv=False)

    assert settings.gemini_api_key == "google-key"
    assert settings.max_source_chars == 1000
    assert settings.log_level == "DEBUG"
    assert settings.log_path == Path("logs/deck.log")

    clean_env.setenv("GEMINI_API_KEY", "gemini-key")
    assert config.Settings.from_env(dotenv=False).gemini_api_key == "gemini-key"


def test_outline_tiers_are_ordered_from_strongest_to_fastest():
    labels = [tier.label for tier in config.DEFAULT_OUTLINE_TIERS]

    assert labels == ["pro-thinking", "pro-standard", "flash"]
    assert config.DEFAULT_OUTLINE_TIERS[0].thinking_budget
    assert all(tier.thinking_budget is None for tier in config.DEFAULT_OUTLINE_TIERS[1:])


@pytest.mark.parametrize(
    "kwargs",
    [
        {"source_text": "  ", "slide_count": 3, "style_id": "PROFESSIONAL"},
        {"source_text": "text", "slide_count": 0, "style_id": "PROFESSIONAL"},
        {"source_text": "text", "slide_count": config.MAX_SLIDES + 1, "style_id": "PROFESSIONAL"},
        {"source_text": "text", "slide_count": 3, "style_id": ""},
    ],
)
def test_deck_config_rejects_invalid_requests(kwargs):
    with pytest.raises(ValueError):
        DeckConfig(**kwargs)


def test_slide_image_helpers():
    image = SlideImage(data=b"abc", mime_type="image/jpeg")

    assert image.data_uri == "data:image/jpeg;base64,YWJj"
    assert image.extension == "jpg"
    assert SlideImage(data=b"abc").extension == "png"


@pytest.mark.parametrize(
    "error, expected",
    [
        (LLMPermissionDeniedError("denied", provider="Gemini"), messages.RENDER_PERMISSION_DENIED),
        (LLMAuthenticationError("bad key", provider="Gemini"), messages.RENDER_PERMISSION_DENIED),
        (RuntimeError("403 Forbidden"), messages.RENDER_PERMISSION_DENIED),
        (RuntimeError("Billing account is disabled"), messages.RENDER_PERMISSION_DENIED),
        (LLMAPIError("500 INTERNAL", provider="Gemini"), messages.RENDER_FAILED),
        (NoImageDataError("No image data"), messages.RENDER_FAILED),
        (TimeoutError("timed out"), messages.RENDER_FAILED),
        (TimeoutError("deadline exceeded after 4030ms"), messages.RENDER_FAILED),
        (LLMAPIError("500 INTERNAL request_id=a4031f", provider="Gemini"), messages.RENDER_FAILED),
        (RuntimeError("PERMISSION_DENIED: model not enabled"), messages.RENDER_PERMISSION_DENIED),
    ],
)
def test_render_errors_map_to_fixed_messages(error, expected):
    assert messages.render_error_message(error) == expected
