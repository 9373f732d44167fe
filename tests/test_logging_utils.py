import logging

import pytest

from image_deck.logging_utils import setup_logging


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


def test_setup_logging_writes_to_file(tmp_path, restore_root_logger):
    log_path = tmp_path / "logs" / "run.log"

    setup_logging(log_path=log_path, level="DEBUG")
    logging.getLogger("image_deck.test").debug("hello deck")
    for handler in restore_root_logger.handlers:
        handler.flush()

    assert restore_root_logger.level == logging.DEBUG
    assert "hello deck" in log_path.read_text(encoding="utf-8")
    assert logging.getLogger("httpx").level == logging.WARNING


def test_verbose_flag_selects_debug_level(restore_root_logger):
    setup_logging(verbose=True)
    assert restore_root_logger.level == logging.DEBUG

    setup_logging()
    assert restore_root_logger.level == logging.INFO
