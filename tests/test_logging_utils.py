import logging

import pytest

from pdf_grep import logging_utils


def test_configure_logging_creates_file_handler(tmp_path):
    log_path = tmp_path / "logs" / "run.log"
    logging_utils._CONFIGURED = False  # reset between tests

    logging_utils.configure_logging(
        level="warning",
        log_file=log_path,
        console=False,
        force=True,
    )

    logger = logging.getLogger("pdf_grep.tests")
    logger.warning("coverage-check")

    contents = log_path.read_text(encoding="utf-8")
    assert "coverage-check" in contents


def test_configure_logging_requires_handler(monkeypatch):
    logging_utils._CONFIGURED = False
    monkeypatch.delenv("PDF_GREP_LOG_FILE", raising=False)

    with pytest.raises(ValueError):
        logging_utils.configure_logging(
            level="info",
            console=False,
            force=True,
        )


def test_level_falls_back_to_environment(monkeypatch):
    monkeypatch.setenv("PDF_GREP_LOG_LEVEL", "debug")

    assert logging_utils._resolve_level(None) == logging.DEBUG
    assert logging_utils._resolve_level("bogus") == logging.DEBUG
    assert logging_utils._resolve_level(logging.ERROR) == logging.ERROR


def test_silence_logging_adds_a_single_null_handler():
    logging_utils.silence_logging()
    logging_utils.silence_logging()

    handlers = logging.getLogger("pdf_grep").handlers
    assert sum(isinstance(h, logging.NullHandler) for h in handlers) == 1
