from __future__ import annotations

import logging
from io import StringIO

import callserver_insight.logging.init as log_init
from callserver_insight.logging.init import (
    LOGGER_NAME,
    SUMMARY_LEVEL,
    LabeledFormatter,
    get_logger,
    log_summary,
    setup_logging,
)


def _capture(logger: logging.Logger) -> StringIO:
    buf = StringIO()
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
    handler = logging.StreamHandler(buf)
    handler.setFormatter(LabeledFormatter())
    logger.addHandler(handler)
    return buf


def test_setup_logging_creates_logger_with_labeled_formatter():
    """setup_logging returns the application logger with one stdout handler."""
    logger = setup_logging()
    assert logger.name == LOGGER_NAME
    assert logger.level == logging.INFO
    assert len(logger.handlers) == 1
    assert isinstance(logger.handlers[0].formatter, LabeledFormatter)
    assert logger.propagate is False


def test_setup_logging_idempotent():
    logger1 = setup_logging()
    logger2 = setup_logging()
    assert logger1 is logger2
    assert len(logger1.handlers) == 1
    assert get_logger() is logger1


def test_logging_labeled_prefixes():
    """Output lines carry INFO / WARN / ERROR / SUMMARY labels."""
    logger = setup_logging()
    buf = _capture(logger)

    logger.info("Test info message")
    logger.warning("Test warning message")
    logger.error("Test error message")
    log_summary("periods=1 files=1/1")

    lines = buf.getvalue().strip().split("\n")
    assert lines == [
        "INFO Test info message",
        "WARN Test warning message",
        "ERROR Test error message",
        "SUMMARY periods=1 files=1/1",
    ]


def test_service_loggers_propagate_into_application_logger():
    logger = setup_logging()
    buf = _capture(logger)
    logging.getLogger("callserver_insight.services.file_processor").warning("skipped file x.xlsx: bad")
    assert buf.getvalue().strip() == "WARN skipped file x.xlsx: bad"


def test_summary_level_registered():
    setup_logging()
    assert logging.getLevelName(SUMMARY_LEVEL) == "SUMMARY"


def test_reset_logging_clears_cached_logger():
    setup_logging()
    log_init.reset_logging()
    assert log_init._logger is None
