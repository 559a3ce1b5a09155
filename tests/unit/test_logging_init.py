from __future__ import annotations

import logging

from refdata_import.logging.init import (
    LOGGER_NAME,
    SUMMARY_LEVEL,
    LabeledFormatter,
    get_logger,
    log_summary,
    reset_logging,
    setup_logging,
)


def test_setup_logging_creates_package_logger():
    logger = setup_logging()
    assert logger.name == LOGGER_NAME == "refdata_import"
    assert logger.level == logging.INFO
    assert len(logger.handlers) == 1
    assert isinstance(logger.handlers[0].formatter, LabeledFormatter)
    assert logger.propagate is False


def test_setup_logging_idempotent():
    logger1 = setup_logging()
    logger2 = setup_logging()
    assert logger1 is logger2
    assert len(logger1.handlers) == 1


def test_get_logger_returns_configured_logger():
    assert get_logger() is setup_logging()


def test_labeled_prefixes(capsys):
    logger = setup_logging()
    logger.info("info message")
    logger.warning("warning message")
    logger.error("error message")
    log_summary("files=1/1 success=1")
    lines = capsys.readouterr().out.strip().splitlines()
    assert lines == [
        "INFO info message",
        "WARN warning message",
        "ERROR error message",
        "SUMMARY files=1/1 success=1",
    ]
    assert logging.getLevelName(SUMMARY_LEVEL) == "SUMMARY"


def test_module_loggers_flow_through_package_handler(capsys):
    setup_logging()
    logging.getLogger("refdata_import.normalize.fields").warning("child message")
    assert capsys.readouterr().out.strip() == "WARN child message"


def test_debug_is_filtered_at_info(capsys):
    logger = setup_logging()
    logger.debug("hidden")
    assert capsys.readouterr().out == ""


def test_reset_logging_removes_handlers():
    logger = setup_logging()
    reset_logging()
    assert logger.handlers == []
    assert logger.propagate is True
    assert setup_logging() is logger
