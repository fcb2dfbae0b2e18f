from __future__ import annotations

import io
import logging

import pytest

from finance_tracker.logging_setup import configure_logging, get_logger


@pytest.fixture
def restore_package_logger():
    logger = logging.getLogger("finance_tracker")
    saved = (list(logger.handlers), logger.level, logger.propagate)
    yield
    logger.handlers[:] = saved[0]
    logger.setLevel(saved[1])
    logger.propagate = saved[2]


def test_level_from_config_filters_records(restore_package_logger):
    stream = io.StringIO()
    configure_logging("warning", stream=stream)
    log = get_logger("finance_tracker.store")
    log.info("hidden")
    log.warning("shown")
    output = stream.getvalue()
    assert "shown" in output
    assert "hidden" not in output
    assert "finance_tracker.store WARNING" in output


def test_reconfiguring_replaces_the_handler(restore_package_logger):
    first, second = io.StringIO(), io.StringIO()
    configure_logging("INFO", stream=first)
    logger = configure_logging("DEBUG", stream=second)
    get_logger("finance_tracker.retrieval").debug("query")
    assert first.getvalue() == ""
    assert "query" in second.getvalue()
    assert logger.level == logging.DEBUG


def test_unknown_level_falls_back_to_info(restore_package_logger):
    assert configure_logging("chatty", stream=io.StringIO()).level == logging.INFO
