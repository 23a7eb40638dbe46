"""Tests for logging configuration."""

import logging

from dissertation_portal.app_logging import configure_logging


def test_configure_logging_idempotent() -> None:
    logger = logging.getLogger("dissertation_portal")
    logger.handlers.clear()

    configure_logging()
    first_count = len(logger.handlers)

    configure_logging()
    second_count = len(logger.handlers)

    assert first_count == 1
    assert second_count == 1


def test_configure_logging_quiets_http_clients() -> None:
    configure_logging("DEBUG")

    assert logging.getLogger("dissertation_portal").level == logging.DEBUG
    assert logging.getLogger("httpx").level == logging.WARNING
