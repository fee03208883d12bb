from __future__ import annotations

import logging

import pytest

from backend.utils.logger import SERVICE_LOGGERS, configure_logging, get_logger


@pytest.fixture()
def restore_service_levels():
    saved = {name: logging.getLogger(name).level for name in SERVICE_LOGGERS}
    yield
    for name, level in saved.items():
        logging.getLogger(name).setLevel(level)


def test_explicit_level_applies_after_import_time_configuration(restore_service_levels) -> None:
    pricing_logger = get_logger("backend.services.pricing_service")

    configure_logging("warning")
    assert pricing_logger.getEffectiveLevel() == logging.WARNING
    assert logging.getLogger("app").level == logging.WARNING

    configure_logging("DEBUG")
    assert pricing_logger.isEnabledFor(logging.DEBUG)


def test_implicit_call_leaves_service_levels_untouched(restore_service_levels) -> None:
    configure_logging("ERROR")
    get_logger("backend.repository.history_repository")
    assert logging.getLogger("backend").level == logging.ERROR


def test_unknown_level_raises() -> None:
    with pytest.raises(ValueError):
        configure_logging("chatty")
