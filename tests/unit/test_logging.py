"""
Unit tests for logging configuration
"""

import logging
import pytest
from core.logging import QUIET_LOGGERS, SERVICE_LOGGERS, setup_logging


@pytest.fixture(autouse=True)
def restore_levels():
    names = SERVICE_LOGGERS + QUIET_LOGGERS
    levels = {name: logging.getLogger(name).level for name in names}
    yield
    for name, level in levels.items():
        logging.getLogger(name).setLevel(level)


def test_service_loggers_follow_requested_level():
    assert setup_logging("debug") == logging.DEBUG

    assert logging.getLogger("reporting").level == logging.DEBUG
    assert logging.getLogger("api").level == logging.DEBUG
    assert logging.getLogger("reporting.fetcher").getEffectiveLevel() == logging.DEBUG


def test_library_loggers_stay_quiet():
    setup_logging("debug")

    assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING
    assert logging.getLogger("apscheduler").level == logging.WARNING


def test_unknown_level_falls_back_to_info():
    assert setup_logging("chatty") == logging.INFO
    assert logging.getLogger("reporting").level == logging.INFO
