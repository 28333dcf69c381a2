import logging
from unittest.mock import patch

import pytest

from cfa_quiz.config import EXTRACTION_TICK_SECONDS, LOGGER_NAME, Settings
from cfa_quiz.logs import setup_logging


def test_settings_defaults():
    settings = Settings.from_env({})
    assert settings.log_level == "WARNING"
    assert settings.tick_seconds == EXTRACTION_TICK_SECONDS
    assert settings.simulate_extraction is True


def test_settings_from_env():
    settings = Settings.from_env({
        "CFA_QUIZ_LOG_LEVEL": "debug",
        "CFA_QUIZ_TICK_SECONDS": "0",
        "CFA_QUIZ_SIMULATE": "no",
    })
    assert settings.log_level == "DEBUG"
    assert settings.tick_seconds == 0.0
    assert settings.simulate_extraction is False


@pytest.mark.parametrize("value", ["-1", "fast", "nan", "inf"])
def test_settings_bad_tick_falls_back(value):
    with patch("cfa_quiz.config.logger") as logger:
        settings = Settings.from_env({"CFA_QUIZ_TICK_SECONDS": value})
    assert settings.tick_seconds == EXTRACTION_TICK_SECONDS
    logger.warning.assert_called_once()
    assert "CFA_QUIZ_TICK_SECONDS" in logger.warning.call_args[0][0]


def test_setup_logging_single_handler():
    setup_logging("INFO")
    logger = setup_logging("DEBUG")
    assert logger.name == LOGGER_NAME
    assert logger.level == logging.DEBUG
    assert len(logger.handlers) == 1


def test_setup_logging_unknown_level():
    logger = setup_logging("chatty")
    assert logger.level == logging.WARNING
