"""Defaults and environment overrides."""
import logging
import math
import os
from dataclasses import dataclass

ALL_SUBJECTS = "all"

# Analytics
STRENGTH_THRESHOLD = 70
SUBJECT_LIST_CAP = 3
RECENT_WINDOW = 10
LABEL_MAX_LENGTH = 20

# Simulated extraction
EXTRACTION_STEPS = 100
EXTRACTION_TICK_SECONDS = 0.05
EXTRACTION_EMIT_EVERY = 10
PADDING_QUESTIONS = 25

LOGGER_NAME = "cfa_quiz"
DEFAULT_LOG_LEVEL = "WARNING"

logger = logging.getLogger(__name__)


def _env_flag(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


def _tick_seconds(value: str) -> float:
    try:
        tick = float(value)
    except ValueError:
        tick = math.nan
    if not (math.isfinite(tick) and tick >= 0):
        logger.warning(
            "CFA_QUIZ_TICK_SECONDS=%r is not a non-negative number; using %s",
            value, EXTRACTION_TICK_SECONDS,
        )
        return EXTRACTION_TICK_SECONDS
    return tick


@dataclass
class Settings:
    log_level: str = DEFAULT_LOG_LEVEL
    tick_seconds: float = EXTRACTION_TICK_SECONDS
    simulate_extraction: bool = True

    @classmethod
    def from_env(cls, environ=None) -> "Settings":
        """Read CFA_QUIZ_* variables, falling back to the defaults above."""
        env = os.environ if environ is None else environ
        settings = cls()
        if env.get("CFA_QUIZ_LOG_LEVEL"):
            settings.log_level = env["CFA_QUIZ_LOG_LEVEL"].upper()
        if env.get("CFA_QUIZ_TICK_SECONDS"):
            settings.tick_seconds = _tick_seconds(env["CFA_QUIZ_TICK_SECONDS"])
        if env.get("CFA_QUIZ_SIMULATE"):
            settings.simulate_extraction = _env_flag(env["CFA_QUIZ_SIMULATE"])
        return settings
