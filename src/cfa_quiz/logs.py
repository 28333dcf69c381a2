"""Logging setup for the interactive tool."""
import logging

from rich.console import Console
from rich.logging import RichHandler

from cfa_quiz.config import DEFAULT_LOG_LEVEL, LOGGER_NAME


def setup_logging(level: str = DEFAULT_LOG_LEVEL, console: Console | None = None) -> logging.Logger:
    """Attach a single RichHandler to the package logger.

    Calling this again replaces the handler, so tests and the CLI can both
    configure it without stacking duplicate output.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(getattr(logging, level.upper(), logging.WARNING))
    logger.handlers.clear()
    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    logger.addHandler(handler)
    logger.propagate = False
    return logger
