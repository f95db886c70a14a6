from __future__ import annotations

import logging
import sys


class CleanFormatter(logging.Formatter):
    """Operator-facing formatter: INFO lines print bare, other levels get a marker."""

    def format(self, record: logging.LogRecord) -> str:
        message = record.getMessage()
        if record.levelno == logging.INFO:
            return message
        if record.levelno >= logging.ERROR:
            return f"❌ {message}"
        if record.levelno == logging.DEBUG:
            return f"🔍 {message}"
        return f"{record.levelname}: {message}"


def setup_logging(verbose: bool = False) -> logging.Logger:
    """Configure console logging based on verbosity level.

    Replaces any handlers already on the root logger, so calling it once per
    command invocation is safe.
    """
    level = logging.DEBUG if verbose else logging.INFO

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(CleanFormatter())
    logging.basicConfig(level=level, handlers=[console_handler], force=True)

    logger = logging.getLogger("cmsfixup")
    logger.setLevel(level)
    return logger


__all__ = ["CleanFormatter", "setup_logging"]
