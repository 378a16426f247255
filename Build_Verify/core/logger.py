import logging
import sys
from typing import Callable


LogSink = Callable[[str, str, str], None]

LOGGER_PREFIX = "Build_Verify"

_LEVELS_BY_VERBOSE = {
    0: logging.WARNING,
    1: logging.INFO,
    2: logging.DEBUG,
}


def log(level: str, source: str, message: str) -> None:
    """
    Default sink: route ``(level, source, message)`` to stdlib logging
    under ``Build_Verify.<source>``.
    """
    numeric = logging.getLevelName(level.upper())
    if not isinstance(numeric, int):
        numeric = logging.INFO
    logging.getLogger(f"{LOGGER_PREFIX}.{source}").log(numeric, message)


def null_log(level: str, source: str, message: str) -> None:
    return None


def setup_logging(verbose_count: int = 0) -> logging.Logger:
    """
    Configure the package logger from a -v count.

    -v  → INFO
    -vv → DEBUG
    default → WARNING

    Idempotent: calling it again only adjusts the level.
    """
    level = _LEVELS_BY_VERBOSE.get(verbose_count, logging.DEBUG)
    logger = logging.getLogger(LOGGER_PREFIX)
    logger.setLevel(level)

    if not any(getattr(h, "_build_verify_handler", False) for h in logger.handlers):
        handler = logging.StreamHandler(stream=sys.stderr)
        handler._build_verify_handler = True  # type: ignore[attr-defined]
        handler.setFormatter(
            logging.Formatter(
                fmt="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
                datefmt="%H:%M:%S",
            )
        )
        logger.addHandler(handler)

    return logger
