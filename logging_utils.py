import logging
from typing import Any, Optional

from pythonjsonlogger import jsonlogger

from config import get_settings

LOGGER_NAME = "safe_routing"


def _parse_level(name: str) -> int:
    level = logging.getLevelName(name.upper())
    return level if isinstance(level, int) else logging.INFO


def get_logger() -> logging.Logger:
    logger = logging.getLogger(LOGGER_NAME)

    # Prevent duplicate handlers when imported from several entry points
    if getattr(logger, "_configured", False):
        return logger

    logger.setLevel(_parse_level(get_settings().log_level))
    logger.propagate = False

    handler = logging.StreamHandler()
    handler.setFormatter(jsonlogger.JsonFormatter())
    logger.addHandler(handler)

    logger._configured = True  # type: ignore[attr-defined]
    return logger


LOGGER: Optional[logging.Logger] = None


def log_event(event: str, level: int = logging.INFO, **fields: Any) -> None:
    global LOGGER
    if LOGGER is None:
        LOGGER = get_logger()
    # event is both the message and a top-level key
    LOGGER.log(level, event, extra={"event": event, **fields})
