"""Logging configuration helpers."""

import logging

LOGGER_NAME = "food_miniapp"
LOG_FORMAT = "%(levelname)s: %(name)s: %(message)s"


def configure_logging(level: str | int = logging.INFO) -> None:
    """Attach one stream handler to the application logger.

    Repeated calls only update the level.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level.upper() if isinstance(level, str) else level)
    if logger.handlers:
        return
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    logger.propagate = False
