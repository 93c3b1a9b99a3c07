from __future__ import annotations

import logging
from typing import Final

_LOGGER_NAME: Final[str] = "learnether"


def configure_logging(verbose: bool = False) -> logging.Logger:
    """Attach a single stderr handler to the package logger."""

    logger = logging.getLogger(_LOGGER_NAME)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(
            logging.Formatter(
                "[%(asctime)s] %(levelname)s %(name)s: %(message)s", "%Y-%m-%d %H:%M:%S"
            )
        )
        logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    logger.propagate = False
    return logger
