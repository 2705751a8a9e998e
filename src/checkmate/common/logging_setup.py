from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
HANDLER_NAME = "checkmate"


def configure_logging(level: str = "INFO") -> logging.Logger:
    """Attach a single stream handler to the package logger."""
    logger = logging.getLogger("checkmate")
    logger.setLevel(getattr(logging, str(level).upper(), logging.INFO))

    if not any(h.get_name() == HANDLER_NAME for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.set_name(HANDLER_NAME)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)

    return logger
