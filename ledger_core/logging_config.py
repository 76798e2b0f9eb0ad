"""
Logging setup for the ledger service.

Every module logs through logging.getLogger(__name__), so all
records flow up to the "ledger_core" logger configured here.
"""

import logging

_LOGGER_NAME = "ledger_core"
_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

_handler: logging.Handler | None = None


def configure_logging(level: str = "INFO") -> logging.Logger:
    """
    Attach a stream handler to the package logger.

    Safe to call more than once: the handler is only
    installed the first time, later calls just update
    the level.
    """
    global _handler

    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level.upper())

    if _handler is None:
        _handler = logging.StreamHandler()
        _handler.setFormatter(logging.Formatter(_FORMAT))
        logger.addHandler(_handler)

    return logger
