# logging_config.py
"""
Handlers for the "Bifrost" logger. Modules log through logging.getLogger(__name__),
so every record from the package lands here.
"""
import logging
import sys
from typing import Optional

LOGGER_NAME = "Bifrost"
LOG_FORMAT = "%(asctime)s %(levelname)-7s [%(name)s] %(message)s"


def setup_logging(level: int = logging.INFO, log_file: Optional[str] = None) -> logging.Logger:
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    # Calling this again replaces the handlers instead of stacking them
    for old in list(logger.handlers):
        logger.removeHandler(old)
        old.close()

    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, mode="w", encoding="utf-8"))
    for handler in handlers:
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%H:%M:%S"))
        logger.addHandler(handler)

    logger.debug("Logging to %s", log_file or "stdout")
    return logger
