"""Logging setup shared by the API and the maintenance scripts."""
import logging
from logging.handlers import RotatingFileHandler

LOGGER_NAME = "blog_api"
LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return the application logger or one of its children"""
    return logging.getLogger(f"{LOGGER_NAME}.{name}" if name else LOGGER_NAME)


def setup_logger(level: str = "INFO", log_file: str | None = "app.log") -> logging.Logger:
    """Attach console and rotating file handlers to the application logger.

    Calling it again replaces the handlers installed by a previous call.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG)
    logger.propagate = False

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = RotatingFileHandler(log_file, maxBytes=2000000, backupCount=3, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger
