"""Logging setup for the service."""
import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def configure_logging(level: str = "INFO") -> logging.Logger:
    """
    Attach a single stream handler to the package logger.

    Safe to call more than once; the handler is only added the first time.

    Args:
        level: Log level name, e.g. "INFO" or "DEBUG"

    Returns:
        The configured "clockistry" logger
    """
    logger = logging.getLogger("clockistry")
    logger.setLevel(level.upper())

    handler_name = "clockistry:console"
    if not any(h.get_name() == handler_name for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT, LOG_DATE_FORMAT))
        handler.set_name(handler_name)
        logger.addHandler(handler)

    return logger
