"""
Logging setup for the command line; library modules only call get_logger().
"""

import logging
import os
import re
import sys

_SECRET = re.compile(r"((?:password|key)\s*[:=]\s*)\S+", re.IGNORECASE)


class SecretFilter(logging.Filter):
    """Replace password=/key= values in rendered messages."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        masked = _SECRET.sub(r"\1***", message)
        if masked != message:
            record.msg, record.args = masked, None
        return True


def setup_logging(component_name: str, log_level: str | None = None) -> logging.Logger:
    """
    Attach a stdout handler to *component_name*'s logger, once.

    *log_level* defaults to the LOG_LEVEL environment variable, then INFO.
    """
    level_name = (log_level or os.getenv("LOG_LEVEL", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)

    logger = logging.getLogger(component_name)
    logger.setLevel(level)
    if logger.handlers:
        return logger

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    ))
    handler.addFilter(SecretFilter())
    logger.addHandler(handler)
    logger.propagate = False
    return logger


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
