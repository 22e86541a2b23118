"""Logging configuration shared by the Lambda handler, the CLI and the services."""

import os
import sys
import logging
from typing import Optional

DEFAULT_LOGGER_NAME = "image-variants"

LOG_FORMATS = {
    "structured": (
        "%(asctime)s | %(name)s | %(levelname)-8s | "
        "%(filename)s:%(lineno)d | %(funcName)s() | %(message)s"
    ),
    "simple": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
}


def _resolve_level(level: Optional[str]) -> int:
    name = (level or os.getenv("LOG_LEVEL") or "INFO").upper()
    resolved = logging.getLevelName(name)
    return resolved if isinstance(resolved, int) else logging.INFO


def _build_formatter(format_type: str) -> logging.Formatter:
    chosen = os.getenv("LOG_FORMAT", format_type).lower()
    if chosen == "structured":
        return logging.Formatter(LOG_FORMATS["structured"], datefmt="%Y-%m-%d %H:%M:%S")
    return logging.Formatter(LOG_FORMATS["simple"])


def setup_logger(
    name: str = DEFAULT_LOGGER_NAME,
    level: Optional[str] = None,
    format_type: str = "structured",
) -> logging.Logger:
    """
    Configure a stdout logger.

    The level is applied on every call, so a changed LOG_LEVEL takes effect
    for loggers built afterwards. The handler is attached only once because
    Lambda reuses the interpreter between invocations.

    Environment Variables:
        LOG_LEVEL: DEBUG, INFO, WARNING, ERROR or CRITICAL (default INFO)
        LOG_FORMAT: "structured" or "simple"
    """
    logger = logging.getLogger(name)
    logger.setLevel(_resolve_level(level))

    if not logger.handlers:
        stream_handler = logging.StreamHandler(sys.stdout)
        stream_handler.setFormatter(_build_formatter(format_type))
        logger.addHandler(stream_handler)

    logger.propagate = False
    return logger


def get_logger(name: str = DEFAULT_LOGGER_NAME) -> logging.Logger:
    return setup_logger(name)
