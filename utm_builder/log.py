"""Logging configuration for the service."""

from __future__ import annotations

import logging
import sys
from typing import Union


def setup_logging(
    level: Union[int, str] = logging.INFO,
    module_name: str = "utm_builder",
) -> logging.Logger:
    """Configure and return the package logger with consistent formatting.

    Calling it again is a no-op once a handler is attached.
    """
    logger = logging.getLogger(module_name)

    if logger.handlers:
        return logger

    logger.setLevel(level)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    logger.addHandler(handler)

    return logger
