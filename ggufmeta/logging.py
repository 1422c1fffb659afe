# ggufmeta/logging.py
"""
Logging setup using Loguru.

The decoder only emits DEBUG records (header fields, timings); the analyzer
logs decode failures at ERROR. Nothing is printed unless a sink is added here.
"""
from __future__ import annotations

import sys

from loguru import logger

_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> "
    "| <level>{level: <8}</level> "
    "| pid={process} tid={thread} "
    "<cyan>{module}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> "
    "- <level>{message}</level>"
)


def configure_logging(*, debug: bool = False, quiet: bool = False) -> None:
    """Replace loguru's sinks with a single stderr sink.

    Args:
        debug: Enable verbose debug logging.
        quiet: Only show warnings and errors. Ignored when ``debug`` is set.
    """
    logger.remove()
    if debug:
        level = "DEBUG"
    elif quiet:
        level = "WARNING"
    else:
        level = "INFO"
    logger.add(sys.stderr, level=level, format=_FORMAT, enqueue=True, backtrace=debug, diagnose=debug)
