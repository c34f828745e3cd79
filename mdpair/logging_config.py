"""
Logging Configuration
Sets up the package logger.
"""

from __future__ import annotations

import logging
import sys


def setup_logging(
    level: int = logging.INFO,
    log_file: str | None = None,
    rank: int | None = None,
) -> logging.Logger:
    """
    Configure the logger for the 'mdpair' namespace.

    Args:
        level: Logging level (e.g. logging.DEBUG, logging.INFO).
        log_file: Optional path to also write logs to.
        rank: Worker rank to tag every record with, for SPMD runs.

    Returns:
        The configured package logger.
    """
    logger = logging.getLogger("mdpair")
    logger.setLevel(level)

    # Avoid duplicate handlers when called more than once
    if logger.hasHandlers():
        logger.handlers.clear()

    prefix = f"[rank {rank}] " if rank is not None else ""
    formatter = logging.Formatter(
        f"%(asctime)s - {prefix}%(name)s - %(levelname)s - %(message)s",
        datefmt="%H:%M:%S",
    )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, mode="w", encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.debug("Logging initialized.")
    return logger
