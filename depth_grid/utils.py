#!/usr/bin/env python3
"""
Utility functions for the depth grid monitor
"""

import os
import logging
import shutil
from typing import Tuple


def setup_logging(name: str, log_file: str, level: str = "INFO", console: bool = True) -> logging.Logger:
    """
    Set up logging for the monitor

    Args:
        name: Logger name
        log_file: Path to the log file
        level: Logging level
        console: Also log to stderr; off while the grid owns the terminal

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, level))

    # Drop handlers from an earlier setup so lines are not duplicated
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )

    file_handler = logging.FileHandler(log_file)
    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)

    if console:
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    return logger


def ensure_directory(path: str) -> bool:
    """
    Ensure a directory exists

    Args:
        path: Directory path

    Returns:
        True if directory exists or was created, False otherwise
    """
    try:
        os.makedirs(path, exist_ok=True)
        return True
    except OSError as e:
        logging.error(f"Failed to create directory {path}: {e}")
        return False


def terminal_size(fallback: Tuple[int, int] = (80, 24)) -> Tuple[int, int]:
    """Return the terminal (columns, lines)"""
    size = shutil.get_terminal_size(fallback)
    return size.columns, size.lines
