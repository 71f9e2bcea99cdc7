"""Logging configuration."""

import logging
from pathlib import Path
from typing import Optional

from certctl.models.config import AppConfig


def setup_logger(config: Optional[AppConfig] = None, verbose: bool = False) -> logging.Logger:
    """
    Configure application logger.

    Args:
        config: Application configuration
        verbose: Force console output down to DEBUG

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger("certctl")

    # Prevent duplicate handlers
    if logger.handlers:
        return logger

    # Set level
    level = logging.INFO
    console_level = logging.WARNING
    if config and hasattr(config, "logging"):
        level = getattr(logging, config.logging.level, logging.INFO)
        console_level = getattr(logging, config.logging.console_level, logging.WARNING)
    if verbose:
        level = console_level = logging.DEBUG

    logger.setLevel(min(level, console_level))

    # Console handler
    console_handler = logging.StreamHandler()
    console_handler.setLevel(console_level)
    console_formatter = logging.Formatter("%(levelname)s: %(message)s")
    console_handler.setFormatter(console_formatter)
    logger.addHandler(console_handler)

    # File handler (if configured)
    if config and config.logging.file:
        log_file = Path(config.logging.file)
        log_file.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(level)
        file_formatter = logging.Formatter(config.logging.format)
        file_handler.setFormatter(file_formatter)
        logger.addHandler(file_handler)

    return logger
