"""Logging configuration."""

import logging
import sys
from pathlib import Path
from typing import Optional

from certgen.models.config import CertgenConfig


def setup_logger(config: Optional[CertgenConfig] = None) -> logging.Logger:
    """
    Configure the certgen logger.

    Failures of every operation end up on stderr through the console handler,
    the optional file handler keeps the full command trace.

    Args:
        config: certgen configuration

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger("certgen")

    # Prevent duplicate handlers
    if logger.handlers:
        return logger

    level = logging.INFO
    if config is not None:
        level = getattr(logging, config.logging.level.upper(), logging.INFO)

    logger.setLevel(level)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
    logger.addHandler(console_handler)

    if config is not None and config.logging.file:
        log_file = Path(config.logging.file)
        log_file.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter(config.logging.format))
        logger.addHandler(file_handler)

    return logger
