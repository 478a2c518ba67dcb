"""Logging configuration."""

import logging
import os
from typing import Optional

DEFAULT_LEVEL = "INFO"


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Get a configured logger instance."""
    logger = logging.getLogger(name or __name__)

    # Only configure if no handlers exist
    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        handler.setFormatter(formatter)
        logger.addHandler(handler)
        logger.setLevel(os.environ.get("KUBEUP_LOG_LEVEL", DEFAULT_LEVEL).upper())

    return logger


def set_log_level(level: str) -> None:
    """Apply a log level to every kubeup logger created so far."""
    level = level.upper()
    for name in list(logging.root.manager.loggerDict):
        if name == "kubeup" or name.startswith("kubeup."):
            logging.getLogger(name).setLevel(level)
