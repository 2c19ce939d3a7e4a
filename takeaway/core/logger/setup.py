"""
Logger setup: attach console and rotating JSON file handlers from a LoggerConfig.
"""
from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler
from typing import Optional

from takeaway.core.logger.config import LoggerConfig
from takeaway.core.logger.formatters import JsonFormatter, PlainConsoleFormatter

_active_config: Optional[LoggerConfig] = None


def configure(config: Optional[LoggerConfig] = None) -> LoggerConfig:
    """
    Configure the ``takeaway`` logger tree. Uses LoggerConfig.from_env()
    when no config is given. Safe to call repeatedly (handlers are replaced).
    """
    global _active_config
    if config is None:
        config = LoggerConfig.from_env()
    _active_config = config

    level = getattr(logging, config.level.upper(), logging.INFO)
    root = logging.getLogger(config.root_name)
    root.setLevel(level)
    root.handlers.clear()

    if config.console:
        console = logging.StreamHandler()
        console.setLevel(level)
        console.setFormatter(PlainConsoleFormatter())
        root.addHandler(console)

    if config.file_rotating and config.log_dir and config.log_dir.strip():
        try:
            os.makedirs(config.log_dir, exist_ok=True)
        except OSError:
            root.warning("Could not create log dir %s, skipping file handler", config.log_dir)
        else:
            file_handler = RotatingFileHandler(
                os.path.join(config.log_dir, f"{config.log_file_basename}.log"),
                maxBytes=config.max_bytes,
                backupCount=config.backup_count,
                encoding="utf-8",
            )
            file_handler.setLevel(level)
            file_handler.setFormatter(JsonFormatter())
            root.addHandler(file_handler)

    root.propagate = False
    return config


def get_logger(name: str) -> logging.Logger:
    """
    Return a logger, configuring the tree from the environment on first use.
    Pass ``__name__`` from takeaway modules so records land under the root.
    """
    if _active_config is None:
        configure()
    return logging.getLogger(name)


def active_config() -> Optional[LoggerConfig]:
    return _active_config
