"""
Project logger: rotating JSON file + console.

Usage:
    from takeaway.core.logger import configure, LoggerConfig

    # Once at startup (the API lifespan and the scripts do this)
    configure(LoggerConfig(level="DEBUG", log_dir="/var/log/takeaway"))

    # Or from env: LOG_LEVEL, LOG_DIR, LOG_FILE_BASENAME, LOG_MAX_BYTES, ...
    configure()

Modules keep using ``logging.getLogger(__name__)``; records propagate up to
the ``takeaway`` logger that carries the handlers.
"""
from takeaway.core.logger.config import LoggerConfig
from takeaway.core.logger.formatters import JsonFormatter, PlainConsoleFormatter
from takeaway.core.logger.setup import active_config, configure, get_logger

__all__ = [
    "LoggerConfig",
    "JsonFormatter",
    "PlainConsoleFormatter",
    "configure",
    "get_logger",
    "active_config",
]
