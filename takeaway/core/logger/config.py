"""
Logger configuration, built from code or from the environment.
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

_TRUTHY = ("1", "true", "yes")
_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class LoggerConfig:
    """
    Configuration for the ``takeaway`` logger tree.

    Use LoggerConfig.from_env() for env-based config, or build explicitly.
    """

    level: str = "INFO"
    # Directory for the rotating JSON log; None disables the file handler
    log_dir: Optional[str] = None
    log_file_basename: str = "takeaway"
    max_bytes: int = 5 * 1024 * 1024
    backup_count: int = 5
    # Handlers are attached here; every takeaway.* module logger inherits them
    root_name: str = "takeaway"
    console: bool = True
    file_rotating: bool = True

    def __post_init__(self) -> None:
        if self.level.upper() not in _LEVELS:
            raise ValueError(f"level must be one of {_LEVELS}, got {self.level!r}")
        if self.max_bytes < 1024:
            raise ValueError(f"max_bytes must be >= 1024, got {self.max_bytes!r}")
        if self.backup_count < 0:
            raise ValueError(f"backup_count must be >= 0, got {self.backup_count!r}")

    @classmethod
    def from_env(cls) -> "LoggerConfig":
        """
        Build config from environment variables.

        Env:
            LOG_LEVEL, LOG_DIR, LOG_FILE_BASENAME, LOG_MAX_BYTES,
            LOG_BACKUP_COUNT, LOG_CONSOLE, LOG_FILE_ROTATING
        """
        return cls(
            level=os.environ.get("LOG_LEVEL", "INFO").upper(),
            log_dir=os.environ.get("LOG_DIR") or None,
            log_file_basename=os.environ.get("LOG_FILE_BASENAME", "takeaway"),
            max_bytes=int(os.environ.get("LOG_MAX_BYTES", str(5 * 1024 * 1024))),
            backup_count=int(os.environ.get("LOG_BACKUP_COUNT", "5")),
            console=os.environ.get("LOG_CONSOLE", "true").lower() in _TRUTHY,
            file_rotating=os.environ.get("LOG_FILE_ROTATING", "true").lower() in _TRUTHY,
        )
