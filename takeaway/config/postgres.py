"""
takeaway.config.postgres – PostgreSQL connection config (dataclass + validators).

Env vars: DATABASE_URL, DB_POOL_SIZE, DB_MAX_OVERFLOW, DB_POOL_TIMEOUT,
DB_POOL_RECYCLE, DB_ECHO, DB_APPLICATION_NAME.
"""
from __future__ import annotations

import os
from dataclasses import dataclass

_DEFAULT_URL = "postgresql://localhost/takeaway"
_DEFAULT_APP_NAME = "takeaway-backend"


def _validate_url(url: str) -> str:
    url = (url or "").strip()
    if not url:
        raise ValueError("DATABASE_URL is required and must be non-empty")
    if not (
        url.startswith("postgresql://")
        or url.startswith("postgres://")
        or url.startswith("postgresql+asyncpg://")
    ):
        raise ValueError(
            "DATABASE_URL must start with postgresql://, postgres:// or postgresql+asyncpg://"
        )
    return url


def _validate_positive_int(value: int, name: str) -> int:
    if not isinstance(value, int) or value < 1:
        raise ValueError(f"{name} must be an integer >= 1, got {value!r}")
    return value


def _validate_nonnegative_int(value: int, name: str) -> int:
    if not isinstance(value, int) or value < 0:
        raise ValueError(f"{name} must be a non-negative integer, got {value!r}")
    return value


def _parse_bool(raw: object) -> bool:
    if isinstance(raw, bool):
        return raw
    return str(raw).strip().lower() in ("1", "true", "yes")


@dataclass(frozen=True)
class PostgresConfig:
    """
    PostgreSQL connection and pool configuration.

    All fields are validated on construction. Use load_postgres_config()
    to build from environment variables.
    """

    url: str
    """DSN (postgresql:// or postgres://). Converted to postgresql+asyncpg in the engine."""

    pool_size: int = 10
    max_overflow: int = 20
    pool_timeout: int = 30
    """Seconds to wait for a pooled connection."""

    pool_recycle: int = 1800
    """Seconds after which a connection is recycled."""

    echo: bool = False
    application_name: str = _DEFAULT_APP_NAME

    def __post_init__(self) -> None:
        _validate_url(self.url)
        _validate_positive_int(self.pool_size, "pool_size")
        _validate_nonnegative_int(self.max_overflow, "max_overflow")
        _validate_positive_int(self.pool_timeout, "pool_timeout")
        _validate_positive_int(self.pool_recycle, "pool_recycle")
        if not isinstance(self.echo, bool):
            raise ValueError("echo must be a boolean")
        if not isinstance(self.application_name, str) or not self.application_name.strip():
            raise ValueError("application_name must be a non-empty string")

    @classmethod
    def from_env(cls, **overrides: object) -> PostgresConfig:
        """
        Build config from environment variables. Keyword overrides take
        precedence over env.
        """
        env_int = {
            "pool_size": ("DB_POOL_SIZE", 10),
            "max_overflow": ("DB_MAX_OVERFLOW", 20),
            "pool_timeout": ("DB_POOL_TIMEOUT", 30),
            "pool_recycle": ("DB_POOL_RECYCLE", 1800),
        }

        def _int(attr: str) -> int:
            if overrides.get(attr) is not None:
                return int(overrides[attr])  # type: ignore[arg-type]
            var, default = env_int[attr]
            return int(os.environ.get(var, default))

        raw_url = overrides.get("url") or os.environ.get("DATABASE_URL", _DEFAULT_URL)
        raw_echo = overrides.get("echo")
        if raw_echo is None:
            raw_echo = os.environ.get("DB_ECHO", "")
        app_name = overrides.get("application_name") or os.environ.get(
            "DB_APPLICATION_NAME", _DEFAULT_APP_NAME
        )
        return cls(
            url=_validate_url(str(raw_url)),
            pool_size=_int("pool_size"),
            max_overflow=_int("max_overflow"),
            pool_timeout=_int("pool_timeout"),
            pool_recycle=_int("pool_recycle"),
            echo=_parse_bool(raw_echo),
            application_name=str(app_name),
        )


def load_postgres_config(**overrides: object) -> PostgresConfig:
    """Load and validate PostgreSQL config from environment (with optional overrides)."""
    return PostgresConfig.from_env(**overrides)
