"""
Backend config: load from env.

load_postgres_config() for the Entity Store, load_app_settings() for
numbering and analytics behaviour.
"""
from takeaway.config.postgres import PostgresConfig, load_postgres_config
from takeaway.config.settings import AppSettings, load_app_settings

__all__ = [
    "PostgresConfig",
    "load_postgres_config",
    "AppSettings",
    "load_app_settings",
]
