"""
takeaway.config.settings – business settings for numbering and analytics.

Env vars: ORDER_NUMBER_PREFIX, APP_TIMEZONE, CURRENCY, DASHBOARD_TREND_DAYS,
DASHBOARD_TOP_ITEMS, UPCOMING_WINDOW_DAYS, UPCOMING_LIMIT.
"""
from __future__ import annotations

import os
import re
from dataclasses import dataclass
from datetime import tzinfo

from takeaway.core.clock import resolve_timezone

_PREFIX_PATTERN = re.compile(r"^[A-Z][A-Z0-9]{0,9}$")


@dataclass(frozen=True)
class AppSettings:
    """Validated business settings. Use load_app_settings() to read the environment."""

    order_number_prefix: str = "FTP"
    """Prefix of human-readable order numbers (FTP-0001)."""

    timezone_name: str = "UTC"
    """IANA zone used for every calendar-day bucket in analytics."""

    currency: str = "AED"
    trend_days: int = 30
    top_items_limit: int = 10
    upcoming_window_days: int = 7
    upcoming_limit: int = 10

    def __post_init__(self) -> None:
        if not _PREFIX_PATTERN.match(self.order_number_prefix):
            raise ValueError(
                f"order_number_prefix must be 1-10 upper-case letters/digits, got {self.order_number_prefix!r}"
            )
        resolve_timezone(self.timezone_name)
        if not self.currency or len(self.currency) != 3:
            raise ValueError(f"currency must be an ISO 4217 code, got {self.currency!r}")
        for name in ("trend_days", "top_items_limit", "upcoming_window_days", "upcoming_limit"):
            value = getattr(self, name)
            if not isinstance(value, int) or value < 1:
                raise ValueError(f"{name} must be an integer >= 1, got {value!r}")

    @property
    def tz(self) -> tzinfo:
        return resolve_timezone(self.timezone_name)

    @classmethod
    def from_env(cls, **overrides: object) -> AppSettings:
        """Build from environment variables; keyword overrides win."""

        def _get(attr: str, var: str, default: object) -> object:
            if overrides.get(attr) is not None:
                return overrides[attr]
            return os.environ.get(var, default)

        return cls(
            order_number_prefix=str(_get("order_number_prefix", "ORDER_NUMBER_PREFIX", "FTP")).strip().upper(),
            timezone_name=str(_get("timezone_name", "APP_TIMEZONE", "UTC")).strip(),
            currency=str(_get("currency", "CURRENCY", "AED")).strip().upper(),
            trend_days=int(_get("trend_days", "DASHBOARD_TREND_DAYS", 30)),
            top_items_limit=int(_get("top_items_limit", "DASHBOARD_TOP_ITEMS", 10)),
            upcoming_window_days=int(_get("upcoming_window_days", "UPCOMING_WINDOW_DAYS", 7)),
            upcoming_limit=int(_get("upcoming_limit", "UPCOMING_LIMIT", 10)),
        )


def load_app_settings(**overrides: object) -> AppSettings:
    """Load and validate business settings. Raises ValueError on invalid env/values."""
    return AppSettings.from_env(**overrides)
