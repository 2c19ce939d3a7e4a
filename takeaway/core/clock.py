"""Business-day helpers: every calendar bucket uses the single configured time zone."""
from __future__ import annotations

from datetime import date, datetime, timedelta, timezone, tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


def resolve_timezone(name: str) -> tzinfo:
    """Return the IANA zone *name*; raises ValueError for unknown names."""
    if name.upper() == "UTC":
        return timezone.utc
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValueError(f"Unknown time zone {name!r}") from exc


def now_in(tz: tzinfo) -> datetime:
    return datetime.now(tz)


def local_date(moment: datetime, tz: tzinfo) -> date:
    """Calendar date of *moment* in *tz*. Naive datetimes are taken as UTC."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(tz).date()


def trailing_days(end: date, count: int) -> list[date]:
    """*count* consecutive dates ending with *end*, oldest first."""
    return [end - timedelta(days=offset) for offset in range(count - 1, -1, -1)]
