from __future__ import annotations

from datetime import UTC, datetime, timedelta


def now_utc() -> datetime:
    return datetime.now(UTC)


def start_of_utc_day(dt: datetime) -> datetime:
    """Midnight (UTC) of the calendar day containing ``dt``.

    Naive datetimes are assumed to already be UTC.
    """
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC).replace(hour=0, minute=0, second=0, microsecond=0)


def visible_after(dt: datetime, seconds: int) -> datetime:
    return dt + timedelta(seconds=seconds)
