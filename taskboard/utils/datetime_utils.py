from datetime import date, datetime, timedelta, time
from typing import Optional, Union

import pytz

UTC = pytz.utc


def utcnow() -> datetime:
    return datetime.now(UTC)


def local_now(tz=None) -> datetime:
    return datetime.now(tz or UTC)


def to_local(dt: datetime, tz=None) -> datetime:
    """Convert to tz; naive values are taken as UTC"""
    if dt.tzinfo is None:
        dt = UTC.localize(dt)
    return dt.astimezone(tz or UTC)


def format_timestamp(dt: datetime) -> str:
    return to_local(dt, UTC).isoformat(timespec="microseconds")


def parse_due_date(value: Union[str, date, datetime, None]) -> Optional[date]:
    """Accepts YYYY-MM-DD or a full ISO datetime (date part kept).

    Empty values give None; anything else unparsable raises ValueError.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise ValueError(f"Invalid date '{value}'. Use YYYY-MM-DD.")

    text = value.strip()
    if not text:
        return None
    try:
        return date.fromisoformat(text)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(text.replace('Z', '+00:00')).date()
    except ValueError as e:
        raise ValueError(f"Invalid date '{value}'. Use YYYY-MM-DD.") from e


def start_of_day(day: date, tz=None) -> datetime:
    tz = tz or UTC
    naive = datetime.combine(day, time.min)
    if hasattr(tz, "localize"):
        return tz.localize(naive)
    return naive.replace(tzinfo=tz)


def start_of_week(day: date, week_start: int = 6) -> date:
    return day - timedelta(days=(day.weekday() - week_start) % 7)
