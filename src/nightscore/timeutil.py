from datetime import UTC, date, datetime, time, timedelta, tzinfo
from typing import Any


def ensure_aware(dt: datetime) -> datetime:
    """Attach UTC to naive datetimes; aware ones are returned unchanged."""
    return dt.replace(tzinfo=UTC) if dt.tzinfo is None else dt


def parse_timestamp(value: Any) -> datetime:
    """Parse ISO-8601 strings (``Z`` suffix allowed), epoch seconds or datetimes."""
    if isinstance(value, datetime):
        return ensure_aware(value)
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(float(value), tz=UTC)
    if isinstance(value, str):
        s = value.strip()
        if s.endswith("Z"):
            s = s[:-1] + "+00:00"
        return ensure_aware(datetime.fromisoformat(s))
    raise TypeError(f"Unsupported time type: {type(value)}")


def local_day(ts: datetime, zone: tzinfo) -> date:
    return ensure_aware(ts).astimezone(zone).date()


def start_of_day(day: date, zone: tzinfo) -> datetime:
    return datetime.combine(day, time.min, tzinfo=zone)


def lookback_window(now: datetime, zone: tzinfo, days: int = 7) -> tuple[datetime, datetime]:
    """Return (start, end) covering ``days`` calendar days ending with today.

    start is local midnight ``days - 1`` days before today, end is ``now``.
    """
    today = local_day(now, zone)
    first = today - timedelta(days=max(1, days) - 1)
    return start_of_day(first, zone), ensure_aware(now)
