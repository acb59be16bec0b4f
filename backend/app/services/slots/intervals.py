# backend/app/services/slots/intervals.py
"""
Time helpers shared by the window resolver, slot generator and validator.

All values are naive datetimes in the salon's local wall-clock time.
"""

from datetime import date, datetime, time, timedelta


def hhmm_to_minutes(value) -> int:
    """
    Convert "HH:MM" (or "HH:MM:SS") to minutes since midnight.

    Missing or malformed values give 0 (midnight), never an error.
    """
    raw = str(value or "00:00")[:5]
    parts = raw.split(":")[:2]
    if len(parts) < 2:
        return 0
    try:
        hours = int(parts[0] or 0)
        minutes = int(parts[1] or 0)
    except ValueError:
        return 0
    if hours < 0 or minutes < 0:
        return 0
    return hours * 60 + minutes


def minutes_to_time_str(minutes: int) -> str:
    """Convert minutes since midnight to "HH:MM"."""
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def day_of(value) -> date:
    """Date part of a date or datetime."""
    if isinstance(value, datetime):
        return value.date()
    return value


def combine_date_time(day, hhmm) -> datetime:
    """Anchor "HH:MM" onto a calendar day (local wall clock)."""
    midnight = datetime.combine(day_of(day), time.min)
    return midnight + timedelta(minutes=hhmm_to_minutes(hhmm))


def weekday_index(day) -> int:
    """Weekday with 0 = Sunday .. 6 = Saturday."""
    return (day_of(day).weekday() + 1) % 7


def overlaps(start: datetime, end: datetime, other_start: datetime, other_end: datetime) -> bool:
    """Half-open interval intersection: [start, end) vs [other_start, other_end)."""
    return start < other_end and end > other_start


def to_wall_clock(value: datetime) -> datetime:
    """Drop tzinfo, keeping the wall-clock reading."""
    if value.tzinfo is not None:
        return value.replace(tzinfo=None)
    return value


def parse_timestamp(value) -> datetime | None:
    """
    Parse a datetime or ISO-8601 string into a naive wall-clock datetime.

    Returns None for anything that is not a usable timestamp.
    """
    if isinstance(value, datetime):
        return to_wall_clock(value)
    if not isinstance(value, str) or not value.strip():
        return None

    raw = value.strip()
    if raw.endswith("Z"):
        raw = raw[:-1] + "+00:00"
    try:
        return to_wall_clock(datetime.fromisoformat(raw))
    except ValueError:
        return None


def epoch_ms_to_datetime(ms: int | float) -> datetime:
    """Epoch milliseconds -> naive local datetime."""
    return datetime.fromtimestamp(ms / 1000)


def snap_datetime(value: datetime, step_minutes: int = 10) -> datetime:
    """
    Round to the nearest multiple of step_minutes within the hour.

    Used for calendar drag/resize: 10:04 -> 10:00, 10:05 -> 10:10.
    Seconds and microseconds are cleared.
    """
    snapped = (value.minute + step_minutes / 2) // step_minutes * step_minutes
    base = value.replace(minute=0, second=0, microsecond=0)
    return base + timedelta(minutes=int(snapped))
