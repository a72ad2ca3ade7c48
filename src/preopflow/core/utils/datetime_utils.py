"""
Date and time utility functions for the circuit service.
"""

from datetime import date, datetime, time, timedelta, timezone
from typing import Optional, Tuple


def get_current_timestamp() -> datetime:
    """Get current UTC timestamp."""
    return datetime.now(timezone.utc)


def ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Attach UTC to naive datetimes (as read back from some stores)."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def day_window(day: date) -> Tuple[datetime, datetime]:
    """Half-open UTC window [start, end) covering one calendar day."""
    start = datetime.combine(day, time.min, tzinfo=timezone.utc)
    return start, start + timedelta(days=1)


def whole_minutes_between(start: datetime, end: datetime) -> int:
    """Whole minutes elapsed from start to end, truncated toward zero."""
    seconds = (ensure_utc(end) - ensure_utc(start)).total_seconds()
    return int(seconds / 60)
