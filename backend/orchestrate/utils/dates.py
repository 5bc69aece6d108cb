from datetime import date, datetime, time, timedelta, timezone
from typing import Optional, Tuple


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Normalize to the naive UTC datetimes stored in the database."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def day_bounds(day: date) -> Tuple[datetime, datetime]:
    """Return the half-open [start, end) range covering one calendar day."""
    start = datetime.combine(day, time.min)
    return start, start + timedelta(days=1)
