"""UTC instant capture and the injectable clock."""

from collections.abc import Callable
from datetime import datetime

from pytz import utc

Clock = Callable[[], datetime]


def to_instant(dt: datetime) -> datetime:
    """Normalize a datetime to a whole-second UTC instant.

    Naive datetimes are taken to already be in UTC; aware ones are converted.
    """
    if dt.tzinfo is None:
        dt = utc.localize(dt)
    else:
        dt = dt.astimezone(utc)
    return dt.replace(microsecond=0)


def system_clock() -> datetime:
    """Read the current UTC instant from the host clock."""
    return to_instant(datetime.now(utc))


def parse_instant(text: str) -> datetime:
    """Parse an ISO 8601 string ("2024-01-10T02:00:00Z") into an instant."""
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return to_instant(datetime.fromisoformat(text))
