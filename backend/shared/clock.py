"""
Time source injection.

Components that make time-based decisions (rate-limit windows, ride expiry)
take a Clock so tests can drive time deterministically.
"""

from datetime import datetime, timezone
from typing import Callable

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Default clock: the current UTC time."""
    return datetime.now(timezone.utc)


def to_utc(value: datetime) -> datetime:
    """Return an aware UTC datetime; naive values are assumed to be UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_storage(value: datetime) -> str:
    """
    Serialize a datetime for the document store.

    Always UTC with microseconds so stored values compare correctly as
    strings as well as timestamps.
    """
    return to_utc(value).isoformat(timespec="microseconds")


def from_storage(value: str | datetime) -> datetime:
    """Parse a stored timestamp back into an aware UTC datetime."""
    if isinstance(value, datetime):
        return to_utc(value)
    return to_utc(datetime.fromisoformat(value.replace("Z", "+00:00")))
