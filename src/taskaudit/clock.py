"""Time helpers shared by age-based checks."""

from datetime import datetime, timezone
from typing import Optional


def as_utc(value: datetime) -> datetime:
    """Return an aware UTC datetime; naive values are taken to be UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def resolve_now(reference_time: Optional[datetime]) -> datetime:
    """Pick the clock for a run: the configured reference time or now."""
    if reference_time is not None:
        return as_utc(reference_time)
    return datetime.now(timezone.utc)


def age_in_days(then: datetime, now: datetime) -> float:
    return (as_utc(now) - as_utc(then)).total_seconds() / 86400.0
