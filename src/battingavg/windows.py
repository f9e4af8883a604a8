"""Weekly calendar windows and date-range helpers.

Windows are always returned oldest first. The newest window ends at the UTC
midnight that follows ``now`` so that everything resolved today is covered.
"""

from __future__ import annotations

from datetime import datetime, time, timedelta, timezone
from typing import Iterable, List, Optional

from .models import Record, Window

WEEK = timedelta(days=7)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Return ``value`` as an aware UTC datetime, treating naive values as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def get_past_week_windows(count: int, now: Optional[datetime] = None) -> List[Window]:
    """Build ``count`` consecutive weekly windows ending after ``now``.

    Args:
        count: Number of weeks to generate.
        now: Reference time; defaults to the current UTC time.

    Returns:
        Chronological list of half-open ``Window`` instances.

    Raises:
        ValueError: If ``count`` is negative.
    """
    if count < 0:
        raise ValueError("Window 'count' must be a non-negative integer.")

    reference = as_utc(now or utc_now())
    last_end = datetime.combine(reference.date() + timedelta(days=1), time(0), tzinfo=timezone.utc)

    windows: List[Window] = []
    for weeks_back in range(count, 0, -1):
        end = last_end - WEEK * (weeks_back - 1)
        windows.append(Window(start=end - WEEK, end=end))

    return windows


def filter_by_date_range(start: datetime, end: datetime, records: Iterable[Record]) -> List[Record]:
    """Return records resolved within ``[start, end)`` in their original order."""
    return [record for record in records if start <= record.resolution_date < end]


def format_label(moment: datetime) -> str:
    """Format a window boundary as an ``M/D/YYYY`` chart label."""
    return f"{moment.month}/{moment.day}/{moment.year}"
