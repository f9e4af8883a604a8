"""Hit/miss classification of resolved issues.

An issue is a "hit" when it was resolved at most two days after its estimated
completion date and less than ten days before it. The bounds are asymmetric on
purpose and are not configurable.
"""

from __future__ import annotations

from typing import Optional

from .models import Record

LATE_LIMIT_DAYS = 3
EARLY_LIMIT_DAYS = -10


def is_success(deviation_days: Optional[int]) -> bool:
    """Return ``True`` when ``EARLY_LIMIT_DAYS < deviation_days < LATE_LIMIT_DAYS``.

    Issues without an estimate (``None``) are never a success.
    """
    if deviation_days is None:
        return False
    return EARLY_LIMIT_DAYS < deviation_days < LATE_LIMIT_DAYS


def is_hit(record: Record) -> bool:
    return is_success(record.deviation_days)
