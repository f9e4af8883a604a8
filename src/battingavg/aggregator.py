"""Windowed batting ratio computation.

This module provides the numeric kernel shared by the individual and team
averages:
- ``batting_ratio`` computes the hit ratio of records resolved in a window.
- ``rolling_windows`` derives the trailing rolling spans from weekly windows.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Sequence

from .classifier import is_hit
from .errors import ConfigurationError
from .models import Record, Window
from .windows import filter_by_date_range

RATIO_DIGITS = 3


def batting_ratio(records: Sequence[Record], start: datetime, end: datetime) -> float:
    """Calculate the hit ratio of records resolved within ``[start, end)``.

    Returns ``0.0`` when no record falls in the range. The ratio is rounded to
    three decimal places.
    """
    in_range = filter_by_date_range(start, end, records)
    if not in_range:
        return 0.0

    hits = sum(1 for record in in_range if is_hit(record))
    return round(hits / len(in_range), RATIO_DIGITS)


def rolling_windows(windows: Sequence[Window], number_of_windows: int, rolling_span: int) -> List[Window]:
    """Build trailing rolling windows over weekly windows.

    Base windows are put in chronological order first, so newest-first input
    yields the same spans. Point ``i`` spans ``[windows[i].start, windows[rolling_span - 1 + i].end)``
    for ``i`` in ``range(number_of_windows - rolling_span)``.

    Raises:
        ConfigurationError: If the span does not fit inside the base windows.
    """
    if not 0 < rolling_span < number_of_windows:
        raise ConfigurationError(
            f"Rolling span {rolling_span} must be between 1 and {number_of_windows - 1}."
        )
    if len(windows) < number_of_windows:
        raise ConfigurationError(
            f"Expected at least {number_of_windows} base windows, got {len(windows)}."
        )

    ordered = sorted(windows, key=lambda window: window.start)
    return [
        Window(start=ordered[index].start, end=ordered[rolling_span - 1 + index].end)
        for index in range(number_of_windows - rolling_span)
    ]
