"""Tests for the windowed batting ratio kernel and rolling windows."""

import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Optional

import pytest

# Add src directory to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from battingavg.aggregator import batting_ratio, rolling_windows
from battingavg.errors import ConfigurationError
from battingavg.models import Record
from battingavg.windows import get_past_week_windows

START = datetime(2026, 3, 1, tzinfo=timezone.utc)
END = datetime(2026, 3, 8, tzinfo=timezone.utc)


def _record(resolved: datetime, deviation_days: Optional[int]) -> Record:
    return Record(
        key="T-1",
        assignee="A",
        resolution_date=resolved,
        estimated_complete_date=None,
        deviation_days=deviation_days,
    )


def test_batting_ratio_empty_range_returns_zero():
    """Verify an empty filtered subset yields exactly 0.0 instead of raising."""
    outside = [_record(END + timedelta(days=1), 0)]

    assert batting_ratio([], START, END) == 0.0
    assert batting_ratio(outside, START, END) == 0.0


def test_batting_ratio_rounds_to_three_decimals():
    """Verify the ratio counts hits over total and rounds to three places."""
    records = [
        _record(START + timedelta(days=1), 0),
        _record(START + timedelta(days=2), 1),
        _record(START + timedelta(days=3), 5),
    ]

    assert batting_ratio(records, START, END) == 0.667


def test_batting_ratio_counts_missing_estimates_as_misses():
    """Verify records without estimate stay in the denominator."""
    records = [_record(START, 1), _record(START, None)]

    assert batting_ratio(records, START, END) == 0.5


def test_batting_ratio_single_hit_is_one():
    """Verify a single on-time record produces a ratio of 1.0."""
    assert batting_ratio([_record(START + timedelta(hours=5), 1)], START, END) == 1.0


def test_rolling_windows_count_is_windows_minus_span():
    """Verify the number of rolling points is number_of_windows - rolling_span."""
    windows = get_past_week_windows(20, datetime(2026, 3, 18, tzinfo=timezone.utc))

    assert len(rolling_windows(windows, 20, 8)) == 12
    assert len(rolling_windows(windows, 20, 1)) == 19
    assert len(rolling_windows(windows, 10, 4)) == 6


def test_rolling_windows_span_consecutive_base_windows():
    """Verify point i covers windows[i].start through windows[span - 1 + i].end."""
    windows = get_past_week_windows(20, datetime(2026, 3, 18, tzinfo=timezone.utc))

    spans = rolling_windows(windows, 20, 8)

    assert spans[0].start == windows[0].start
    assert spans[0].end == windows[7].end
    assert spans[-1].start == windows[11].start
    assert spans[-1].end == windows[18].end
    for span in spans:
        assert span.end - span.start == timedelta(weeks=8)


@pytest.mark.parametrize("number_of_windows, rolling_span", [(20, 0), (20, 20), (8, 10)])
def test_rolling_windows_invalid_span_raises(number_of_windows, rolling_span):
    """Verify spans that do not fit inside the base windows are rejected."""
    windows = get_past_week_windows(20, datetime(2026, 3, 18, tzinfo=timezone.utc))

    with pytest.raises(ConfigurationError):
        rolling_windows(windows, number_of_windows, rolling_span)


def test_rolling_windows_too_few_base_windows_raises():
    """Verify fewer base windows than requested is a configuration error."""
    windows = get_past_week_windows(5, datetime(2026, 3, 18, tzinfo=timezone.utc))

    with pytest.raises(ConfigurationError):
        rolling_windows(windows, 20, 8)


def test_rolling_windows_newest_first_input_matches_chronological():
    """Verify base windows given newest first produce the same rolling spans."""
    windows = get_past_week_windows(20, datetime(2026, 3, 18, tzinfo=timezone.utc))

    assert rolling_windows(list(reversed(windows)), 20, 8) == rolling_windows(windows, 20, 8)
