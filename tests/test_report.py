"""Tests for the stats entry point and report rendering."""

import json
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Optional

import pytest

# Add src directory to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from battingavg.config import Config
from battingavg.errors import DataValidationError
from battingavg.models import LeaderboardEntry, NoData, Numeric, Record
from battingavg.report import format_report, generate_stats
from battingavg.windows import get_past_week_windows

NOW = datetime(2026, 3, 18, 12, 0, tzinfo=timezone.utc)


def _record(
    assignee: Optional[str],
    resolved: datetime,
    deviation_days: Optional[int] = 1,
    points: float = 5,
) -> Record:
    estimate = None if deviation_days is None else resolved - timedelta(days=deviation_days)
    return Record(
        key=f"{assignee}-{resolved.isoformat()}",
        assignee=assignee,
        resolution_date=resolved,
        estimated_complete_date=estimate,
        deviation_days=deviation_days,
        point_value=points,
    )


def test_generate_stats_single_record_example():
    """Verify one on-time record yields ratio 1.0 and its points on the RBI board."""
    records = [_record("A", datetime(2026, 3, 1, tzinfo=timezone.utc), deviation_days=1, points=5)]

    report = generate_stats(records, ["A"], now=NOW)

    assert len(report.chartData.labels) == 12
    assert report.chartData.labels[0] == "12/25/2025"
    assert report.chartData.labels[-1] == "3/12/2026"
    assert [dataset.label for dataset in report.chartData.datasets] == ["A", "Team Average"]
    assert report.chartData.datasets[0].data[-1] == Numeric(1.0)
    assert report.chartData.datasets[0].data[0] == NoData()
    assert report.chartData.datasets[1].data[0] == Numeric(0.0)
    assert list(report.leaderboardByRatio) == [
        LeaderboardEntry(assignee="A", score=Numeric(1.0)),
        LeaderboardEntry(assignee="Team Average", score=Numeric(1.0)),
    ]
    assert list(report.leaderboardByPoints) == [LeaderboardEntry(assignee="A", score=5.0)]
    assert report.generatedAt == NOW


def test_generate_stats_stale_estimate_scores_zero_rbi():
    """Verify a hit whose estimate is outside the grace period adds no RBI."""
    records = [_record("A", datetime(2026, 1, 10, tzinfo=timezone.utc)), _record("A", NOW - timedelta(days=3), None)]

    report = generate_stats(records, ["A"], now=NOW)

    assert list(report.leaderboardByPoints) == [LeaderboardEntry(assignee="A", score=0.0)]


def test_generate_stats_excludes_assignees_outside_roster_everywhere():
    """Verify a non-roster assignee appears in no chart or leaderboard output."""
    resolved = datetime(2026, 3, 1, tzinfo=timezone.utc)
    records = [_record("A", resolved), _record("B", resolved, points=40), _record(None, resolved)]

    payload = generate_stats(records, ["A"], now=NOW).to_dict()

    serialized = json.dumps(payload)
    assert '"B"' not in serialized
    assert [dataset["label"] for dataset in payload["chartData"]["datasets"]] == ["A", "Team Average"]


def test_generate_stats_no_data_subject_ranks_last_unless_legacy_policy():
    """Verify the NoData ranking policy is applied to the ratio leaderboard."""
    records = [
        _record("Active", datetime(2026, 3, 1, tzinfo=timezone.utc), deviation_days=1),
        _record("Active", datetime(2026, 3, 2, tzinfo=timezone.utc), deviation_days=1),
        _record("Active", datetime(2026, 3, 3, tzinfo=timezone.utc), deviation_days=8),
        _record("Newest", NOW - timedelta(hours=2), deviation_days=0),
    ]

    default_board = generate_stats(records, ["Active", "Newest"], now=NOW).leaderboardByRatio
    legacy_board = generate_stats(records, ["Active", "Newest"], now=NOW, config=Config(no_data_first=True)).leaderboardByRatio

    assert [entry.assignee for entry in default_board] == ["Active", "Team Average", "Newest"]
    assert default_board[0].score == Numeric(0.667)
    assert default_board[-1].score == NoData()
    assert [entry.assignee for entry in legacy_board] == ["Newest", "Active", "Team Average"]


def test_generate_stats_is_deterministic():
    """Verify identical input produces byte-identical serialized output."""
    records = [
        _record("A", datetime(2026, 3, 1, tzinfo=timezone.utc), 1, 3),
        _record("B", datetime(2026, 2, 20, tzinfo=timezone.utc), 5, 8),
        _record("A", datetime(2026, 2, 1, tzinfo=timezone.utc), None, 2),
    ]

    first = json.dumps(generate_stats(records, ["A", "B"], now=NOW).to_dict(), sort_keys=True)
    second = json.dumps(generate_stats(records, ["A", "B"], now=NOW).to_dict(), sort_keys=True)

    assert first == second


def test_generate_stats_to_dict_shape():
    """Verify the serialized report exposes chart data, leaderboards and timestamp."""
    payload = generate_stats([_record("A", datetime(2026, 3, 1, tzinfo=timezone.utc))], ["A"], now=NOW).to_dict()

    assert set(payload) == {"chartData", "leaderboardByRatio", "leaderboardByPoints", "generatedAt"}
    assert payload["generatedAt"] == "2026-03-18T12:00:00+00:00"
    assert payload["chartData"]["datasets"][0]["data"][0] == "-"
    assert payload["leaderboardByPoints"] == [{"assignee": "A", "score": 5.0}]


def test_generate_stats_empty_records_raises():
    """Verify an empty record set is an explicit input validation failure."""
    with pytest.raises(DataValidationError):
        generate_stats([], ["A"], now=NOW)


def test_generate_stats_naive_resolution_date_raises():
    """Verify records must carry timezone-aware resolution dates."""
    naive = Record(key="T-1", assignee="A", resolution_date=datetime(2026, 3, 1), estimated_complete_date=None, deviation_days=None)

    with pytest.raises(DataValidationError):
        generate_stats([naive], ["A"], now=NOW)


def test_generate_stats_rejects_non_record_items():
    """Verify raw dictionaries are rejected instead of propagating silently."""
    with pytest.raises(DataValidationError):
        generate_stats([{"assignee": "A"}], ["A"], now=NOW)


def test_format_report_contains_leaderboards():
    """Verify the text report lists both leaderboards with formatted scores."""
    records = [_record("A", datetime(2026, 3, 1, tzinfo=timezone.utc), 1, 5)]

    text = format_report(generate_stats(records, ["A"], now=NOW))

    assert "Batting Average Report" in text
    assert "Rolling windows: 12 (12/25/2025 - 3/12/2026)" in text
    assert "1) Batting Average Leaders" in text
    assert "   1. A: 1.000" in text
    assert "2) RBI Leaders" in text
    assert "   1. A: 5" in text


def test_generate_stats_newest_first_windows_match_chronological_run():
    """Verify externally supplied windows are reordered before aggregation."""
    records = [
        _record("A", datetime(2026, 3, 11, tzinfo=timezone.utc) - timedelta(days=3 * index), deviation_days=1)
        for index in range(40)
    ]
    chronological = get_past_week_windows(20, NOW)

    expected = generate_stats(records, ["A"], now=NOW, windows=chronological).to_dict()
    reordered = generate_stats(records, ["A"], now=NOW, windows=list(reversed(chronological))).to_dict()

    assert reordered == expected
    assert reordered["chartData"]["datasets"][0]["data"] == [1.0] * 12
    assert reordered["chartData"]["datasets"][1]["data"] == [1.0] * 12


@pytest.mark.parametrize(
    "overrides",
    [
        {"point_value": -1.0},
        {"point_value": "5"},
        {"deviation_days": 1.5},
        {"deviation_days": "2"},
    ],
)
def test_generate_stats_rejects_invalid_points_and_deviation(overrides):
    """Verify hand-built records with bad points or deviation fail validation."""
    fields = {
        "key": "T-1",
        "assignee": "A",
        "resolution_date": datetime(2026, 3, 1, tzinfo=timezone.utc),
        "estimated_complete_date": None,
        "deviation_days": None,
        "point_value": 3.0,
    }
    fields.update(overrides)

    with pytest.raises(DataValidationError):
        generate_stats([Record(**fields)], ["A"], now=NOW)
