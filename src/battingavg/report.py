"""Stats generation and report rendering.

This module provides:
- ``generate_stats``, the single entry point that turns enriched records and
  the active roster into chart data and leaderboards.
- ``format_report``, a human-readable rendering of both leaderboards.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import List, Optional, Sequence

from .aggregator import rolling_windows
from .averages import build_person_averages, build_team_average
from .chart import build_chart_data
from .config import Config
from .errors import DataValidationError
from .leaderboard import top_batting_averages, top_runs_batted_in
from .models import LeaderboardEntry, NoData, Numeric, Record, StatsReport, Window
from .stories import group_by_assignee
from .windows import as_utc, get_past_week_windows, utc_now

logger = logging.getLogger(__name__)


def _validate_records(records: Sequence[Record]) -> None:
    if not records:
        raise DataValidationError("No resolved records were provided; cannot compute batting averages.")

    for index, record in enumerate(records):
        if not isinstance(record, Record):
            raise DataValidationError(f"Record at index {index} is not a Record: {type(record).__name__}")
        if not isinstance(record.resolution_date, datetime) or record.resolution_date.tzinfo is None:
            raise DataValidationError(
                f"Record '{record.key}' requires a timezone-aware resolution_date, got {record.resolution_date!r}"
            )
        if isinstance(record.point_value, bool) or not isinstance(record.point_value, (int, float)):
            raise DataValidationError(f"Record '{record.key}' has non-numeric point_value: {record.point_value!r}")
        if record.point_value < 0:
            raise DataValidationError(f"Record '{record.key}' has negative point_value: {record.point_value}")
        deviation = record.deviation_days
        if deviation is not None and (isinstance(deviation, bool) or not isinstance(deviation, int)):
            raise DataValidationError(
                f"Record '{record.key}' requires an integer or missing deviation_days, got {deviation!r}"
            )


def generate_stats(
    records: Sequence[Record],
    roster: Sequence[str],
    now: Optional[datetime] = None,
    config: Optional[Config] = None,
    windows: Optional[Sequence[Window]] = None,
) -> StatsReport:
    """Compute rolling batting averages, leaderboards and chart data.

    Args:
        records: Resolved and enriched records.
        roster: Active team members, in display order.
        now: Reference time; defaults to the current UTC time.
        config: Metric settings; defaults to ``Config()``.
        windows: Chronological weekly windows; generated from ``now`` when omitted.

    Returns:
        A ``StatsReport`` holding chart data and both leaderboards.

    Raises:
        DataValidationError: If ``records`` is empty or malformed.
    """
    _validate_records(records)

    settings = config or Config()
    reference = as_utc(now or utc_now())
    base_windows = list(windows) if windows is not None else get_past_week_windows(settings.number_of_windows, reference)
    spans = rolling_windows(base_windows, settings.number_of_windows, settings.rolling_span)

    records_by_assignee = group_by_assignee(records)

    averages = build_person_averages(
        records_by_assignee,
        roster,
        spans,
        now=reference,
        currency_days=settings.currency_days,
    )
    averages.append(build_team_average(records_by_assignee, roster, spans))

    leaders_by_ratio = top_batting_averages(
        averages,
        size=settings.leaderboard_size,
        no_data_first=settings.no_data_first,
    )
    leaders_by_points = top_runs_batted_in(
        records_by_assignee,
        roster,
        now=reference,
        grace_weeks=settings.rbi_grace_weeks,
        size=settings.leaderboard_size,
    )

    logger.info(
        "Generated batting stats",
        extra={
            "records": len(records),
            "assignees": len(records_by_assignee),
            "subjects_charted": len(averages),
            "rolling_points": len(spans),
        },
    )

    return StatsReport(
        chartData=build_chart_data(averages),
        leaderboardByRatio=tuple(leaders_by_ratio),
        leaderboardByPoints=tuple(leaders_by_points),
        generatedAt=reference,
    )


def format_score(score: object) -> str:
    """Format a leaderboard score for display."""
    if isinstance(score, NoData):
        return "n/a"
    if isinstance(score, Numeric):
        return f"{score.value:.3f}"
    return f"{score:g}"


def _leaderboard_lines(entries: Sequence[LeaderboardEntry]) -> List[str]:
    if not entries:
        return ["   (no qualifying assignees)"]
    return [f"   {rank}. {entry.assignee}: {format_score(entry.score)}" for rank, entry in enumerate(entries, start=1)]


def format_report(report: StatsReport) -> str:
    """Generate a human-readable leaderboard report."""
    labels = report.chartData.labels
    period = f"{labels[0]} - {labels[-1]}" if labels else "n/a"

    lines = [
        "Batting Average Report",
        f"Generated: {report.generatedAt.isoformat()}",
        f"Rolling windows: {len(labels)} ({period})",
        "",
        "1) Batting Average Leaders",
        *_leaderboard_lines(report.leaderboardByRatio),
        "",
        "2) RBI Leaders",
        *_leaderboard_lines(report.leaderboardByPoints),
    ]

    return "\n".join(lines)
