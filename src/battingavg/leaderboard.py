"""Leaderboards ranked by batting average and by runs batted in (RBI).

The batting average leaderboard ranks subjects by the value of their most
recent rolling point. The RBI leaderboard sums story points of recent hits.
Both sorts are stable, so ties keep the input order.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import List, Mapping, Sequence, Tuple

from .classifier import is_hit
from .models import AggregateResult, LeaderboardEntry, NoData, Record
from .windows import as_utc

logger = logging.getLogger(__name__)

DEFAULT_LEADERBOARD_SIZE = 3
DEFAULT_GRACE_WEEKS = 8


def _ratio_sort_key(result: AggregateResult, no_data_first: bool) -> Tuple[int, float]:
    value = result.last_value
    if isinstance(value, NoData):
        return (0 if no_data_first else 2, 0.0)
    return (1, -value.value)


def sort_by_last_average(results: Sequence[AggregateResult], no_data_first: bool = False) -> List[AggregateResult]:
    """Sort subjects by their last rolling value, highest first.

    Subjects whose last value is ``NoData`` rank after every numeric value,
    or before all of them when ``no_data_first`` is set.
    """
    return sorted(results, key=lambda result: _ratio_sort_key(result, no_data_first))


def top_batting_averages(
    results: Sequence[AggregateResult],
    size: int = DEFAULT_LEADERBOARD_SIZE,
    no_data_first: bool = False,
) -> List[LeaderboardEntry]:
    """Return the top ``size`` subjects with their raw last rolling value."""
    ranked = sort_by_last_average(results, no_data_first=no_data_first)
    return [LeaderboardEntry(assignee=result.assignee, score=result.last_value) for result in ranked[:size]]


def completed_in_past_weeks(estimated_complete_date: datetime, now: datetime, weeks: int = DEFAULT_GRACE_WEEKS) -> bool:
    """Check whether an estimated completion date falls after ``now - weeks``."""
    return as_utc(estimated_complete_date) > as_utc(now) - timedelta(weeks=weeks)


def runs_batted_in(records: Sequence[Record], now: datetime, grace_weeks: int = DEFAULT_GRACE_WEEKS) -> float:
    """Sum point values of hits whose estimate lies within the grace period."""
    total = 0.0
    for record in records:
        if not is_hit(record) or record.estimated_complete_date is None:
            continue
        if completed_in_past_weeks(record.estimated_complete_date, now, grace_weeks):
            total += record.point_value
    return total


def top_runs_batted_in(
    records_by_assignee: Mapping[str, Sequence[Record]],
    roster: Sequence[str],
    now: datetime,
    grace_weeks: int = DEFAULT_GRACE_WEEKS,
    size: int = DEFAULT_LEADERBOARD_SIZE,
) -> List[LeaderboardEntry]:
    """Rank active-roster assignees by RBI and return the top ``size``.

    No currency check applies here; every active assignee with records is
    ranked, including those scoring ``0``.
    """
    scored = [
        LeaderboardEntry(assignee=assignee, score=runs_batted_in(records_by_assignee[assignee], now, grace_weeks))
        for assignee in dict.fromkeys(roster)
        if assignee in records_by_assignee
    ]
    ranked = sorted(scored, key=lambda entry: entry.score, reverse=True)

    logger.debug(
        "Ranked assignees by RBI",
        extra={"assignees_ranked": len(ranked), "grace_weeks": grace_weeks},
    )

    return ranked[:size]
