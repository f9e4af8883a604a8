"""Rolling batting averages per assignee and for the whole team.

Business logic:
- Only assignees in the active roster are considered.
- An individual must have resolved an issue within the currency period
  (30 days by default) to appear at all.
- An individual rolling point without any resolved issue is ``NoData``;
  the pooled team average reports ``0.0`` for the same situation.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import List, Mapping, Sequence

from .aggregator import batting_ratio
from .models import AggregateResult, NoData, Numeric, Record, Window, WindowAverage
from .windows import as_utc

logger = logging.getLogger(__name__)

TEAM_AVERAGE_LABEL = "Team Average"


def is_user_current(records: Sequence[Record], now: datetime, currency_days: int = 30) -> bool:
    """Check whether the latest resolved record is at most ``currency_days`` old.

    Ages are compared in whole UTC calendar days, so a record resolved exactly
    ``currency_days`` days ago still counts as current.
    """
    if not records:
        return False

    latest = max(as_utc(record.resolution_date) for record in records)
    age_days = (as_utc(now).date() - latest.date()).days
    return age_days <= currency_days


def build_person_averages(
    records_by_assignee: Mapping[str, Sequence[Record]],
    roster: Sequence[str],
    spans: Sequence[Window],
    now: datetime,
    currency_days: int = 30,
) -> List[AggregateResult]:
    """Compute rolling batting values for every active and current assignee.

    Assignees are emitted in roster order. Roster members without records, and
    members whose latest resolution is older than ``currency_days``, are
    silently skipped.
    """
    results: List[AggregateResult] = []

    for assignee in dict.fromkeys(roster):
        person_records = records_by_assignee.get(assignee)
        if not person_records:
            continue
        if not is_user_current(person_records, now, currency_days):
            logger.debug(
                "Skipping assignee without a recent resolution",
                extra={"assignee": assignee, "currency_days": currency_days},
            )
            continue

        averages = []
        for span in spans:
            has_records = any(span.contains(record.resolution_date) for record in person_records)
            if has_records:
                value = Numeric(batting_ratio(person_records, span.start, span.end))
            else:
                value = NoData()
            averages.append(WindowAverage(start=span.start, end=span.end, value=value))

        results.append(AggregateResult(assignee=assignee, averages=tuple(averages)))

    logger.info(
        "Built individual batting averages",
        extra={"roster_size": len(roster), "assignees_reported": len(results), "rolling_points": len(spans)},
    )

    return results


def build_team_average(
    records_by_assignee: Mapping[str, Sequence[Record]],
    roster: Sequence[str],
    spans: Sequence[Window],
) -> AggregateResult:
    """Compute the pooled team batting average over all active-roster records.

    No currency check is applied, and empty spans yield ``Numeric(0.0)``.
    """
    team_records: List[Record] = []
    for assignee in dict.fromkeys(roster):
        team_records.extend(records_by_assignee.get(assignee, ()))

    averages = tuple(
        WindowAverage(
            start=span.start,
            end=span.end,
            value=Numeric(batting_ratio(team_records, span.start, span.end)),
        )
        for span in spans
    )

    return AggregateResult(assignee=TEAM_AVERAGE_LABEL, averages=averages)
