"""Record enrichment for resolved Jira issues.

Estimated completion dates are not a Jira field: engineers put them in the
issue summary as ``M/D`` (for example ``"Checkout redesign 12/18"``). This
module parses that token, resolves its year against the resolution date and
computes the deviation in days used for hit classification.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from .errors import DataValidationError
from .models import Record
from .windows import as_utc

logger = logging.getLogger(__name__)

STORY_ISSUE_TYPE = "Story"

_ESTIMATE_PATTERN = re.compile(r"(?<![\d/])(\d{1,2})/(\d{1,2})(?![\d/])")
_COMPACT_OFFSET_PATTERN = re.compile(r"([+-]\d{2})(\d{2})$")


def parse_jira_datetime(value: Optional[str]) -> Optional[datetime]:
    """Parse Jira ISO8601 timestamps into timezone-aware UTC datetimes.

    Jira emits offsets without a colon (``+0000``); both that form and the
    trailing ``Z`` are normalized before parsing.
    """
    if not value:
        return None

    normalized = value[:-1] + "+00:00" if value.endswith("Z") else value
    normalized = _COMPACT_OFFSET_PATTERN.sub(r"\1:\2", normalized)
    return as_utc(datetime.fromisoformat(normalized))


def extract_completion_date(summary: Optional[str]) -> Optional[str]:
    """Return the first ``M/D`` estimate token found in an issue summary."""
    if not summary:
        return None

    match = _ESTIMATE_PATTERN.search(summary)
    if match is None:
        return None
    return f"{match.group(1)}/{match.group(2)}"


def estimate_for(resolution_date: datetime, raw_estimate: str) -> Optional[Tuple[datetime, int]]:
    """Resolve an ``M/D`` estimate against a resolution date.

    The estimate takes the resolution year, except across a new year:
    resolved in January for a December estimate uses the previous year, and
    resolved in December for a January estimate uses the next year.

    Returns:
        ``(estimated_complete_date, deviation_days)`` where deviation is the
        number of calendar days the resolution came after the estimate, or
        ``None`` when the token is not a valid calendar date.
    """
    month_text, day_text = raw_estimate.split("/")
    month, day = int(month_text), int(day_text)

    resolved = as_utc(resolution_date)
    year = resolved.year
    if resolved.month == 1 and month == 12:
        year -= 1
    elif resolved.month == 12 and month == 1:
        year += 1

    try:
        estimated = datetime(year, month, day, tzinfo=timezone.utc)
    except ValueError:
        return None

    deviation_days = (resolved.date() - estimated.date()).days
    return estimated, deviation_days


def record_from_issue(issue: Mapping[str, Any]) -> Record:
    """Build an enriched ``Record`` from a flat issue payload.

    Expected keys are ``key``, ``summary``, ``issuetype``, ``assignee``,
    ``resolutiondate`` and ``storypoints``.

    Raises:
        DataValidationError: If the resolution date is missing or invalid, or
            the story points are negative or not numeric.
    """
    key = str(issue.get("key") or "")
    try:
        resolution_date = parse_jira_datetime(issue.get("resolutiondate"))
    except (TypeError, ValueError) as exc:
        raise DataValidationError(f"Issue '{key}' has an invalid resolutiondate: {issue.get('resolutiondate')!r}") from exc

    if resolution_date is None:
        raise DataValidationError(f"Issue '{key}' is missing required field 'resolutiondate'.")

    try:
        point_value = float(issue.get("storypoints") or 0)
    except (TypeError, ValueError) as exc:
        raise DataValidationError(f"Issue '{key}' has non-numeric storypoints: {issue.get('storypoints')!r}") from exc
    if point_value < 0:
        raise DataValidationError(f"Issue '{key}' has negative storypoints: {point_value}")

    summary = str(issue.get("summary") or "")
    estimated_complete_date: Optional[datetime] = None
    deviation_days: Optional[int] = None

    raw_estimate = extract_completion_date(summary)
    if raw_estimate is not None:
        estimate = estimate_for(resolution_date, raw_estimate)
        if estimate is None:
            logger.debug(
                "Ignoring invalid estimate in summary",
                extra={"issue_key": key, "raw_estimate": raw_estimate},
            )
        else:
            estimated_complete_date, deviation_days = estimate

    return Record(
        key=key,
        assignee=issue.get("assignee") or None,
        resolution_date=resolution_date,
        estimated_complete_date=estimated_complete_date,
        deviation_days=deviation_days,
        point_value=point_value,
        issue_type=str(issue.get("issuetype") or ""),
        summary=summary,
    )


def stories_with_estimates(issues: Iterable[Mapping[str, Any]], issue_type: str = STORY_ISSUE_TYPE) -> List[Record]:
    """Enrich every issue of ``issue_type`` with its estimate and deviation.

    Stories without an estimate are kept with ``deviation_days=None``; they
    count towards totals but never as hits.
    """
    records = [record_from_issue(issue) for issue in issues if issue.get("issuetype") == issue_type]

    logger.info(
        "Enriched resolved issues",
        extra={
            "issue_type": issue_type,
            "records": len(records),
            "records_with_estimate": sum(1 for record in records if record.deviation_days is not None),
        },
    )

    return records


def group_by_assignee(records: Sequence[Record]) -> Dict[str, List[Record]]:
    """Group records by assignee in first-seen order, skipping unassigned ones."""
    grouped: Dict[str, List[Record]] = {}
    for record in records:
        if not record.assignee:
            continue
        grouped.setdefault(record.assignee, []).append(record)
    return grouped
