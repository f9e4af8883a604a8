"""Command-line argument parsing for the batting average generator."""

from __future__ import annotations

import argparse
from typing import Optional, Sequence


def _positive_int(value: str) -> int:
    """Parse and validate a positive integer CLI value.

    Args:
        value: Raw command-line argument value.

    Returns:
        The validated positive integer.

    Raises:
        argparse.ArgumentTypeError: If value is not a positive integer.
    """
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError("must be an integer") from exc

    if parsed <= 0:
        raise argparse.ArgumentTypeError("must be greater than 0")

    return parsed


def _non_negative_int(value: str) -> int:
    """Parse a CLI integer that may be zero but not negative."""
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError("must be an integer") from exc

    if parsed < 0:
        raise argparse.ArgumentTypeError("must be 0 or greater")

    return parsed


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments for stats generation.

    Returns:
        Parsed CLI arguments describing the issue source, the active roster,
        the rolling window settings and the output destination.
    """
    parser = argparse.ArgumentParser(
        prog="jira-batting-average",
        description=(
            "Generate rolling batting averages and RBI leaderboards for a team "
            "from resolved Jira stories."
        ),
    )

    source = parser.add_argument_group("issue source")
    source.add_argument(
        "--issues-file",
        help="Read resolved issues from a JSON dump instead of querying Jira.",
    )
    source.add_argument(
        "--jql",
        default=None,
        help="JQL used to fetch resolved issues (default: resolved stories in the analyzed period).",
    )
    source.add_argument(
        "--story-points-field",
        default=None,
        help="Jira field id holding story points (default: customfield_10016).",
    )

    roster = parser.add_argument_group("active roster")
    roster.add_argument(
        "--active",
        action="append",
        default=[],
        metavar="NAME",
        help="Active team member display name (repeatable).",
    )
    roster.add_argument(
        "--roster-file",
        help="File with one active team member per line; '#' starts a comment.",
    )

    metrics = parser.add_argument_group("metrics")
    metrics.add_argument(
        "--weeks",
        type=_positive_int,
        default=20,
        help="Number of weekly base windows (default: 20).",
    )
    metrics.add_argument(
        "--rolling-weeks",
        type=_positive_int,
        default=8,
        help="Number of weeks in each rolling average (default: 8).",
    )
    metrics.add_argument(
        "--currency-days",
        type=_non_negative_int,
        default=30,
        help="Days since the last resolution before an assignee is hidden (default: 30).",
    )
    metrics.add_argument(
        "--rbi-grace-weeks",
        type=_positive_int,
        default=8,
        help="Weeks of estimates counted towards RBI (default: 8).",
    )
    metrics.add_argument(
        "--leaders",
        type=_positive_int,
        default=3,
        help="Number of leaders per leaderboard (default: 3).",
    )
    metrics.add_argument(
        "--no-data-first",
        action="store_true",
        help="Rank assignees without recent data first on the batting average leaderboard.",
    )

    parser.add_argument(
        "--format",
        choices=("json", "text"),
        default="json",
        help="Output format (default: json).",
    )
    parser.add_argument(
        "--output",
        help="Write output to this file instead of stdout.",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=("DEBUG", "INFO", "WARNING", "ERROR"),
        help="Logging verbosity (default: WARNING).",
    )

    return parser.parse_args(argv)
