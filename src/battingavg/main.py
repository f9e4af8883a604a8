"""Entry point orchestrating issue loading, stats generation and output."""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from .cli import parse_args
from .config import load_config, load_jira_settings
from .errors import ApiError, AuthenticationError, ConfigurationError, DataValidationError
from .jira_client import JiraClient
from .report import format_report, generate_stats
from .stories import stories_with_estimates

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_UNEXPECTED = 1
EXIT_INVALID_INPUT = 2
EXIT_AUTHENTICATION = 3
EXIT_API = 4

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def configure_logging(level: str = "WARNING") -> None:
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)


def default_jql(weeks: int) -> str:
    return f"issuetype = Story AND resolution IS NOT EMPTY AND resolved >= -{weeks}w ORDER BY resolved ASC"


def load_roster(names: Sequence[str], roster_file: Optional[str]) -> List[str]:
    """Combine ``--active`` names and roster file entries, keeping first-seen order.

    Raises:
        ConfigurationError: If the roster file cannot be read or no member is given.
    """
    members: List[str] = [name.strip() for name in names if name.strip()]

    if roster_file:
        try:
            content = Path(roster_file).read_text(encoding="utf-8")
        except OSError as exc:
            raise ConfigurationError(f"Unable to read roster file '{roster_file}': {exc}") from exc

        for line in content.splitlines():
            name = line.split("#", 1)[0].strip()
            if name:
                members.append(name)

    if not members:
        raise ConfigurationError("No active roster given. Use --active NAME or --roster-file PATH.")

    return list(dict.fromkeys(members))


def load_issues_file(path: str) -> List[Dict[str, Any]]:
    """Read a JSON issue dump: either a list of issues or ``{"issues": [...]}``.

    Raises:
        DataValidationError: If the file is unreadable or has the wrong shape.
    """
    try:
        payload = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        raise DataValidationError(f"Unable to read issues file '{path}': {exc}") from exc

    if isinstance(payload, dict):
        payload = payload.get("issues")

    if not isinstance(payload, list) or not all(isinstance(item, dict) for item in payload):
        raise DataValidationError(f"Issues file '{path}' must contain a list of issue objects.")

    return payload


def write_output(text: str, output: Optional[str]) -> None:
    if output is None:
        print(text)
        return

    try:
        Path(output).write_text(text + "\n", encoding="utf-8")
    except OSError as exc:
        raise ConfigurationError(f"Unable to write output file '{output}': {exc}") from exc


def orchestrate_stats_generation(argv: Optional[Sequence[str]] = None) -> int:
    """Run the end-to-end stats generation and return a process exit code.

    Exit codes:
        0 on success, 1 on unexpected errors, 2 on configuration or input
        validation errors, 3 on authentication errors, 4 on Jira API errors.
    """
    try:
        args = parse_args(argv)
        configure_logging(args.log_level)

        config = load_config(
            number_of_windows=args.weeks,
            rolling_span=args.rolling_weeks,
            currency_days=args.currency_days,
            rbi_grace_weeks=args.rbi_grace_weeks,
            leaderboard_size=args.leaders,
            no_data_first=args.no_data_first,
        )
        roster = load_roster(args.active, args.roster_file)

        if args.issues_file:
            issues = load_issues_file(args.issues_file)
        else:
            settings = load_jira_settings(story_points_field=args.story_points_field)
            client = JiraClient(settings=settings)
            print(f"Fetching resolved issues from {settings.base_url}...", file=sys.stderr)
            issues = client.search_resolved_issues(args.jql or default_jql(config.number_of_windows))

        records = stories_with_estimates(issues)
        report = generate_stats(records, roster, config=config)

        if args.format == "text":
            write_output(format_report(report), args.output)
        else:
            write_output(json.dumps(report.to_dict(), indent=2), args.output)

        return EXIT_OK
    except (ConfigurationError, DataValidationError) as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return EXIT_INVALID_INPUT
    except AuthenticationError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return EXIT_AUTHENTICATION
    except ApiError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return EXIT_API
    except Exception:
        logger.exception("Unexpected error during stats generation")
        return EXIT_UNEXPECTED


def main() -> None:
    raise SystemExit(orchestrate_stats_generation())


if __name__ == "__main__":
    main()
