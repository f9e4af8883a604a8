"""Configuration parsing and validation for the batting average generator."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from .errors import AuthenticationError, ConfigurationError

DEFAULT_STORY_POINTS_FIELD = "customfield_10016"


@dataclass(frozen=True)
class JiraSettings:
    """Validated Jira connection settings used to fetch resolved issues."""

    base_url: str
    email: str
    token: str
    story_points_field: str = DEFAULT_STORY_POINTS_FIELD


@dataclass(frozen=True)
class Config:
    """Validated runtime settings used by the metric builders."""

    number_of_windows: int = 20
    rolling_span: int = 8
    currency_days: int = 30
    rbi_grace_weeks: int = 8
    leaderboard_size: int = 3
    no_data_first: bool = False

    @property
    def rolling_points(self) -> int:
        return self.number_of_windows - self.rolling_span


def load_config(
    number_of_windows: int = 20,
    rolling_span: int = 8,
    currency_days: int = 30,
    rbi_grace_weeks: int = 8,
    leaderboard_size: int = 3,
    no_data_first: bool = False,
) -> Config:
    """Build and validate metric configuration.

    Args:
        number_of_windows: Number of weekly base windows to generate.
        rolling_span: Number of consecutive base windows per rolling point.
        currency_days: Maximum age in days of an assignee's latest resolution.
        rbi_grace_weeks: Trailing weeks in which an estimate counts for RBI.
        leaderboard_size: Number of leaders returned per leaderboard.
        no_data_first: Rank subjects without data first on the ratio leaderboard.

    Returns:
        A validated ``Config`` instance.

    Raises:
        ConfigurationError: If any window or threshold value is out of range.
    """
    if number_of_windows <= 0:
        raise ConfigurationError("Invalid value for 'number_of_windows': expected an integer greater than 0.")
    if not 0 < rolling_span < number_of_windows:
        raise ConfigurationError(
            "Invalid value for 'rolling_span': expected an integer greater than 0 "
            f"and smaller than number_of_windows ({number_of_windows})."
        )
    if currency_days < 0:
        raise ConfigurationError("Invalid value for 'currency_days': expected a non-negative integer.")
    if rbi_grace_weeks <= 0:
        raise ConfigurationError("Invalid value for 'rbi_grace_weeks': expected an integer greater than 0.")
    if leaderboard_size <= 0:
        raise ConfigurationError("Invalid value for 'leaderboard_size': expected an integer greater than 0.")

    return Config(
        number_of_windows=number_of_windows,
        rolling_span=rolling_span,
        currency_days=currency_days,
        rbi_grace_weeks=rbi_grace_weeks,
        leaderboard_size=leaderboard_size,
        no_data_first=no_data_first,
    )


def load_jira_settings(story_points_field: Optional[str] = None) -> JiraSettings:
    """Read Jira connection settings from the environment.

    Raises:
        ConfigurationError: If ``JIRA_BASE_URL`` is not configured.
        AuthenticationError: If ``JIRA_EMAIL`` or ``JIRA_TOKEN`` is not configured.
    """
    base_url: str = os.getenv("JIRA_BASE_URL", "").strip()
    if not base_url:
        raise ConfigurationError(
            "Missing Jira base URL. Set the 'JIRA_BASE_URL' environment variable "
            "or pass --issues-file to read a local issue dump."
        )

    email: str = os.getenv("JIRA_EMAIL", "").strip()
    token: str = os.getenv("JIRA_TOKEN", "").strip()
    if not email or not token:
        raise AuthenticationError(
            "Missing required Jira credentials. "
            "Set the 'JIRA_EMAIL' and 'JIRA_TOKEN' environment variables before fetching issues."
        )

    return JiraSettings(
        base_url=base_url.rstrip("/"),
        email=email,
        token=token,
        story_points_field=story_points_field or DEFAULT_STORY_POINTS_FIELD,
    )
