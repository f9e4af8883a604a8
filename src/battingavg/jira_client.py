"""Jira Cloud REST API client for resolved issue retrieval."""

from __future__ import annotations

import logging
import math
import time
from typing import Any, Dict, List, Optional

import requests
from requests.auth import HTTPBasicAuth

from .config import JiraSettings
from .errors import ApiError, AuthenticationError
from .stories import parse_jira_datetime
from .windows import utc_now

logger = logging.getLogger(__name__)


class JiraClient:
    """Small, typed client for the Jira Cloud issue search API."""

    _SEARCH_PATH = "rest/api/3/search/jql"
    _SEARCH_PAGE_SIZE = 100
    _MAX_RETRIES = 5
    _MAX_BACKOFF_SECONDS = 30
    _RETRYABLE_STATUSES = (429,)
    _BASE_FIELDS = ("summary", "issuetype", "assignee", "resolutiondate")

    def __init__(self, settings: JiraSettings, timeout_seconds: int = 30) -> None:
        """Initialize an authenticated Jira API client.

        Args:
            settings: Validated Jira connection settings.
            timeout_seconds: Per-request timeout in seconds.
        """
        self._settings = settings
        self._timeout_seconds = timeout_seconds
        self._base_url = settings.base_url.rstrip("/")

        self._session = requests.Session()
        self._session.auth = HTTPBasicAuth(settings.email, settings.token)
        self._session.headers.update({"Accept": "application/json"})

    def _build_url(self, path: str) -> str:
        return f"{self._base_url}/{path.lstrip('/')}"

    def _backoff_seconds(self, response: Optional[requests.Response], attempt: int) -> int:
        """Pick a retry delay from Jira's rate-limit headers, else back off exponentially.

        Jira Cloud sends ``Retry-After`` in seconds and ``X-RateLimit-Reset`` as an
        ISO8601 timestamp; ``Retry-After`` wins when both are present.
        """
        exponential = min(self._MAX_BACKOFF_SECONDS, 2 ** (attempt - 1))
        if response is None:
            return exponential

        retry_after = response.headers.get("Retry-After", "")
        if retry_after.isdigit():
            return min(self._MAX_BACKOFF_SECONDS, max(1, int(retry_after)))

        try:
            reset_at = parse_jira_datetime(response.headers.get("X-RateLimit-Reset"))
        except ValueError:
            reset_at = None
        if reset_at is not None:
            wait_seconds = math.ceil((reset_at - utc_now()).total_seconds())
            return min(self._MAX_BACKOFF_SECONDS, max(1, wait_seconds))

        return exponential

    def _error_detail(self, response: requests.Response) -> str:
        """Summarize Jira's ``errorMessages``/``errors`` body, falling back to raw text."""
        try:
            body = response.json()
        except ValueError:
            return response.text
        if not isinstance(body, dict):
            return response.text

        messages = [str(message) for message in body.get("errorMessages") or []]
        messages.extend(f"{field}: {message}" for field, message in (body.get("errors") or {}).items())
        return "; ".join(messages) or response.text

    def _get_json(self, path: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Execute a GET request, retrying transport failures, 429 and 5xx responses.

        Raises:
            AuthenticationError: If Jira rejects the credentials (401/403).
            ApiError: If retries are exhausted, Jira returns another HTTP error
                (for example invalid JQL), or the body is not a JSON object.
        """
        url = self._build_url(path)
        query = dict(params or {})

        for attempt in range(1, self._MAX_RETRIES + 1):
            final_attempt = attempt == self._MAX_RETRIES
            try:
                response = self._session.get(url, params=query, timeout=self._timeout_seconds)
            except requests.RequestException as exc:
                if final_attempt:
                    raise ApiError(f"Jira request failed after {attempt} attempts: GET {url}") from exc
                delay = self._backoff_seconds(None, attempt)
                logger.warning("Jira request error, retrying", extra={"url": url, "attempt": attempt, "delay": delay})
                time.sleep(delay)
                continue

            status_code = response.status_code
            if status_code in self._RETRYABLE_STATUSES or 500 <= status_code <= 599:
                if final_attempt:
                    raise ApiError(f"Jira request failed after {attempt} attempts: GET {url} returned {status_code}")
                delay = self._backoff_seconds(response, attempt)
                logger.warning(
                    "Jira throttled or unavailable, retrying",
                    extra={"url": url, "status_code": status_code, "attempt": attempt, "delay": delay},
                )
                time.sleep(delay)
                continue

            if status_code in (401, 403):
                raise AuthenticationError(
                    f"Jira rejected the configured credentials: GET {url} returned {status_code} "
                    f"({response.headers.get('X-Seraph-LoginReason', 'no login reason')})"
                )

            if status_code >= 400:
                raise ApiError(f"Jira API request failed: GET {url} returned {status_code} - {self._error_detail(response)}")

            try:
                payload = response.json()
            except ValueError as exc:
                raise ApiError(f"Jira API returned invalid JSON: GET {url}") from exc

            if not isinstance(payload, dict):
                raise ApiError(f"Jira API returned unexpected payload shape: GET {url}")

            return payload

        raise ApiError(f"Jira request was not attempted: GET {url}")

    def _flatten_issue(self, item: Dict[str, Any]) -> Dict[str, Any]:
        """Reduce a Jira issue payload to the flat shape used for enrichment."""
        fields = item.get("fields") or {}
        assignee = fields.get("assignee") or {}
        issue_type = fields.get("issuetype") or {}

        return {
            "key": item.get("key"),
            "summary": fields.get("summary"),
            "issuetype": issue_type.get("name"),
            "assignee": assignee.get("displayName"),
            "resolutiondate": fields.get("resolutiondate"),
            "storypoints": fields.get(self._settings.story_points_field),
        }

    def search_resolved_issues(self, jql: str) -> List[Dict[str, Any]]:
        """Search issues with ``jql`` and return them as flat dictionaries.

        Pages through results with ``nextPageToken`` until Jira stops returning
        one. Issues without a resolution date are dropped.
        """
        fields = ",".join(self._BASE_FIELDS + (self._settings.story_points_field,))
        issues: List[Dict[str, Any]] = []
        next_page_token: Optional[str] = None

        while True:
            params: Dict[str, Any] = {
                "jql": jql,
                "fields": fields,
                "maxResults": self._SEARCH_PAGE_SIZE,
            }
            if next_page_token:
                params["nextPageToken"] = next_page_token

            payload = self._get_json(self._SEARCH_PATH, params=params)

            page_items = payload.get("issues", [])
            for item in page_items:
                flat = self._flatten_issue(item)
                if flat["resolutiondate"]:
                    issues.append(flat)

            next_page_token = payload.get("nextPageToken")
            if not next_page_token or not page_items:
                break

        return issues
