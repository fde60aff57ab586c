"""
Jira source for teampulse.

JiraAPI is the raw capability (user search, JQL issue search) over httpx.
JiraClient wraps it with caching, retry and the failure policies below, and
normalizes issues into TrackerIssue records.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any

import httpx

from teampulse.config import JiraSettings
from teampulse.errors import NotConfiguredError, ServerError, classify_http_error, classify_request_error
from teampulse.tools.base import (
    DEGRADE_TO_EMPTY,
    FailureAction,
    FailurePolicy,
    ResilientSourceClient,
)
from teampulse.tools.models import ActivityKind, Identity, TrackerIssue

logger = logging.getLogger(__name__)

SOURCE = "jira"

ISSUE_FIELDS = "summary,status,priority,created,updated,issuetype,project"
RECENT_ACTIVITY_FIELDS = "summary,status,priority,updated,issuetype"
ASSIGNED_ISSUES_LIMIT = 50
RECENT_ACTIVITY_LIMIT = 20


class JiraAPI:
    """Thin async wrapper over the Jira Cloud REST API (v3)."""

    def __init__(
        self,
        settings: JiraSettings,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = 30.0,
    ):
        self.settings = settings
        self.transport = transport
        self.timeout = timeout

    @property
    def base_url(self) -> str:
        return (self.settings.base_url or "").rstrip("/")

    def _get_auth(self, operation: str) -> httpx.BasicAuth:
        """Get Jira authentication credentials."""
        if not self.settings.configured:
            raise NotConfiguredError(
                SOURCE, operation,
                message="Jira credentials not configured. Set JIRA_BASE_URL, JIRA_API_USER and JIRA_API_TOKEN.",
            )
        return httpx.BasicAuth(self.settings.email, self.settings.api_token)

    async def _get(self, operation: str, path: str, params: dict[str, Any]) -> Any:
        auth = self._get_auth(operation)

        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                response = await client.get(
                    f"{self.base_url}{path}",
                    auth=auth,
                    headers={"Accept": "application/json"},
                    params=params,
                )
                response.raise_for_status()
            except httpx.HTTPStatusError as e:
                raise classify_http_error(SOURCE, operation, e) from e
            except httpx.RequestError as e:
                raise classify_request_error(SOURCE, operation, e) from e

            try:
                return response.json()
            except ValueError as e:
                raise ServerError(SOURCE, operation, response.status_code, "Jira returned a malformed response") from e

    async def search_user(self, query: str) -> dict | None:
        """Fuzzy user search; returns the first match or None."""
        users = await self._get("search_user", "/rest/api/3/user/search", {"query": query, "maxResults": 10})
        if isinstance(users, list) and users:
            return users[0]
        return None

    async def search_issues(self, jql: str, max_results: int, fields: str) -> list[dict]:
        """Run a JQL search and return the raw issue payloads."""
        data = await self._get(
            "search_issues",
            "/rest/api/3/search/jql",
            {"jql": jql, "maxResults": max_results, "fields": fields},
        )
        return (data or {}).get("issues", [])


def _named(field: Any, default: str | None = None) -> str | None:
    """Jira nests most enum-like fields as {"name": ...}."""
    if isinstance(field, dict):
        return field.get("name", default)
    if field is None:
        return default
    return str(field)


def to_tracker_issue(issue: dict, base_url: str) -> TrackerIssue:
    """Normalize a raw Jira issue payload."""
    key = issue["key"]
    fields = issue.get("fields") or {}
    return TrackerIssue(
        id=key,
        title=fields.get("summary") or "No summary",
        status=_named(fields.get("status"), "Unknown"),
        priority=_named(fields.get("priority"), "None") or "None",
        category=_named(fields.get("issuetype")),
        project=_named(fields.get("project")),
        created_at=fields.get("created"),
        updated_at=fields.get("updated"),
        link=f"{base_url}/browse/{key}",
    )


class JiraClient(ResilientSourceClient):
    """Resilient Jira client: assigned issues and recent activity per user."""

    source = SOURCE
    failure_policies = {
        # A bad JQL or unexpected 4xx here is an integration defect, not "no data"
        ActivityKind.ISSUES: FailurePolicy(
            client_error=FailureAction.PROPAGATE,
            transient=FailureAction.PROPAGATE,
        ),
        ActivityKind.RECENT_ACTIVITY: DEGRADE_TO_EMPTY,
    }
    unwindowed_kinds = frozenset({ActivityKind.ISSUES})

    def __init__(self, api: JiraAPI, **kwargs):
        super().__init__(**kwargs)
        self.api = api

    async def _lookup_identity(self, name: str) -> Identity | None:
        user = await self._call(lambda: self.api.search_user(name))
        if not user or not user.get("accountId"):
            return None
        return Identity(
            source=SOURCE,
            key=user["accountId"],
            display_name=user.get("displayName") or name,
        )

    async def _fetch(self, identity: Identity, kind: ActivityKind, window_days: int) -> list[TrackerIssue]:
        if kind is ActivityKind.ISSUES:
            jql = f'assignee = "{identity.key}" AND status != Done ORDER BY updated DESC'
            raw = await self._call(lambda: self.api.search_issues(jql, ASSIGNED_ISSUES_LIMIT, ISSUE_FIELDS))
        else:
            since = (datetime.now(timezone.utc) - timedelta(days=window_days)).strftime("%Y-%m-%d")
            jql = f'assignee = "{identity.key}" AND updated >= "{since}" ORDER BY updated DESC'
            raw = await self._call(lambda: self.api.search_issues(jql, RECENT_ACTIVITY_LIMIT, RECENT_ACTIVITY_FIELDS))

        issues = []
        for item in raw:
            try:
                issues.append(to_tracker_issue(item, self.api.base_url))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Skipping malformed Jira issue: {e}")
        return issues
