"""
GitHub source for teampulse.

GitHubAPI is the raw capability over httpx, with rate-limit awareness:
before each request it checks the known remaining quota and waits for the
reset when it is nearly spent. GitHubClient wraps it with caching, retry and
failure policies, and normalizes commits, pull requests and repositories.

Commits are scanned for Jira ticket references (e.g. "PROJ-123") so the
enrichment step can link them to issues.
"""

import asyncio
import logging
import re
import time
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Hashable
from urllib.parse import quote

import httpx

from teampulse.config import RATE_LIMIT_LOW_WATER_MARK, RECENT_REPOSITORY_LIMIT, GitHubSettings
from teampulse.errors import (
    AuthenticationError,
    NotConfiguredError,
    NotFoundError,
    ServerError,
    SourceError,
    classify_http_error,
    classify_request_error,
)
from teampulse.tools.base import DEGRADE_TO_EMPTY, ResilientSourceClient
from teampulse.tools.concurrency import settle_all
from teampulse.tools.models import (
    ActivityKind,
    Commit,
    Identity,
    PullRequest,
    RateLimitStatus,
    RepositoryActivity,
)
from teampulse.tools.retry import Sleep

logger = logging.getLogger(__name__)

SOURCE = "github"
API_URL = "https://api.github.com"

COMMITS_PER_PAGE = 30
PULL_REQUESTS_PER_PAGE = 20

TICKET_ID_RE = re.compile(r"\b[A-Z]+-\d+\b")


def extract_ticket_ids(message: str) -> frozenset[str]:
    """Distinct Jira-style ticket ids ("ABC-123") mentioned in a commit message."""
    return frozenset(TICKET_ID_RE.findall(message or ""))


class GitHubAPI:
    """Thin async wrapper over the GitHub REST API with rate-limit preflight."""

    def __init__(
        self,
        settings: GitHubSettings,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = 30.0,
        clock: Callable[[], float] = time.time,
        sleep: Sleep = asyncio.sleep,
    ):
        self.settings = settings
        self.transport = transport
        self.timeout = timeout
        self._clock = clock
        self._sleep = sleep

        # Track rate limit status
        self.rate_limit_remaining: int | None = None
        self.rate_limit_reset: float | None = None

    def _get_headers(self, operation: str) -> dict:
        """Get GitHub API headers with authentication."""
        if not self.settings.configured:
            raise NotConfiguredError(
                SOURCE, operation,
                message="GitHub token not configured. Set GITHUB_TOKEN in .env",
            )
        return {
            "Authorization": f"Bearer {self.settings.api_token}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }

    def _record_rate_headers(self, response: httpx.Response) -> None:
        remaining = response.headers.get("x-ratelimit-remaining")
        reset = response.headers.get("x-ratelimit-reset")
        try:
            if remaining is not None:
                self.rate_limit_remaining = int(remaining)
            if reset is not None:
                self.rate_limit_reset = float(reset)
        except ValueError:
            logger.debug(f"Ignoring unparseable rate-limit headers: {remaining!r}, {reset!r}")

    async def _send(self, operation: str, url: str, params: dict[str, Any] | None = None) -> Any:
        headers = self._get_headers(operation)

        async with httpx.AsyncClient(base_url=API_URL, timeout=self.timeout, transport=self.transport) as client:
            try:
                response = await client.get(url, headers=headers, params=params)
                self._record_rate_headers(response)
                response.raise_for_status()
            except httpx.HTTPStatusError as e:
                raise classify_http_error(SOURCE, operation, e) from e
            except httpx.RequestError as e:
                raise classify_request_error(SOURCE, operation, e) from e

            try:
                return response.json()
            except ValueError as e:
                raise ServerError(SOURCE, operation, response.status_code, "GitHub returned a malformed response") from e

    async def check_rate_limit(self) -> None:
        """Wait for the quota reset when the remaining quota is known to be low."""
        # No credential, no quota to protect
        if not self.settings.configured:
            return

        if self.rate_limit_remaining is None:
            try:
                await self.get_rate_limit_status()
            except AuthenticationError:
                # The actual request will fail on its own
                return
            except SourceError as e:
                logger.warning(f"Could not check GitHub rate limit: {e}")
                return

        if self.rate_limit_remaining is not None and self.rate_limit_remaining < RATE_LIMIT_LOW_WATER_MARK:
            wait = (self.rate_limit_reset or 0.0) - self._clock()
            if wait > 0:
                logger.info(
                    f"GitHub rate limit low ({self.rate_limit_remaining} remaining). Waiting {wait:.0f}s..."
                )
                await self._sleep(wait)
                # The quota has reset; learn the new value on the next response
                self.rate_limit_remaining = None

    async def _get(self, operation: str, url: str, params: dict[str, Any] | None = None) -> Any:
        await self.check_rate_limit()
        return await self._send(operation, url, params)

    async def get_rate_limit_status(self) -> RateLimitStatus:
        data = await self._send("rate_limit", "/rate_limit")
        try:
            rate = data.get("rate") or data["resources"]["core"]
            status = RateLimitStatus(remaining=int(rate["remaining"]), reset_at=float(rate["reset"]))
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise ServerError(SOURCE, "rate_limit", message="GitHub returned a malformed rate limit") from e
        self.rate_limit_remaining = status.remaining
        self.rate_limit_reset = status.reset_at
        return status

    async def get_user(self, username: str) -> dict | None:
        """Direct user lookup by login; None when it doesn't exist."""
        try:
            return await self._get("get_user", f"/users/{quote(username, safe='')}")
        except NotFoundError:
            return None

    async def search_users(self, text: str) -> list[dict]:
        data = await self._get("search_users", "/search/users", {"q": text})
        return (data or {}).get("items", [])

    def _scoped(self, query: str) -> str:
        if self.settings.organization:
            return f"{query} org:{self.settings.organization}"
        return query

    async def search_commits(self, author: str, since: str) -> list[dict]:
        """Commits authored by `author` after the `since` date (YYYY-MM-DD)."""
        data = await self._get(
            "search_commits",
            "/search/commits",
            {
                "q": self._scoped(f"author:{author} author-date:>{since}"),
                "per_page": COMMITS_PER_PAGE,
                "sort": "author-date",
                "order": "desc",
            },
        )
        return (data or {}).get("items", [])

    async def search_open_pull_requests(self, author: str) -> list[dict]:
        data = await self._get(
            "search_pull_requests",
            "/search/issues",
            {"q": self._scoped(f"is:pr is:open author:{author}"), "per_page": PULL_REQUESTS_PER_PAGE},
        )
        return (data or {}).get("items", [])

    async def get_pull_request(self, url: str) -> dict | None:
        """Full PR payload from a search hit's pull_request.url."""
        try:
            return await self._get("get_pull_request", url)
        except NotFoundError:
            return None


def to_commit(item: dict) -> Commit:
    """Normalize a commit search hit."""
    commit = item["commit"]
    message = commit.get("message") or ""
    author = commit.get("author") or {}
    return Commit(
        short_hash=item["sha"][:7],
        first_line=message.split("\n")[0],  # First line only
        author=author.get("name") or "unknown",
        timestamp=author.get("date") or "",
        link=item.get("html_url") or "",
        repository=(item.get("repository") or {}).get("full_name") or "unknown",
        referenced_ticket_ids=extract_ticket_ids(message),
    )


def to_pull_request(pr: dict) -> PullRequest:
    """Normalize a full pull request payload."""
    base = pr.get("base") or {}
    head = pr.get("head") or {}
    repository = (base.get("repo") or {}).get("full_name") or (head.get("repo") or {}).get("full_name")
    return PullRequest(
        number=pr["number"],
        title=pr["title"],
        state=pr["state"],
        created_at=pr["created_at"],
        updated_at=pr["updated_at"],
        link=pr["html_url"],
        repository=repository or "unknown",
        source_branch=head.get("ref", ""),
        target_branch=base.get("ref", ""),
    )


def _parse_timestamp(value: str) -> datetime:
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except (AttributeError, ValueError):
        return datetime.min.replace(tzinfo=timezone.utc)


def summarize_repositories(commits: list[Commit], limit: int = RECENT_REPOSITORY_LIMIT) -> list[RepositoryActivity]:
    """Group commits by repository, most recently active first."""
    repos: dict[str, RepositoryActivity] = {}
    for commit in commits:
        repo = repos.get(commit.repository)
        if repo is None:
            repos[commit.repository] = RepositoryActivity(
                name=commit.repository, commit_count=1, last_commit_at=commit.timestamp
            )
            continue
        repo.commit_count += 1
        if _parse_timestamp(commit.timestamp) > _parse_timestamp(repo.last_commit_at):
            repo.last_commit_at = commit.timestamp

    ordered = sorted(repos.values(), key=lambda r: _parse_timestamp(r.last_commit_at), reverse=True)
    return ordered[:limit]


class GitHubClient(ResilientSourceClient):
    """Resilient GitHub client: commits, open PRs and active repositories per user."""

    source = SOURCE
    failure_policies = {
        ActivityKind.COMMITS: DEGRADE_TO_EMPTY,
        ActivityKind.PULL_REQUESTS: DEGRADE_TO_EMPTY,
        ActivityKind.REPOSITORIES: DEGRADE_TO_EMPTY,
    }
    unwindowed_kinds = frozenset({ActivityKind.PULL_REQUESTS})

    def __init__(self, api: GitHubAPI, **kwargs):
        super().__init__(**kwargs)
        self.api = api
        # In-flight commit searches, keyed like the commits cache entry
        self._pending_commits: dict[Hashable, asyncio.Task] = {}

    async def _lookup_identity(self, name: str) -> Identity | None:
        user = await self._call(lambda: self.api.get_user(name))
        if not user:
            # Try searching if direct lookup finds nothing
            matches = await self._call(lambda: self.api.search_users(name))
            user = matches[0] if matches else None
        if not user or not user.get("login"):
            return None
        return Identity(source=SOURCE, key=user["login"], display_name=user.get("name") or user["login"])

    async def _fetch(self, identity: Identity, kind: ActivityKind, window_days: int) -> list:
        if kind is ActivityKind.COMMITS:
            return await self._commits_for(identity, window_days)
        if kind is ActivityKind.PULL_REQUESTS:
            return await self._fetch_pull_requests(identity.key)
        return summarize_repositories(await self._commits_for(identity, window_days))

    async def _fetch_commits(self, login: str, window_days: int) -> list[Commit]:
        since = (datetime.now(timezone.utc) - timedelta(days=window_days)).strftime("%Y-%m-%d")
        items = await self._call(lambda: self.api.search_commits(login, since))
        commits = []
        for item in items:
            try:
                commits.append(to_commit(item))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Skipping malformed GitHub commit: {e}")
        return commits

    async def _commits_for(self, identity: Identity, window_days: int) -> list[Commit]:
        """
        Commits for an identity, shared by the commits and repositories fetches.

        A cached list is returned as is. Otherwise concurrent callers for the
        same key await one commit search instead of each issuing their own.
        """
        cache_key = self.activity_cache_key(ActivityKind.COMMITS, identity, window_days)
        commits = self.cache.get(cache_key)
        if commits is not None:
            return commits

        task = self._pending_commits.get(cache_key)
        if task is None:
            task = asyncio.create_task(self._fetch_commits(identity.key, window_days))
            self._pending_commits[cache_key] = task
            task.add_done_callback(lambda done: self._forget_pending(cache_key, done))

        commits = await task
        self.cache.set(cache_key, commits)
        return commits

    def _forget_pending(self, cache_key: Hashable, task: asyncio.Task) -> None:
        if self._pending_commits.get(cache_key) is task:
            del self._pending_commits[cache_key]

    async def _fetch_pull_requests(self, login: str) -> list[PullRequest]:
        items = await self._call(lambda: self.api.search_open_pull_requests(login))

        # Fetch full PR details concurrently
        detail_calls = {}
        for index, item in enumerate(items):
            url = (item.get("pull_request") or {}).get("url")
            if url:
                detail_calls[str(index)] = self._call(lambda url=url: self.api.get_pull_request(url))
        details = await settle_all(detail_calls)

        prs = []
        for index in sorted(details, key=int):
            detail = details[index]
            if isinstance(detail, Exception):
                logger.warning(f"Dropping pull request detail for {login}: {detail}")
                continue
            if not detail:
                continue
            try:
                prs.append(to_pull_request(detail))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Skipping malformed GitHub pull request: {e}")
        return prs
