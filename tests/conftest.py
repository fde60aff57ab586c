"""Shared test fixtures and fakes."""

import pytest

from teampulse.tools.cache import TTLCache
from teampulse.tools.github import GitHubClient
from teampulse.tools.jira import JiraClient

JIRA_BASE_URL = "https://example.atlassian.net"


class FakeClock:
    """Manually advanced clock for TTL and rate-limit tests."""

    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingSleep:
    """Awaitable sleep that returns immediately and remembers each delay."""

    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


class FakeJiraAPI:
    """In-memory stand-in for JiraAPI."""

    base_url = JIRA_BASE_URL

    def __init__(self, users=None, issues=None, recent=None):
        self.users = users or {}
        self.issues = issues or []
        self.recent = recent or []
        self.search_issue_errors: list[Exception] = []
        self.calls: list[tuple] = []

    async def search_user(self, query: str):
        self.calls.append(("search_user", query))
        return self.users.get(query)

    async def search_issues(self, jql: str, max_results: int, fields: str):
        self.calls.append(("search_issues", jql))
        if self.search_issue_errors:
            raise self.search_issue_errors.pop(0)
        if "status != Done" in jql:
            return self.issues
        return self.recent


class FakeGitHubAPI:
    """In-memory stand-in for GitHubAPI."""

    def __init__(self, users=None, commits=None, pull_requests=None, pull_request_details=None):
        self.users = users or {}
        self.commits = commits or []
        self.pull_requests = pull_requests or []
        self.pull_request_details = pull_request_details or {}
        self.commit_errors: list[Exception] = []
        self.calls: list[tuple] = []

    async def get_user(self, username: str):
        self.calls.append(("get_user", username))
        return self.users.get(username)

    async def search_users(self, text: str):
        self.calls.append(("search_users", text))
        return []

    async def search_commits(self, author: str, since: str):
        self.calls.append(("search_commits", author))
        if self.commit_errors:
            raise self.commit_errors.pop(0)
        return self.commits

    async def search_open_pull_requests(self, author: str):
        self.calls.append(("search_open_pull_requests", author))
        return self.pull_requests

    async def get_pull_request(self, url: str):
        self.calls.append(("get_pull_request", url))
        detail = self.pull_request_details.get(url)
        if isinstance(detail, Exception):
            raise detail
        return detail


class FakeCompletion:
    """TextCompletion that returns a canned reply or raises."""

    def __init__(self, reply: str = "", error: Exception | None = None):
        self.reply = reply
        self.error = error
        self.prompts: list[tuple[str, str]] = []

    async def complete(self, system_prompt: str, user_prompt: str) -> str:
        self.prompts.append((system_prompt, user_prompt))
        if self.error:
            raise self.error
        return self.reply


def jira_issue(key: str, summary: str = "Do the thing", status: str = "In Progress", priority: str | None = "Medium",
               issue_type: str = "Task") -> dict:
    """Raw Jira issue payload as returned by the search endpoint."""
    return {
        "key": key,
        "fields": {
            "summary": summary,
            "status": {"name": status},
            "priority": {"name": priority} if priority else None,
            "issuetype": {"name": issue_type},
            "project": {"name": key.split("-")[0]},
            "created": "2024-01-01T10:00:00.000+0000",
            "updated": "2024-01-05T10:00:00.000+0000",
        },
    }


def commit_item(sha: str, message: str, repository: str = "acme/api", date: str = "2024-01-05T10:00:00Z") -> dict:
    """Raw GitHub commit search hit."""
    return {
        "sha": sha,
        "html_url": f"https://github.com/{repository}/commit/{sha}",
        "commit": {"message": message, "author": {"name": "Maya Chen", "date": date}},
        "repository": {"full_name": repository},
    }


def pull_request_detail(number: int, title: str = "Add feature", repository: str = "acme/api") -> dict:
    """Raw GitHub pull request payload."""
    return {
        "number": number,
        "title": title,
        "state": "open",
        "created_at": "2024-01-02T10:00:00Z",
        "updated_at": "2024-01-04T10:00:00Z",
        "html_url": f"https://github.com/{repository}/pull/{number}",
        "head": {"ref": f"feature-{number}", "repo": {"full_name": repository}},
        "base": {"ref": "main", "repo": {"full_name": repository}},
    }


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def no_sleep():
    return RecordingSleep()


@pytest.fixture
def make_jira_client(clock, no_sleep):
    def _make(api, ttl: float = 300.0) -> JiraClient:
        return JiraClient(api, cache=TTLCache(ttl, clock=clock), sleep=no_sleep)
    return _make


@pytest.fixture
def make_github_client(clock, no_sleep):
    def _make(api, ttl: float = 300.0) -> GitHubClient:
        return GitHubClient(api, cache=TTLCache(ttl, clock=clock), sleep=no_sleep)
    return _make
