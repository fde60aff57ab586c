"""Normalized identity and activity records shared by both source clients."""

from enum import Enum

from pydantic import BaseModel, ConfigDict


class ActivityKind(str, Enum):
    """Which record set a fetch returns."""
    ISSUES = "issues"
    RECENT_ACTIVITY = "recent_activity"
    COMMITS = "commits"
    PULL_REQUESTS = "pull_requests"
    REPOSITORIES = "repositories"


class Identity(BaseModel):
    """A subject resolved on one source."""
    model_config = ConfigDict(frozen=True)

    source: str  # "jira" or "github"
    key: str  # Jira accountId or GitHub login
    display_name: str


class TrackerIssue(BaseModel):
    """A Jira issue."""
    id: str  # issue key, e.g. "ABC-123"
    title: str
    status: str
    priority: str = "None"
    category: str | None = None  # issue type
    project: str | None = None
    created_at: str | None = None
    updated_at: str | None = None
    link: str


class Commit(BaseModel):
    """A GitHub commit, first message line only."""
    short_hash: str
    first_line: str
    author: str
    timestamp: str
    link: str
    repository: str = "unknown"
    referenced_ticket_ids: frozenset[str] = frozenset()


class PullRequest(BaseModel):
    """An open GitHub pull request."""
    number: int
    title: str
    state: str
    created_at: str
    updated_at: str
    link: str
    repository: str = "unknown"
    source_branch: str
    target_branch: str


class RepositoryActivity(BaseModel):
    """Commit activity in one repository within the window."""
    name: str
    commit_count: int
    last_commit_at: str


class RateLimitStatus(BaseModel):
    """GitHub core rate-limit state. reset_at is epoch seconds."""
    remaining: int
    reset_at: float
