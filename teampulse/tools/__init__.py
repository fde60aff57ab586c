"""Source clients for teampulse - Jira and GitHub behind one resilient interface."""

from teampulse.tools.base import FailureAction, FailurePolicy, ResilientSourceClient
from teampulse.tools.cache import TTLCache
from teampulse.tools.github import GitHubAPI, GitHubClient, extract_ticket_ids
from teampulse.tools.jira import JiraAPI, JiraClient
from teampulse.tools.models import (
    ActivityKind,
    Commit,
    Identity,
    PullRequest,
    RateLimitStatus,
    RepositoryActivity,
    TrackerIssue,
)

__all__ = [
    "ActivityKind",
    "Commit",
    "FailureAction",
    "FailurePolicy",
    "GitHubAPI",
    "GitHubClient",
    "Identity",
    "JiraAPI",
    "JiraClient",
    "PullRequest",
    "RateLimitStatus",
    "RepositoryActivity",
    "ResilientSourceClient",
    "TTLCache",
    "TrackerIssue",
    "extract_ticket_ids",
]
