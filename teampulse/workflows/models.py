"""Data models for cross-source aggregation."""

from pydantic import BaseModel

from teampulse.tools.models import Commit, Identity, PullRequest, RepositoryActivity, TrackerIssue


class TrackerBundle(BaseModel):
    """Raw Jira record sets for one query."""
    issues: list[TrackerIssue] = []
    recent_activity: list[TrackerIssue] = []


class CodeHostBundle(BaseModel):
    """Raw GitHub record sets for one query."""
    commits: list[Commit] = []
    pull_requests: list[PullRequest] = []
    repositories: list[RepositoryActivity] = []


class FetchFault(BaseModel):
    """A fetch that failed with a propagating fault and was replaced by an empty result."""
    source: str
    operation: str


class AggregatedActivity(BaseModel):
    """Everything fetched for one subject, before enrichment."""
    jira_identity: Identity | None = None
    github_identity: Identity | None = None
    tracker: TrackerBundle = TrackerBundle()
    code_host: CodeHostBundle = CodeHostBundle()
    faults: list[FetchFault] = []
