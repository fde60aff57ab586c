"""Data models for the enriched activity view."""

from enum import Enum

from pydantic import BaseModel, ConfigDict

from teampulse.tools.models import Commit, PullRequest, RepositoryActivity, TrackerIssue


class ActivityLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class PatternKind(str, Enum):
    """Qualitative observations about the shape of someone's work."""
    MULTIPLE_HIGH_PRIORITY = "multiple_high_priority"
    MULTI_REPOSITORY = "multi_repository"
    MANY_OPEN_PRS = "many_open_prs"
    GOOD_TRACKING = "good_tracking"


class PatternImpact(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    POSITIVE = "positive"


class TrackerSummary(BaseModel):
    """Jira side of the picture."""
    count: int = 0
    by_status: dict[str, int] = {}
    by_priority: dict[str, int] = {}
    by_category: dict[str, int] = {}
    high_priority: int = 0
    issues: list[TrackerIssue] = []
    recent_activity: list[TrackerIssue] = []


class CodeHostSummary(BaseModel):
    """GitHub side of the picture."""
    commit_count: int = 0
    open_pr_count: int = 0
    repository_count: int = 0
    active_repositories: list[str] = []
    commits: list[Commit] = []
    pull_requests: list[PullRequest] = []
    repositories: list[RepositoryActivity] = []


class LinkedPair(BaseModel):
    """A commit that references a ticket present in the same query's issues."""
    commit: Commit
    ticket: TrackerIssue


class Metrics(BaseModel):
    activity_score: int
    activity_level: ActivityLevel
    total_items: int
    window_days: int


class PatternFlag(BaseModel):
    kind: PatternKind
    description: str
    impact: PatternImpact


class EnrichedModel(BaseModel):
    """Fused Jira + GitHub view for one query. Built once, never mutated."""
    model_config = ConfigDict(frozen=True)

    tracker: TrackerSummary
    code_host: CodeHostSummary
    linked: list[LinkedPair] = []
    metrics: Metrics
    patterns: list[PatternFlag] = []
