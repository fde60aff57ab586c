"""Data models for query interpretation."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, PositiveInt


class QueryIntent(str, Enum):
    """What kind of activity the question asks about."""
    GENERAL = "general"
    COMMITS = "commits"
    PULL_REQUESTS = "pull_requests"
    ISSUES = "issues"
    REPOSITORIES = "repositories"


class PlatformBias(str, Enum):
    """Which source the question leans toward."""
    JIRA = "jira"
    GITHUB = "github"
    BOTH = "both"


class ParsedQuery(BaseModel):
    """Structured reading of a free-text question."""
    model_config = ConfigDict(frozen=True)

    original_text: str
    subject_name: str | None = None
    window_days: PositiveInt | None = None
    intent: QueryIntent = QueryIntent.GENERAL
    platform_bias: PlatformBias = PlatformBias.BOTH
