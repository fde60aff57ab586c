"""Data models for assistant answers."""

from pydantic import BaseModel

from teampulse.enrichment.models import EnrichedModel
from teampulse.query.models import ParsedQuery
from teampulse.workflows.models import FetchFault


class JiraUser(BaseModel):
    name: str
    account_id: str


class GitHubUser(BaseModel):
    name: str
    login: str


class ResolvedUsers(BaseModel):
    """Who the subject resolved to on each source."""
    jira: JiraUser | None = None
    github: GitHubUser | None = None


class AnswerResult(BaseModel):
    """Everything returned for one natural-language query."""
    query: str
    parsed: ParsedQuery
    response: str
    data: EnrichedModel | None = None
    users: ResolvedUsers | None = None
    error: dict | None = None
    warnings: list[FetchFault] = []
