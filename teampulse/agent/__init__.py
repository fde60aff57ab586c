"""Query answering for teampulse."""

from teampulse.agent.assistant import ActivityAssistant
from teampulse.agent.models import AnswerResult, GitHubUser, JiraUser, ResolvedUsers

__all__ = ["ActivityAssistant", "AnswerResult", "GitHubUser", "JiraUser", "ResolvedUsers"]
