"""
Activity assistant - answers "what is X working on?" style questions.

parse -> resolve + fetch (aggregator) -> enrich -> narrate. Every outcome,
including failures, comes back as an AnswerResult.
"""

import logging

from teampulse.agent.models import AnswerResult, GitHubUser, JiraUser, ResolvedUsers
from teampulse.config import DEFAULT_WINDOW_DAYS, Settings, load_settings
from teampulse.enrichment.enricher import DataEnricher
from teampulse.errors import (
    ActivityError,
    NoActivityError,
    SubjectNotExtractedError,
    UpstreamFaultError,
    error_payload,
)
from teampulse.narrative.gemini import GeminiCompletion
from teampulse.narrative.generator import ResponseGenerator
from teampulse.query.models import ParsedQuery
from teampulse.query.parser import QueryParser
from teampulse.tools.cache import TTLCache
from teampulse.tools.github import GitHubAPI, GitHubClient
from teampulse.tools.jira import JiraAPI, JiraClient
from teampulse.workflows.aggregator import ActivityAggregator
from teampulse.workflows.models import AggregatedActivity

logger = logging.getLogger(__name__)


class ActivityAssistant:
    """Wires the parser, aggregator, enricher and generator together."""

    def __init__(
        self,
        aggregator: ActivityAggregator,
        parser: QueryParser | None = None,
        enricher: DataEnricher | None = None,
        generator: ResponseGenerator | None = None,
        default_window_days: int = DEFAULT_WINDOW_DAYS,
    ):
        self.aggregator = aggregator
        self.parser = parser or QueryParser()
        self.enricher = enricher or DataEnricher()
        self.generator = generator or ResponseGenerator()
        self.default_window_days = default_window_days

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "ActivityAssistant":
        """Build an assistant backed by the real Jira, GitHub and (optionally) Gemini."""
        settings = settings or load_settings()
        client_options = {"max_attempts": settings.max_retry_attempts}

        jira = JiraClient(
            JiraAPI(settings.jira),
            cache=TTLCache(settings.cache_ttl_seconds),
            **client_options,
        )
        github = GitHubClient(
            GitHubAPI(settings.github),
            cache=TTLCache(settings.cache_ttl_seconds),
            **client_options,
        )

        completion = None
        if settings.llm.enabled:
            completion = GeminiCompletion(settings.llm)
            logger.info(f"Narratives will use {settings.llm.model}")
        else:
            logger.info("Generative narratives disabled, using templates")

        return cls(
            aggregator=ActivityAggregator(jira, github),
            generator=ResponseGenerator(completion),
            default_window_days=settings.default_window_days,
        )

    async def answer(self, query_text: str) -> AnswerResult:
        """Answer one query. Never raises."""
        query = query_text if isinstance(query_text, str) else ""
        parsed = self.parser.parse(query)

        if not parsed.subject_name:
            error = SubjectNotExtractedError(query)
            return self._error_result(query, parsed, error)

        subject = parsed.subject_name
        window_days = parsed.window_days or self.default_window_days
        logger.info(f"Processing query for {subject} over the last {window_days} days")

        try:
            return await self._answer_for(query, parsed, subject, window_days)
        except ActivityError as e:
            logger.info(f"Query for {subject} ended with {e.kind.value}: {e}")
            return self._error_result(query, parsed, e)
        except Exception as e:
            logger.error(f"Unexpected error processing query for {subject}: {e}", exc_info=True)
            return self._error_result(query, parsed, ActivityError("Unexpected error processing query", subject))

    async def _answer_for(self, query: str, parsed: ParsedQuery, subject: str, window_days: int) -> AnswerResult:
        activity = await self.aggregator.aggregate(subject, window_days)
        enriched = self.enricher.enrich(activity.tracker, activity.code_host, window_days)
        display_name = self.display_name_for(activity, subject)
        users = self.resolved_users(activity)

        if enriched.metrics.total_items == 0:
            if activity.faults:
                fault = activity.faults[0]
                error = UpstreamFaultError(fault.source, fault.operation)
                response = self.generator.generate_error_response(error.kind, display_name)
            else:
                error = NoActivityError(display_name)
                response = await self.generator.generate(parsed, enriched, display_name)
            return AnswerResult(
                query=query,
                parsed=parsed,
                response=response,
                data=enriched,
                users=users,
                error=error_payload(error),
                warnings=activity.faults,
            )

        if activity.faults:
            logger.warning(
                f"Answering for {subject} with partial data, failed: "
                + ", ".join(f"{f.source}.{f.operation}" for f in activity.faults)
            )

        response = await self.generator.generate(parsed, enriched, display_name)
        return AnswerResult(
            query=query,
            parsed=parsed,
            response=response,
            data=enriched,
            users=users,
            warnings=activity.faults,
        )

    def _error_result(self, query: str, parsed: ParsedQuery, error: ActivityError) -> AnswerResult:
        return AnswerResult(
            query=query,
            parsed=parsed,
            response=self.generator.generate_error_response(error.kind, error.subject),
            error=error_payload(error),
        )

    @staticmethod
    def display_name_for(activity: AggregatedActivity, subject: str) -> str:
        """Jira display name, then GitHub name, then the name as asked."""
        for identity in (activity.jira_identity, activity.github_identity):
            if identity is not None and identity.display_name:
                return identity.display_name
        return subject

    @staticmethod
    def resolved_users(activity: AggregatedActivity) -> ResolvedUsers:
        users = ResolvedUsers()
        if activity.jira_identity is not None:
            users.jira = JiraUser(name=activity.jira_identity.display_name, account_id=activity.jira_identity.key)
        if activity.github_identity is not None:
            users.github = GitHubUser(name=activity.github_identity.display_name, login=activity.github_identity.key)
        return users
