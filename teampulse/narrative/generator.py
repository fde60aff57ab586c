"""
Response generator.

Tries the generative strategy first (a TextCompletion such as Gemini) and
falls back to a deterministic template when it is unavailable or fails. The
template covers every part of the enriched model, so the service works with
no generative backend at all.
"""

import json
import logging

from teampulse.enrichment.models import EnrichedModel
from teampulse.errors import ErrorKind
from teampulse.narrative.gemini import TextCompletion
from teampulse.query.models import ParsedQuery

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a helpful assistant that provides clear, concise summaries of team member "
    "activities. Be conversational and highlight the most important information."
)

LIST_LIMIT = 5

NO_ACTIVITY_NARRATIVE = (
    "{name} doesn't appear to have any recent activity on JIRA or GitHub. "
    "This could mean they're on vacation, working on a different project, "
    "or the data might not be synced yet."
)

ERROR_RESPONSES = {
    ErrorKind.SUBJECT_NOT_EXTRACTED: (
        'Could not extract a name from your query. Please try: "What is [name] working on?"'
    ),
    ErrorKind.USER_NOT_FOUND: (
        'I couldn\'t find "{name}" in JIRA or GitHub. Please check the spelling or try a different name.'
    ),
    ErrorKind.NO_ACTIVITY: (
        "{name} doesn't have any recent activity to show. They might be on vacation or working on something else."
    ),
    ErrorKind.UPSTREAM_FAULT: (
        "I encountered an issue fetching data for {name} from JIRA or GitHub. Please try again in a moment."
    ),
}


class ResponseGenerator:
    """Renders an EnrichedModel as text."""

    def __init__(self, completion: TextCompletion | None = None):
        self.completion = completion

    @property
    def use_ai(self) -> bool:
        return self.completion is not None

    async def generate(self, parsed: ParsedQuery, enriched: EnrichedModel, display_name: str) -> str:
        """Narrative for a query. Never raises because of the generative backend."""
        if enriched.metrics.total_items == 0:
            return NO_ACTIVITY_NARRATIVE.format(name=display_name)

        if self.use_ai:
            try:
                return await self.completion.complete(
                    SYSTEM_PROMPT, self.build_prompt(parsed, enriched, display_name)
                )
            except Exception as e:
                logger.warning(f"AI generation failed, falling back to template: {e}")

        return self.render_template(parsed, enriched, display_name)

    def build_prompt(self, parsed: ParsedQuery, enriched: EnrichedModel, display_name: str) -> str:
        """User prompt summarizing every part of the enriched model."""
        jira = enriched.tracker
        github = enriched.code_host
        lines = [
            f'Based on the following data, provide a natural, conversational answer to: "{parsed.original_text}"',
            "",
            f"Person: {display_name}",
            f"Time window: last {enriched.metrics.window_days} days",
            f"Question focus: {parsed.intent.value}",
            "",
        ]

        if jira.count > 0:
            lines.append("JIRA Activity:")
            lines.append(f"- {jira.count} active issues")
            if jira.high_priority > 0:
                lines.append(f"- {jira.high_priority} high-priority items")
            lines.append(f"- Status breakdown: {json.dumps(jira.by_status)}")
            lines.append(f"- Priority breakdown: {json.dumps(jira.by_priority)}")
            lines.append(f"- Type breakdown: {json.dumps(jira.by_category)}")
            lines.append("")
            lines.append("Key issues:")
            for issue in jira.issues[:LIST_LIMIT]:
                lines.append(f"- {issue.id}: {issue.title} ({issue.status}, {issue.priority} priority)")
        else:
            lines.append("JIRA: No active issues found")

        if jira.recent_activity:
            lines.append(f"- {len(jira.recent_activity)} issues updated in the window")

        lines.append("")
        lines.append("GitHub Activity:")
        lines.append(f"- {github.commit_count} recent commits")
        lines.append(f"- {github.open_pr_count} open pull requests")
        lines.append(f"- Active in {github.repository_count} repositories")
        if github.active_repositories:
            lines.append(f"- Repositories: {', '.join(github.active_repositories)}")

        if github.commits:
            lines.append("")
            lines.append("Recent commits:")
            for commit in github.commits[:LIST_LIMIT]:
                lines.append(f"- {commit.first_line} ({commit.repository})")

        if github.pull_requests:
            lines.append("")
            lines.append("Open PRs:")
            for pr in github.pull_requests[:LIST_LIMIT]:
                lines.append(f"- {pr.title} ({pr.repository})")

        if enriched.linked:
            lines.append("")
            lines.append(
                f"Linked work: {_linked_commit_count(enriched)} commits connected to JIRA tickets"
            )
            for pair in enriched.linked:
                lines.append(f"- {pair.commit.short_hash} -> {pair.ticket.id}")

        lines.append("")
        lines.append(
            f"Activity level: {enriched.metrics.activity_level.value} "
            f"(score {enriched.metrics.activity_score}, {enriched.metrics.total_items} total items)"
        )

        if enriched.patterns:
            lines.append("")
            lines.append("Notable patterns:")
            for pattern in enriched.patterns:
                lines.append(f"- {pattern.description}")

        lines.append("")
        lines.append("Provide a friendly, conversational summary that answers the question naturally.")
        return "\n".join(lines)

    def render_template(self, parsed: ParsedQuery, enriched: EnrichedModel, display_name: str) -> str:
        """Deterministic narrative; no external calls."""
        jira = enriched.tracker
        github = enriched.code_host
        lines = [f"Here's what {display_name} has been working on:", ""]

        # JIRA section
        if jira.count > 0:
            lines.append(f"📋 **JIRA Activity** ({jira.count} active issues):")
            if jira.high_priority > 0:
                lines.append(f"⚠️ {jira.high_priority} high-priority items")
            lines.append(f"Status: {_breakdown(jira.by_status)}")
            lines.append(f"Priority: {_breakdown(jira.by_priority)}")
            lines.append(f"Type: {_breakdown(jira.by_category)}")
            lines.append("")
            lines.append("Key issues:")
            for issue in jira.issues[:LIST_LIMIT]:
                lines.append(f"  • {issue.id}: {issue.title} - {issue.status} ({issue.priority})")
        else:
            lines.append("📋 **JIRA**: No active issues found")
        if jira.recent_activity:
            lines.append(f"🕒 {len(jira.recent_activity)} issues updated in the window")
        lines.append("")

        # GitHub section
        lines.append("💻 **GitHub Activity**:")
        lines.append(f"  • {github.commit_count} recent commits")
        lines.append(f"  • {github.open_pr_count} open pull requests")
        lines.append(f"  • Active in {github.repository_count} repositories")
        if github.active_repositories:
            lines.append(f"  • Repositories: {', '.join(github.active_repositories)}")

        if github.commits:
            lines.append("")
            lines.append("Recent commits:")
            for commit in github.commits[:LIST_LIMIT]:
                lines.append(f"  • {commit.first_line} ({commit.repository})")

        if github.pull_requests:
            lines.append("")
            lines.append("Open pull requests:")
            for pr in github.pull_requests[:LIST_LIMIT]:
                lines.append(f"  • {pr.title} ({pr.repository})")

        if enriched.linked:
            lines.append("")
            lines.append(
                f"🔗 **Linked Work**: {_linked_commit_count(enriched)} commits are connected to JIRA tickets"
            )
            for pair in enriched.linked:
                lines.append(f"  • {pair.commit.short_hash} → {pair.ticket.id}")

        lines.append("")
        lines.append(
            f"📊 **Activity Level**: {enriched.metrics.activity_level.value} "
            f"(score {enriched.metrics.activity_score}, "
            f"{enriched.metrics.total_items} total items in the last {enriched.metrics.window_days} days)"
        )

        if enriched.patterns:
            lines.append("")
            lines.append("💡 **Notable Patterns**:")
            for pattern in enriched.patterns:
                lines.append(f"  • {pattern.description}")

        return "\n".join(lines)

    @staticmethod
    def generate_error_response(kind: ErrorKind, display_name: str | None) -> str:
        """Fixed user-facing sentence for an error kind."""
        return ERROR_RESPONSES[kind].format(name=display_name or "that person")


def _breakdown(counts: dict[str, int]) -> str:
    return ", ".join(f"{name} ({count})" for name, count in counts.items())


def _linked_commit_count(enriched: EnrichedModel) -> int:
    """Distinct commits among the linked pairs; one commit may link several tickets."""
    return len({(pair.commit.repository, pair.commit.short_hash) for pair in enriched.linked})
