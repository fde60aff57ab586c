"""
Data enricher - fuses Jira and GitHub record sets into one EnrichedModel.

- Links GitHub commits to Jira tickets via ticket ids in commit messages
- Summarizes each source (tallies, high-priority count, active repositories)
- Scores overall activity
- Flags notable work patterns

Pure and deterministic: no I/O, and the output doesn't depend on the order
in which the fetches completed.
"""

from collections import Counter

from teampulse.config import (
    ACTIVE_REPOSITORY_LIMIT,
    COMMIT_WEIGHT,
    GOOD_TRACKING_RATIO,
    HIGH_ACTIVITY_SCORE,
    HIGH_PRIORITY_NAMES,
    HIGH_PRIORITY_PATTERN_THRESHOLD,
    ISSUE_WEIGHT,
    MANY_OPEN_PRS_THRESHOLD,
    MEDIUM_ACTIVITY_SCORE,
    MULTI_REPOSITORY_THRESHOLD,
    PULL_REQUEST_WEIGHT,
)
from teampulse.enrichment.models import (
    ActivityLevel,
    CodeHostSummary,
    EnrichedModel,
    LinkedPair,
    Metrics,
    PatternFlag,
    PatternImpact,
    PatternKind,
    TrackerSummary,
)
from teampulse.tools.models import Commit, TrackerIssue
from teampulse.workflows.models import CodeHostBundle, TrackerBundle


def activity_level_for(score: int) -> ActivityLevel:
    """Map an activity score onto a level. Thresholds are strict."""
    if score > HIGH_ACTIVITY_SCORE:
        return ActivityLevel.HIGH
    if score > MEDIUM_ACTIVITY_SCORE:
        return ActivityLevel.MEDIUM
    return ActivityLevel.LOW


def count_high_priority(issues: list[TrackerIssue]) -> int:
    return sum(1 for issue in issues if issue.priority in HIGH_PRIORITY_NAMES)


class DataEnricher:
    """Combines per-source bundles into the enriched model."""

    def enrich(self, tracker: TrackerBundle, code_host: CodeHostBundle, window_days: int) -> EnrichedModel:
        linked = self.link_commits_to_tickets(code_host.commits, tracker.issues)
        return EnrichedModel(
            tracker=self.summarize_tracker(tracker),
            code_host=self.summarize_code_host(code_host),
            linked=linked,
            metrics=self.calculate_metrics(tracker, code_host, window_days),
            patterns=self.identify_work_patterns(tracker, code_host, linked),
        )

    def summarize_tracker(self, tracker: TrackerBundle) -> TrackerSummary:
        issues = tracker.issues
        return TrackerSummary(
            count=len(issues),
            by_status=dict(Counter(issue.status for issue in issues)),
            by_priority=dict(Counter(issue.priority for issue in issues)),
            by_category=dict(Counter(issue.category or "Unknown" for issue in issues)),
            high_priority=count_high_priority(issues),
            issues=issues,
            recent_activity=tracker.recent_activity,
        )

    def summarize_code_host(self, code_host: CodeHostBundle) -> CodeHostSummary:
        repos = code_host.repositories
        return CodeHostSummary(
            commit_count=len(code_host.commits),
            open_pr_count=len(code_host.pull_requests),
            repository_count=len(repos),
            # Repositories arrive sorted by most recent commit
            active_repositories=[repo.name for repo in repos[:ACTIVE_REPOSITORY_LIMIT]],
            commits=code_host.commits,
            pull_requests=code_host.pull_requests,
            repositories=repos,
        )

    @staticmethod
    def link_commits_to_tickets(commits: list[Commit], issues: list[TrackerIssue]) -> list[LinkedPair]:
        """One pair per (commit, referenced ticket) where the ticket was fetched for this query."""
        issues_by_id = {issue.id: issue for issue in issues}
        linked = []
        for commit in commits:
            for ticket_id in sorted(commit.referenced_ticket_ids):
                issue = issues_by_id.get(ticket_id)
                if issue is not None:
                    linked.append(LinkedPair(commit=commit, ticket=issue))
        return linked

    @staticmethod
    def calculate_metrics(tracker: TrackerBundle, code_host: CodeHostBundle, window_days: int) -> Metrics:
        issue_count = len(tracker.issues)
        commit_count = len(code_host.commits)
        pr_count = len(code_host.pull_requests)

        activity_score = (
            issue_count * ISSUE_WEIGHT
            + commit_count * COMMIT_WEIGHT
            + pr_count * PULL_REQUEST_WEIGHT
        )
        return Metrics(
            activity_score=activity_score,
            activity_level=activity_level_for(activity_score),
            # Repositories are a view over commits, not counted separately
            total_items=issue_count + commit_count + pr_count,
            window_days=window_days,
        )

    @staticmethod
    def identify_work_patterns(
        tracker: TrackerBundle,
        code_host: CodeHostBundle,
        linked: list[LinkedPair],
    ) -> list[PatternFlag]:
        patterns = []

        high_priority_count = count_high_priority(tracker.issues)
        if high_priority_count > HIGH_PRIORITY_PATTERN_THRESHOLD:
            patterns.append(PatternFlag(
                kind=PatternKind.MULTIPLE_HIGH_PRIORITY,
                description=f"Working on {high_priority_count} high-priority items",
                impact=PatternImpact.HIGH,
            ))

        repo_count = len({commit.repository for commit in code_host.commits})
        if repo_count > MULTI_REPOSITORY_THRESHOLD:
            patterns.append(PatternFlag(
                kind=PatternKind.MULTI_REPOSITORY,
                description=f"Contributing to {repo_count} different repositories",
                impact=PatternImpact.MEDIUM,
            ))

        pr_count = len(code_host.pull_requests)
        if pr_count > MANY_OPEN_PRS_THRESHOLD:
            patterns.append(PatternFlag(
                kind=PatternKind.MANY_OPEN_PRS,
                description=f"Has {pr_count} open pull requests",
                impact=PatternImpact.MEDIUM,
            ))

        if len(linked) > len(code_host.commits) * GOOD_TRACKING_RATIO:
            patterns.append(PatternFlag(
                kind=PatternKind.GOOD_TRACKING,
                description="Most commits are linked to JIRA tickets",
                impact=PatternImpact.POSITIVE,
            ))

        return patterns
