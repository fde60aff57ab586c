"""Tests for narrative generation."""

import pytest

from conftest import JIRA_BASE_URL, FakeCompletion, commit_item, jira_issue
from teampulse.enrichment import DataEnricher
from teampulse.errors import ErrorKind
from teampulse.narrative import ResponseGenerator
from teampulse.narrative.generator import SYSTEM_PROMPT
from teampulse.query import QueryParser
from teampulse.tools.github import summarize_repositories, to_commit
from teampulse.tools.jira import to_tracker_issue
from teampulse.workflows.models import CodeHostBundle, TrackerBundle

QUESTION = "What is Maya working on these days?"


@pytest.fixture
def parsed():
    return QueryParser().parse(QUESTION)


@pytest.fixture
def enriched():
    issues = [
        to_tracker_issue(jira_issue("ABC-1", "Fix login", priority="High", issue_type="Bug"), JIRA_BASE_URL),
        to_tracker_issue(jira_issue("ABC-2", "Write docs"), JIRA_BASE_URL),
    ]
    commits = [
        to_commit(commit_item("1" * 40, "ABC-1 patch session handling")),
        to_commit(commit_item("2" * 40, "tidy up")),
        to_commit(commit_item("3" * 40, "bump deps")),
    ]
    return DataEnricher().enrich(
        TrackerBundle(issues=issues, recent_activity=issues[:1]),
        CodeHostBundle(commits=commits, repositories=summarize_repositories(commits)),
        14,
    )


@pytest.fixture
def empty():
    return DataEnricher().enrich(TrackerBundle(), CodeHostBundle(), 14)


async def test_template_covers_every_section(parsed, enriched):
    text = await ResponseGenerator().generate(parsed, enriched, "Maya")

    assert text.startswith("Here's what Maya has been working on:")
    assert "📋 **JIRA Activity** (2 active issues):" in text
    assert "ABC-1: Fix login" in text
    assert "2 recent commits" not in text
    assert "3 recent commits" in text
    assert "0 open pull requests" in text
    assert "Active in 1 repositories" in text
    assert "🔗 **Linked Work**: 1 commits are connected to JIRA tickets" in text
    assert "  • 1111111 → ABC-1" in text
    assert "Status: In Progress (2)" in text
    assert "Priority: High (1), Medium (1)" in text
    assert "Type: Bug (1), Task (1)" in text
    assert "1 issues updated in the window" in text
    assert "📊 **Activity Level**: low (score 7, 5 total items in the last 14 days)" in text


async def test_linked_work_counts_distinct_commits(parsed):
    issues = [
        to_tracker_issue(jira_issue("ABC-1"), JIRA_BASE_URL),
        to_tracker_issue(jira_issue("ABC-2"), JIRA_BASE_URL),
    ]
    commits = [to_commit(commit_item("4" * 40, "ABC-1 and ABC-2 together"))]
    model = DataEnricher().enrich(TrackerBundle(issues=issues), CodeHostBundle(commits=commits), 14)

    text = ResponseGenerator().render_template(parsed, model, "Maya")

    assert len(model.linked) == 2
    assert "🔗 **Linked Work**: 1 commits are connected to JIRA tickets" in text
    assert "  • 4444444 → ABC-1" in text
    assert "  • 4444444 → ABC-2" in text


async def test_template_without_jira_issues(parsed):
    commits = [to_commit(commit_item("1" * 40, "tidy up"))]
    model = DataEnricher().enrich(TrackerBundle(), CodeHostBundle(commits=commits), 14)

    text = ResponseGenerator().render_template(parsed, model, "Maya")

    assert "📋 **JIRA**: No active issues found" in text
    assert "🔗" not in text
    assert "💡" not in text


async def test_no_activity_short_circuits_generation(parsed, empty):
    completion = FakeCompletion(reply="should not be used")
    text = await ResponseGenerator(completion).generate(parsed, empty, "Maya")

    assert text.startswith("Maya doesn't appear to have any recent activity on JIRA or GitHub.")
    assert completion.prompts == []


async def test_uses_completion_when_available(parsed, enriched):
    completion = FakeCompletion(reply="Maya is busy fixing login.")
    text = await ResponseGenerator(completion).generate(parsed, enriched, "Maya")

    assert text == "Maya is busy fixing login."
    system_prompt, user_prompt = completion.prompts[0]
    assert system_prompt == SYSTEM_PROMPT
    assert QUESTION in user_prompt
    assert "- 2 active issues" in user_prompt
    assert "- 3 recent commits" in user_prompt
    assert "Activity level: low" in user_prompt


async def test_completion_failure_falls_back_to_template(parsed, enriched):
    completion = FakeCompletion(error=RuntimeError("vertex unavailable"))
    text = await ResponseGenerator(completion).generate(parsed, enriched, "Maya")

    assert text == ResponseGenerator().render_template(parsed, enriched, "Maya")


def test_user_not_found_sentence():
    text = ResponseGenerator.generate_error_response(ErrorKind.USER_NOT_FOUND, "Ghost")
    assert text == (
        'I couldn\'t find "Ghost" in JIRA or GitHub. Please check the spelling or try a different name.'
    )


@pytest.mark.parametrize("kind", list(ErrorKind))
def test_every_error_kind_has_a_sentence(kind):
    text = ResponseGenerator.generate_error_response(kind, "Maya")
    assert text
    assert "{" not in text
