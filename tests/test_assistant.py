"""End-to-end tests for the activity assistant."""

import pytest

from conftest import FakeCompletion, FakeGitHubAPI, FakeJiraAPI, commit_item, jira_issue
from teampulse.agent import ActivityAssistant
from teampulse.config import GitHubSettings, JiraSettings, LLMSettings, Settings
from teampulse.errors import ClientError, ErrorKind
from teampulse.narrative import GeminiCompletion, ResponseGenerator
from teampulse.workflows import ActivityAggregator

MAYA_JIRA = {"accountId": "acc-1", "displayName": "Maya"}
MAYA_GITHUB = {"login": "maya", "name": "Maya"}


@pytest.fixture
def build(make_jira_client, make_github_client):
    def _build(jira_api, github_api, completion=None):
        aggregator = ActivityAggregator(make_jira_client(jira_api), make_github_client(github_api))
        return ActivityAssistant(aggregator, generator=ResponseGenerator(completion))
    return _build


async def test_maya_with_issues_and_commits(build):
    jira_api = FakeJiraAPI(
        users={"Maya": MAYA_JIRA},
        issues=[jira_issue("ABC-1", priority="High"), jira_issue("ABC-2", priority="Medium")],
    )
    github_api = FakeGitHubAPI(
        users={"Maya": MAYA_GITHUB},
        commits=[commit_item(f"{n}" * 40, f"change {n}") for n in range(1, 4)],
    )

    result = await build(jira_api, github_api).answer("What is Maya working on these days?")

    assert result.error is None
    assert result.warnings == []
    assert result.parsed.subject_name == "Maya"
    assert result.data.metrics.activity_score == 7
    assert result.data.metrics.activity_level.value == "low"
    assert result.data.metrics.total_items == 5
    assert "Maya" in result.response
    assert "2 active issues" in result.response
    assert "3 recent commits" in result.response
    assert result.users.jira.account_id == "acc-1"
    assert result.users.github.login == "maya"


async def test_user_not_found(build):
    result = await build(FakeJiraAPI(), FakeGitHubAPI()).answer("What is Zed working on?")

    assert result.error["type"] == ErrorKind.USER_NOT_FOUND.value
    assert result.error["user_name"] == "Zed"
    assert result.response == (
        'I couldn\'t find "Zed" in JIRA or GitHub. Please check the spelling or try a different name.'
    )
    assert result.data is None


async def test_resolved_on_code_host_only_with_no_activity(build):
    github_api = FakeGitHubAPI(users={"Maya": MAYA_GITHUB})

    result = await build(FakeJiraAPI(), github_api).answer("What is Maya working on?")

    assert result.error["type"] == ErrorKind.NO_ACTIVITY.value
    assert result.data.metrics.total_items == 0
    assert result.users.jira is None
    assert result.users.github.login == "maya"
    assert "doesn't appear to have any recent activity" in result.response


async def test_commit_ticket_references_are_deduplicated(build):
    jira_api = FakeJiraAPI(users={"Maya": MAYA_JIRA}, issues=[jira_issue("ABC-123")])
    github_api = FakeGitHubAPI(
        users={"Maya": MAYA_GITHUB},
        commits=[commit_item("a" * 40, "fix ABC-123 and ABC-123 again")],
    )

    result = await build(jira_api, github_api).answer("What is Maya working on?")

    commit = result.data.code_host.commits[0]
    assert commit.referenced_ticket_ids == frozenset({"ABC-123"})
    assert len(result.data.linked) == 1


async def test_no_subject_makes_no_calls(build):
    jira_api, github_api = FakeJiraAPI(), FakeGitHubAPI()

    result = await build(jira_api, github_api).answer("what is going on?")

    assert result.error["type"] == ErrorKind.SUBJECT_NOT_EXTRACTED.value
    assert "What is [name] working on?" in result.response
    assert jira_api.calls == []
    assert github_api.calls == []


async def test_upstream_fault_with_nothing_else(build):
    jira_api = FakeJiraAPI(users={"Maya": MAYA_JIRA})
    jira_api.search_issue_errors = [ClientError("jira", "search_issues", 400)]

    result = await build(jira_api, FakeGitHubAPI()).answer("What is Maya working on?")

    assert result.error["type"] == ErrorKind.UPSTREAM_FAULT.value
    assert result.error["platform"] == "jira"
    assert [(w.source, w.operation) for w in result.warnings] == [("jira", "issues")]


async def test_upstream_fault_with_other_data_is_a_warning(build):
    jira_api = FakeJiraAPI(users={"Maya": MAYA_JIRA})
    jira_api.search_issue_errors = [ClientError("jira", "search_issues", 400)]
    github_api = FakeGitHubAPI(users={"Maya": MAYA_GITHUB}, commits=[commit_item("a" * 40, "work")])

    result = await build(jira_api, github_api).answer("What is Maya working on?")

    assert result.error is None
    assert [(w.source, w.operation) for w in result.warnings] == [("jira", "issues")]
    assert "1 recent commits" in result.response


async def test_unexpected_exception_becomes_upstream_fault(build):
    assistant = build(FakeJiraAPI(), FakeGitHubAPI())

    async def explode(name, window_days):
        raise RuntimeError("boom")

    assistant.aggregator.aggregate = explode
    result = await assistant.answer("What is Maya working on?")

    assert result.error["type"] == ErrorKind.UPSTREAM_FAULT.value
    assert "boom" not in result.response


async def test_window_defaults_and_overrides(build):
    github_api = FakeGitHubAPI(users={"Maya": MAYA_GITHUB}, commits=[commit_item("a" * 40, "work")])
    assistant = build(FakeJiraAPI(), github_api)

    default = await assistant.answer("What is Maya working on?")
    this_week = await assistant.answer("What did Maya do this week?")

    assert default.data.metrics.window_days == 14
    assert this_week.data.metrics.window_days == 7


async def test_generative_narrative(build):
    github_api = FakeGitHubAPI(users={"Maya": MAYA_GITHUB}, commits=[commit_item("a" * 40, "work")])
    completion = FakeCompletion(reply="Maya pushed one commit.")

    result = await build(FakeJiraAPI(), github_api, completion).answer("What is Maya working on?")

    assert result.response == "Maya pushed one commit."


def test_from_settings_wires_gemini_when_enabled():
    settings = Settings(
        jira=JiraSettings(),
        github=GitHubSettings(),
        llm=LLMSettings(enabled=True, project_id="demo-project"),
        default_window_days=21,
    )

    assistant = ActivityAssistant.from_settings(settings)

    assert isinstance(assistant.generator.completion, GeminiCompletion)
    assert assistant.default_window_days == 21


def test_from_settings_without_llm_uses_template():
    assistant = ActivityAssistant.from_settings(Settings())
    assert assistant.generator.completion is None
