"""Tests for HTTP error classification and error payloads."""

import httpx
import pytest

from teampulse.errors import (
    AuthenticationError,
    ClientError,
    NotFoundError,
    RateLimitError,
    ServerError,
    UpstreamFaultError,
    UserNotFoundError,
    classify_http_error,
    error_payload,
)


def status_error(status: int, headers: dict | None = None) -> httpx.HTTPStatusError:
    request = httpx.Request("GET", "https://api.github.com/users/maya")
    response = httpx.Response(status, headers=headers, request=request)
    return httpx.HTTPStatusError("error", request=request, response=response)


@pytest.mark.parametrize("status, headers, error_type", [
    (429, None, RateLimitError),
    (403, {"x-ratelimit-remaining": "0"}, RateLimitError),
    (403, {"x-ratelimit-remaining": "12"}, AuthenticationError),
    (401, None, AuthenticationError),
    (404, None, NotFoundError),
    (410, None, NotFoundError),
    (422, None, ClientError),
    (500, None, ServerError),
    (503, None, ServerError),
])
def test_classify_http_error(status, headers, error_type):
    error = classify_http_error("github", "get_user", status_error(status, headers))

    assert type(error) is error_type
    assert error.status_code == status
    assert error.operation == "get_user"


def test_user_not_found_payload():
    assert error_payload(UserNotFoundError("Zed")) == {
        "type": "user_not_found",
        "message": 'User "Zed" not found',
        "user_name": "Zed",
    }


def test_upstream_fault_payload_names_platform_only():
    cause = ClientError("jira", "search_issues", 400, message="secret upstream body")
    payload = error_payload(UpstreamFaultError("jira", "issues", cause))

    assert payload["type"] == "upstream_fault"
    assert payload["platform"] == "jira"
    assert "secret" not in payload["message"]
