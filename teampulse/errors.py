"""
Error types for teampulse.

Two layers:
- SourceError and subclasses are raised by the raw Jira/GitHub APIs and
  interpreted by the retry loop and the per-operation failure policies.
- ActivityError and subclasses are the query-level outcomes surfaced to the
  caller as an ErrorKind.
"""

from enum import Enum

import httpx


class SourceError(Exception):
    """A failed call to an upstream activity source."""

    def __init__(self, source: str, operation: str, status_code: int | None = None, message: str = ""):
        self.source = source
        self.operation = operation
        self.status_code = status_code
        detail = f" (HTTP {status_code})" if status_code else ""
        super().__init__(message or f"{source} {operation} failed{detail}")


class RateLimitError(SourceError):
    """429, or 403 with an exhausted rate-limit header."""


class ServerError(SourceError):
    """5xx from the upstream."""


class TransportError(SourceError):
    """Connection-level failure (DNS, timeout, reset)."""


class AuthenticationError(SourceError):
    """401/403 - bad or expired credentials."""


class NotFoundError(SourceError):
    """404/410 - nothing there, usually a valid empty answer."""


class ClientError(SourceError):
    """Any other 4xx - the request itself is wrong."""


class NotConfiguredError(SourceError):
    """Credentials for this source are missing or still placeholders."""


RETRYABLE_ERRORS = (RateLimitError, ServerError, TransportError)


def classify_http_error(source: str, operation: str, exc: httpx.HTTPStatusError) -> SourceError:
    """Map an httpx status error onto the SourceError hierarchy."""
    response = exc.response
    status = response.status_code
    if status == 429:
        return RateLimitError(source, operation, status)
    if status == 403 and response.headers.get("x-ratelimit-remaining") == "0":
        return RateLimitError(source, operation, status)
    if status in (401, 403):
        return AuthenticationError(source, operation, status)
    if status in (404, 410):
        return NotFoundError(source, operation, status)
    if status >= 500:
        return ServerError(source, operation, status)
    return ClientError(source, operation, status)


def classify_request_error(source: str, operation: str, exc: httpx.RequestError) -> TransportError:
    return TransportError(source, operation, message=f"Failed to connect to {source}: {type(exc).__name__}")


class ErrorKind(str, Enum):
    """Query-level error kinds returned to the caller."""
    SUBJECT_NOT_EXTRACTED = "subject_not_extracted"
    USER_NOT_FOUND = "user_not_found"
    NO_ACTIVITY = "no_activity"
    UPSTREAM_FAULT = "upstream_fault"


class ActivityError(Exception):
    kind: ErrorKind = ErrorKind.UPSTREAM_FAULT

    def __init__(self, message: str, subject: str | None = None):
        super().__init__(message)
        self.subject = subject


class SubjectNotExtractedError(ActivityError):
    kind = ErrorKind.SUBJECT_NOT_EXTRACTED

    def __init__(self, query: str):
        super().__init__(f"Could not extract a name from query: {query!r}")


class UserNotFoundError(ActivityError):
    kind = ErrorKind.USER_NOT_FOUND

    def __init__(self, subject: str):
        super().__init__(f'User "{subject}" not found', subject)


class NoActivityError(ActivityError):
    kind = ErrorKind.NO_ACTIVITY

    def __init__(self, subject: str):
        super().__init__(f'No activity found for "{subject}"', subject)


class UpstreamFaultError(ActivityError):
    """A fetch whose policy is "propagate" failed."""
    kind = ErrorKind.UPSTREAM_FAULT

    def __init__(self, source: str, operation: str, cause: SourceError | None = None):
        super().__init__(f"{source} API error during {operation}")
        self.source = source
        self.operation = operation
        self.cause = cause


def error_payload(error: ActivityError) -> dict:
    """Caller-facing error dict. Never carries upstream bodies or credentials."""
    payload = {"type": error.kind.value, "message": str(error)}
    if error.subject:
        payload["user_name"] = error.subject
    if isinstance(error, UpstreamFaultError):
        payload["platform"] = error.source
    return payload
