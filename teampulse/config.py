"""
Configuration for teampulse.

Credentials and tuning knobs come from the environment (a local .env is
loaded first). Business-rule cut points used by the enrichment engine live
here as named constants.
"""

import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel

project_root = Path(__file__).resolve().parent.parent
env_path = project_root / ".env"
if env_path.exists():
    load_dotenv(env_path)
else:
    load_dotenv()


# Values copied verbatim from .env.example count as "not configured"
PLACEHOLDER_TOKENS = {
    "your-jira-api-token",
    "your-github-personal-access-token",
    "your-email@example.com",
    "https://your-jira-instance.atlassian.net",
}

DEFAULT_WINDOW_DAYS = 14
DEFAULT_CACHE_TTL_SECONDS = 300.0
DEFAULT_MAX_RETRY_ATTEMPTS = 3

# GitHub preflight: below this many remaining requests, wait for the reset
RATE_LIMIT_LOW_WATER_MARK = 10

# Activity score weights
ISSUE_WEIGHT = 2
COMMIT_WEIGHT = 1
PULL_REQUEST_WEIGHT = 3

# activity_level: score > HIGH -> high, score > MEDIUM -> medium, else low
HIGH_ACTIVITY_SCORE = 20
MEDIUM_ACTIVITY_SCORE = 10

# Work-pattern cut points (all strict "greater than")
HIGH_PRIORITY_NAMES = frozenset({"High", "Highest", "Critical"})
HIGH_PRIORITY_PATTERN_THRESHOLD = 3
MULTI_REPOSITORY_THRESHOLD = 5
MANY_OPEN_PRS_THRESHOLD = 5
GOOD_TRACKING_RATIO = 0.5

ACTIVE_REPOSITORY_LIMIT = 5
RECENT_REPOSITORY_LIMIT = 10


def is_configured(value: str | None) -> bool:
    """True when a credential is present and isn't an example placeholder."""
    return bool(value) and value not in PLACEHOLDER_TOKENS


class JiraSettings(BaseModel):
    """Jira Cloud connection settings."""
    base_url: str | None = None
    email: str | None = None
    api_token: str | None = None

    @property
    def configured(self) -> bool:
        return all(is_configured(v) for v in (self.base_url, self.email, self.api_token))


class GitHubSettings(BaseModel):
    """GitHub connection settings."""
    api_token: str | None = None
    organization: str | None = None

    @property
    def configured(self) -> bool:
        return is_configured(self.api_token)


class LLMSettings(BaseModel):
    """Gemini (Vertex AI) settings for the generative narrative strategy."""
    enabled: bool = False
    project_id: str | None = None
    location: str = "global"
    model: str = "gemini-2.5-flash"


class Settings(BaseModel):
    jira: JiraSettings = JiraSettings()
    github: GitHubSettings = GitHubSettings()
    llm: LLMSettings = LLMSettings()
    cache_ttl_seconds: float = DEFAULT_CACHE_TTL_SECONDS
    max_retry_attempts: int = DEFAULT_MAX_RETRY_ATTEMPTS
    default_window_days: int = DEFAULT_WINDOW_DAYS


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def load_settings() -> Settings:
    """Build Settings from environment variables."""
    project_id = os.getenv("GCP_PROJECT_ID")
    return Settings(
        jira=JiraSettings(
            base_url=(os.getenv("JIRA_BASE_URL") or "").rstrip("/") or None,
            email=os.getenv("JIRA_API_USER"),
            api_token=os.getenv("JIRA_API_TOKEN"),
        ),
        github=GitHubSettings(
            api_token=os.getenv("GITHUB_TOKEN"),
            organization=os.getenv("GITHUB_OWNER"),
        ),
        llm=LLMSettings(
            enabled=_env_flag("USE_LLM", default=bool(project_id)),
            project_id=project_id,
            location=os.getenv("GCP_LOCATION", "global"),
            model=os.getenv("GEMINI_MODEL", "gemini-2.5-flash"),
        ),
        cache_ttl_seconds=float(os.getenv("CACHE_TTL_SECONDS", str(DEFAULT_CACHE_TTL_SECONDS))),
        max_retry_attempts=int(os.getenv("MAX_RETRY_ATTEMPTS", str(DEFAULT_MAX_RETRY_ATTEMPTS))),
        default_window_days=int(os.getenv("DEFAULT_WINDOW_DAYS", str(DEFAULT_WINDOW_DAYS))),
    )
