"""
Query parser - turns a free-text question into a ParsedQuery.

Heuristic, not NLP:
- names are capitalized words left over after stripping the question phrasing
- time windows come from a fixed list of phrases, first listed match wins
- intent and platform come from keyword substring checks
"""

import logging
import re

from teampulse.query.models import ParsedQuery, PlatformBias, QueryIntent

logger = logging.getLogger(__name__)


LEADING_REQUEST_RE = re.compile(r"^(what|show|tell|give|list|find)\s+((me|us)\s+)?", re.IGNORECASE)
LEADING_AUXILIARY_RE = re.compile(r"^(is|has|have|was|were|does|did)\s+", re.IGNORECASE)
FILLER_RE = re.compile(r"\s+(working|been|doing|up|on|committed|created)\b", re.IGNORECASE)

NAME_TOKEN_RE = re.compile(r"^[A-Z][a-z]+$")
NAME_FALLBACK_RE = re.compile(r"\b[A-Z][a-z]+(?:\s+[A-Z][a-z]+)?\b")
TOKEN_PUNCTUATION = ".,!?;:\"()[]{}"
MAX_NAME_TOKENS = 3

STOP_WORDS = frozenset({
    # question words and phrasing
    "what", "who", "how", "when", "where", "which", "why", "show", "tell", "give",
    "list", "find", "can", "could", "would", "will", "please", "about", "any",
    "the", "me", "us",
    # verbs
    "is", "has", "have", "was", "were", "does", "did", "working", "been", "doing",
    "up", "on", "committed", "created", "merged", "opened",
    # time words
    "recent", "recently", "lately", "these", "days", "this", "last", "week",
    "month", "today", "yesterday",
    # platform nouns
    "jira", "github", "ticket", "tickets", "issue", "issues", "commit", "commits",
    "pull", "request", "requests", "pr", "prs", "code", "repository",
    "repositories", "repo", "repos",
})

# Priority order matters: the first pattern in this list that matches wins,
# regardless of where in the text it appears.
TIME_PATTERNS = [
    (re.compile(r"this\s+week", re.IGNORECASE), 7),
    (re.compile(r"last\s+week", re.IGNORECASE), 14),
    (re.compile(r"this\s+month", re.IGNORECASE), 30),
    (re.compile(r"last\s+month", re.IGNORECASE), 60),
    (re.compile(r"recently|lately|these\s+days", re.IGNORECASE), 14),
    (re.compile(r"today", re.IGNORECASE), 1),
    (re.compile(r"yesterday", re.IGNORECASE), 2),
]

# Substring checks, so order matters ("pr" would otherwise shadow others)
INTENT_KEYWORDS = [
    (("pull request", "pr"), QueryIntent.PULL_REQUESTS),
    (("commit",), QueryIntent.COMMITS),
    (("ticket", "issue"), QueryIntent.ISSUES),
    (("repository", "repo"), QueryIntent.REPOSITORIES),
]

PLATFORM_KEYWORDS = {
    PlatformBias.JIRA: ("jira", "ticket", "issue", "task", "bug", "story"),
    PlatformBias.GITHUB: ("github", "commit", "pull request", "pr", "code", "repository", "repo"),
}


class QueryParser:
    """Extracts subject, window, intent and platform bias from a question."""

    def parse(self, text: str) -> ParsedQuery:
        """Parse a question. Never raises; missing signals stay None/default."""
        if not isinstance(text, str):
            text = ""
        parsed = ParsedQuery(
            original_text=text,
            subject_name=self.extract_name(text),
            window_days=self.extract_window(text),
            intent=self.extract_intent(text),
            platform_bias=self.extract_platform(text),
        )
        logger.debug(f"Parsed query: {parsed.model_dump()}")
        return parsed

    def extract_name(self, text: str) -> str | None:
        cleaned = LEADING_REQUEST_RE.sub("", text.strip())
        cleaned = LEADING_AUXILIARY_RE.sub("", cleaned)
        cleaned = FILLER_RE.sub("", cleaned).strip()

        candidates: list[str] = []
        for raw in cleaned.split():
            word = _normalize_token(raw)
            if NAME_TOKEN_RE.match(word) and not self.is_common_word(word):
                candidates.append(word)
                # A name doesn't run past punctuation ("Maya, Jordan")
                if len(candidates) >= MAX_NAME_TOKENS or raw[-1] in TOKEN_PUNCTUATION:
                    break
            elif candidates:
                break

        if candidates:
            return " ".join(candidates)

        match = NAME_FALLBACK_RE.search(cleaned)
        return match.group(0) if match else None

    @staticmethod
    def is_common_word(word: str) -> bool:
        return word.lower() in STOP_WORDS

    @staticmethod
    def extract_window(text: str) -> int | None:
        for pattern, days in TIME_PATTERNS:
            if pattern.search(text):
                return days
        return None

    @staticmethod
    def extract_intent(text: str) -> QueryIntent:
        normalized = text.lower()
        for keywords, intent in INTENT_KEYWORDS:
            if any(keyword in normalized for keyword in keywords):
                return intent
        return QueryIntent.GENERAL

    @staticmethod
    def extract_platform(text: str) -> PlatformBias:
        normalized = text.lower()
        jira_score = sum(1 for kw in PLATFORM_KEYWORDS[PlatformBias.JIRA] if kw in normalized)
        github_score = sum(1 for kw in PLATFORM_KEYWORDS[PlatformBias.GITHUB] if kw in normalized)

        if jira_score > github_score:
            return PlatformBias.JIRA
        if github_score > jira_score:
            return PlatformBias.GITHUB
        return PlatformBias.BOTH


def _normalize_token(raw: str) -> str:
    """Trim surrounding punctuation and a possessive 's from a token."""
    word = raw.strip(TOKEN_PUNCTUATION)
    for suffix in ("'s", "’s"):
        if word.endswith(suffix):
            word = word[: -len(suffix)]
    return word.strip(TOKEN_PUNCTUATION)
