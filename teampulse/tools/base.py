"""
Resilient source client - the shared shape of the Jira and GitHub clients.

Each concrete client wraps a raw API (the capability that talks HTTP) and
adds:
- a per-instance TTL cache, consulted before any network call
- retry with backoff around every raw call
- adapters from raw payloads to normalized records
- a failure-policy table saying, per operation, which failures degrade to
  an empty result and which propagate as UpstreamFaultError
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Awaitable, Callable, Hashable, TypeVar

from pydantic import BaseModel, ConfigDict

from teampulse.config import DEFAULT_CACHE_TTL_SECONDS, DEFAULT_MAX_RETRY_ATTEMPTS
from teampulse.errors import (
    AuthenticationError,
    ClientError,
    NotConfiguredError,
    NotFoundError,
    SourceError,
    UpstreamFaultError,
)
from teampulse.tools.cache import TTLCache
from teampulse.tools.models import ActivityKind, Identity
from teampulse.tools.retry import Sleep, retry_with_backoff

logger = logging.getLogger(__name__)

T = TypeVar("T")


class FailureAction(str, Enum):
    EMPTY = "empty"  # degrade to an empty result
    PROPAGATE = "propagate"  # raise UpstreamFaultError


class FailurePolicy(BaseModel):
    """What one operation does with each class of failure."""
    model_config = ConfigDict(frozen=True)

    not_found: FailureAction = FailureAction.EMPTY
    client_error: FailureAction = FailureAction.EMPTY
    auth: FailureAction = FailureAction.EMPTY
    transient: FailureAction = FailureAction.EMPTY  # retries exhausted

    def action_for(self, error: SourceError) -> FailureAction:
        if isinstance(error, NotFoundError):
            return self.not_found
        if isinstance(error, (AuthenticationError, NotConfiguredError)):
            return self.auth
        if isinstance(error, ClientError):
            return self.client_error
        return self.transient


DEGRADE_TO_EMPTY = FailurePolicy()


class ResilientSourceClient(ABC):
    """Base class for source clients. Subclasses fill in the lookups and fetches."""

    source: str = ""
    failure_policies: dict[ActivityKind, FailurePolicy] = {}
    # Kinds whose results don't depend on the window, so the window isn't part of their cache key
    unwindowed_kinds: frozenset[ActivityKind] = frozenset()

    def __init__(
        self,
        cache: TTLCache | None = None,
        max_attempts: int = DEFAULT_MAX_RETRY_ATTEMPTS,
        sleep: Sleep = asyncio.sleep,
    ):
        self.cache = cache if cache is not None else TTLCache(DEFAULT_CACHE_TTL_SECONDS)
        self.max_attempts = max_attempts
        self.sleep = sleep

    async def resolve_identity(self, name: str) -> Identity | None:
        """
        Resolve a subject name to this source's identity.

        Returns None when nothing matches, the source isn't configured, the
        credentials are rejected, or the lookup keeps failing. Never raises
        for those cases.
        """
        cache_key = ("user", name.strip().lower())
        cached = self.cache.get(cache_key)
        if cached is not None:
            return cached

        try:
            identity = await self._lookup_identity(name)
        except NotConfiguredError:
            logger.warning(f"{self.source} credentials not configured. Skipping {self.source} user lookup.")
            return None
        except AuthenticationError:
            logger.warning(f"{self.source} authentication failed. Please check the {self.source} credentials.")
            return None
        except SourceError as e:
            logger.error(f"Error finding {self.source} user {name}: {e}")
            return None

        if identity is not None:
            self.cache.set(cache_key, identity)
        return identity

    async def fetch_activity(self, identity: Identity, kind: ActivityKind, window_days: int) -> list:
        """
        Fetch one record set for an identity.

        Always returns a list. Raises UpstreamFaultError only when this
        operation's failure policy says the failure must propagate.
        """
        policy = self.failure_policies.get(kind)
        if policy is None:
            raise ValueError(f"{self.source} client does not provide {kind.value}")

        cache_key = self.activity_cache_key(kind, identity, window_days)
        cached = self.cache.get(cache_key)
        if cached is not None:
            return cached

        try:
            records = await self._fetch(identity, kind, window_days)
        except SourceError as e:
            if policy.action_for(e) is FailureAction.PROPAGATE:
                logger.error(f"{self.source} {kind.value} fetch failed for {identity.key}: {e}", exc_info=True)
                raise UpstreamFaultError(self.source, kind.value, e) from e
            logger.warning(f"{self.source} {kind.value} fetch degraded to empty for {identity.key}: {e}")
            return []

        self.cache.set(cache_key, records)
        return records

    def activity_cache_key(self, kind: ActivityKind, identity: Identity, window_days: int) -> Hashable:
        if kind in self.unwindowed_kinds:
            return (kind.value, identity.key)
        return (kind.value, identity.key, window_days)

    async def _call(self, fn: Callable[[], Awaitable[T]]) -> T:
        """Run one raw API call under the retry policy."""
        return await retry_with_backoff(fn, max_attempts=self.max_attempts, sleep=self.sleep)

    @abstractmethod
    async def _lookup_identity(self, name: str) -> Identity | None:
        """One network lookup for `name`. May raise SourceError."""

    @abstractmethod
    async def _fetch(self, identity: Identity, kind: ActivityKind, window_days: int) -> list[Any]:
        """Fetch and normalize one record set. May raise SourceError."""
