"""
Cross-source activity aggregation.

1. Resolve the subject on Jira and GitHub concurrently.
2. For each source that resolved, run all of its activity fetches
   concurrently (across sources too) through one settle-all join.
3. A failed fetch becomes an empty list; it never blocks or empties the
   other fetches.
"""

import logging

from teampulse.errors import UpstreamFaultError, UserNotFoundError
from teampulse.tools.base import ResilientSourceClient
from teampulse.tools.concurrency import settle_all
from teampulse.tools.models import Identity
from teampulse.workflows.models import AggregatedActivity, CodeHostBundle, FetchFault, TrackerBundle

logger = logging.getLogger(__name__)


class ActivityAggregator:
    """Drives the Jira (tracker) and GitHub (code-host) clients for one subject."""

    def __init__(self, tracker: ResilientSourceClient, code_host: ResilientSourceClient):
        self.tracker = tracker
        self.code_host = code_host

    async def resolve_identities(self, subject_name: str) -> tuple[Identity | None, Identity | None]:
        """Resolve the subject on both sources at once."""
        settled = await settle_all({
            "tracker": self.tracker.resolve_identity(subject_name),
            "code_host": self.code_host.resolve_identity(subject_name),
        })
        identities = []
        for role in ("tracker", "code_host"):
            result = settled[role]
            if isinstance(result, Exception):
                logger.error(f"Identity lookup for {subject_name} failed on {role}: {result}", exc_info=result)
                result = None
            identities.append(result)
        return identities[0], identities[1]

    async def aggregate(self, subject_name: str, window_days: int) -> AggregatedActivity:
        """
        Fetch everything known about a subject within the window.

        Raises:
            UserNotFoundError: the subject resolved on neither source
        """
        tracker_identity, code_host_identity = await self.resolve_identities(subject_name)
        if tracker_identity is None and code_host_identity is None:
            raise UserNotFoundError(subject_name)

        tasks = {}
        for role, client, identity in (
            ("tracker", self.tracker, tracker_identity),
            ("code_host", self.code_host, code_host_identity),
        ):
            if identity is None:
                continue
            for kind in client.failure_policies:
                tasks[(role, kind)] = client.fetch_activity(identity, kind, window_days)

        logger.info(f"Fetching {len(tasks)} activity sets for {subject_name} over {window_days} days")
        settled = await settle_all({f"{role}:{kind.value}": call for (role, kind), call in tasks.items()})

        records: dict[str, dict[str, list]] = {"tracker": {}, "code_host": {}}
        faults = []
        for (role, kind) in tasks:
            result = settled[f"{role}:{kind.value}"]
            client = self.tracker if role == "tracker" else self.code_host
            if isinstance(result, UpstreamFaultError):
                faults.append(FetchFault(source=result.source, operation=result.operation))
                result = []
            elif isinstance(result, Exception):
                logger.error(
                    f"Unexpected error fetching {client.source} {kind.value} for {subject_name}: {result}",
                    exc_info=result,
                )
                faults.append(FetchFault(source=client.source, operation=kind.value))
                result = []
            records[role][kind.value] = result

        return AggregatedActivity(
            jira_identity=tracker_identity,
            github_identity=code_host_identity,
            tracker=TrackerBundle(**records["tracker"]),
            code_host=CodeHostBundle(**records["code_host"]),
            faults=faults,
        )
