"""Cross-source aggregation workflow for teampulse."""

from teampulse.workflows.aggregator import ActivityAggregator
from teampulse.workflows.models import AggregatedActivity, CodeHostBundle, FetchFault, TrackerBundle

__all__ = [
    "ActivityAggregator",
    "AggregatedActivity",
    "CodeHostBundle",
    "FetchFault",
    "TrackerBundle",
]
