"""Enrichment engine for teampulse."""

from teampulse.enrichment.enricher import DataEnricher, activity_level_for
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

__all__ = [
    "ActivityLevel",
    "CodeHostSummary",
    "DataEnricher",
    "EnrichedModel",
    "LinkedPair",
    "Metrics",
    "PatternFlag",
    "PatternImpact",
    "PatternKind",
    "TrackerSummary",
    "activity_level_for",
]
