"""Query interpretation for teampulse."""

from teampulse.query.models import ParsedQuery, PlatformBias, QueryIntent
from teampulse.query.parser import QueryParser

__all__ = [
    "ParsedQuery",
    "PlatformBias",
    "QueryIntent",
    "QueryParser",
]
