"""Search aggregation: provider adapters, retrying fan-out and summaries."""

from searchbot.search.client import SearchClient
from searchbot.search.errors import (
    ProtocolError,
    SearchConfigError,
    SearchError,
    TransientNetworkError,
    UnknownProviderError,
    ValidationError,
)
from searchbot.search.models import ResultItem
from searchbot.search.summary import deduplicate, summarize

__all__ = [
    "SearchClient",
    "ResultItem",
    "SearchError",
    "TransientNetworkError",
    "ProtocolError",
    "ValidationError",
    "UnknownProviderError",
    "SearchConfigError",
    "deduplicate",
    "summarize",
]
