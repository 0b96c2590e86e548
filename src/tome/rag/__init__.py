"""Question answering over the knowledge base."""

from .router import EMPTY_STORE_RESPONSE, QueryRouter
from .types import QueryMetadata, QueryOptions, QueryResult, SourceAttribution

__all__ = [
    "EMPTY_STORE_RESPONSE",
    "QueryMetadata",
    "QueryOptions",
    "QueryResult",
    "QueryRouter",
    "SourceAttribution",
]
