"""Semantic index for Tome."""

from .engine import RetrieverQueryEngine
from .synchronizer import IndexState, IndexSynchronizer
from .types import (
    EngineResponse,
    IndexBackend,
    IndexNode,
    NodeWithScore,
    QueryEngine,
    RetrievalFilters,
    SemanticIndex,
    node_from_document,
)

__all__ = [
    "EngineResponse",
    "IndexBackend",
    "IndexNode",
    "IndexState",
    "IndexSynchronizer",
    "NodeWithScore",
    "QueryEngine",
    "RetrievalFilters",
    "RetrieverQueryEngine",
    "SemanticIndex",
    "node_from_document",
]
