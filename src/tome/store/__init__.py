"""Document store package for Tome."""

from .models import (
    Document,
    DocumentDetails,
    DocumentFilter,
    DocumentMetadata,
    StoreConfig,
    StoreStats,
)
from .records import DocumentStore
from .snapshot import SnapshotGateway

__all__ = [
    "Document",
    "DocumentDetails",
    "DocumentFilter",
    "DocumentMetadata",
    "DocumentStore",
    "SnapshotGateway",
    "StoreConfig",
    "StoreStats",
]
