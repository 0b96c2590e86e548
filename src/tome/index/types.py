"""Type definitions for the semantic index."""

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Protocol

from tome.llm.base import LLMClient
from tome.store.models import Document


@dataclass
class IndexNode:
    """Index-side representation of a document: text plus flat metadata."""

    node_id: str
    text: str
    metadata: dict[str, str] = field(default_factory=dict)


@dataclass
class NodeWithScore:
    """A retrieved node and its similarity score (0.0-1.0)."""

    node: IndexNode
    score: float | None = None


@dataclass
class RetrievalFilters:
    """Hard filters applied around retrieval.

    ``category`` narrows the similarity search itself; ``tags`` drops
    retrieved nodes carrying none of the given tags.
    """

    category: str | None = None
    tags: list[str] | None = None


@dataclass
class EngineResponse:
    """Synthesized answer and the nodes it was grounded on."""

    response: str
    source_nodes: list[NodeWithScore] = field(default_factory=list)


def node_from_document(document: Document) -> IndexNode:
    """Flatten a document into an index node.

    Metadata values are plain strings: tags are comma-joined, the added
    date is ISO-8601 and a missing author becomes an empty string.
    """
    return IndexNode(
        node_id=document.id,
        text=document.content,
        metadata={
            "id": document.id,
            "title": document.title,
            "source": document.source,
            "category": document.metadata.category,
            "tags": ", ".join(document.metadata.tags),
            "addedDate": document.metadata.added_date.isoformat(),
            "author": document.metadata.author or "",
        },
    )


class QueryEngine(Protocol):
    """Combined retrieval and synthesis over one index build."""

    async def query(self, question: str) -> EngineResponse: ...


class SemanticIndex(Protocol):
    """A built semantic index."""

    async def insert(self, node: IndexNode) -> None: ...

    def as_query_engine(
        self,
        llm: LLMClient | None = None,
        top_k: int = 5,
        filters: RetrievalFilters | None = None,
    ) -> QueryEngine: ...


class IndexBackend(Protocol):
    """Factory for semantic indexes; building discards any previous index."""

    async def build_from_documents(self, nodes: Sequence[IndexNode]) -> SemanticIndex: ...

    async def load_persisted(self, nodes: Sequence[IndexNode]) -> SemanticIndex | None:
        """Return a previously built index holding exactly ``nodes``, if any."""
        ...
