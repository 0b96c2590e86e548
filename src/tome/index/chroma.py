"""ChromaDB semantic index.

This module wraps a ChromaDB collection so that it can be built from a
list of nodes, extended one node at a time, and turned into a query
engine. A build always drops the collection and recreates it.
"""

import asyncio
import logging
from collections.abc import Sequence
from pathlib import Path
from typing import Any

import chromadb
from chromadb.api.models.Collection import Collection
from chromadb.config import Settings

from tome.index.embedding import TomeEmbeddingFunction
from tome.index.engine import RetrieverQueryEngine
from tome.index.types import IndexNode, NodeWithScore, RetrievalFilters
from tome.llm.base import LLMClient

logger = logging.getLogger(__name__)

QUERY_INCLUDE_FIELDS: Any = ["documents", "metadatas", "distances"]
GET_INCLUDE_FIELDS: Any = ["documents", "metadatas"]
ADD_BATCH_SIZE = 100
TAG_OVERFETCH = 4


def split_tags(value: str) -> list[str]:
    """Split the comma-joined tags stored in node metadata."""
    return [t.strip() for t in value.split(",") if t.strip()]


class VectorIndex:
    """A built index over one ChromaDB collection."""

    def __init__(self, collection: Collection) -> None:
        self._collection = collection

    def count(self) -> int:
        return self._collection.count()

    async def insert(self, node: IndexNode) -> None:
        """Add a single node to the collection."""
        logger.debug(f"Inserting node {node.node_id} into collection {self._collection.name}")
        await asyncio.to_thread(
            self._collection.add,
            ids=[node.node_id],
            documents=[node.text],
            metadatas=[node.metadata],
        )

    async def retrieve(
        self,
        question: str,
        top_k: int = 5,
        filters: RetrievalFilters | None = None,
    ) -> list[NodeWithScore]:
        """Find the nodes most similar to the question.

        Args:
            question: Natural-language query
            top_k: Maximum number of nodes to return
            filters: Category pre-filter and tag post-filter

        Returns:
            Nodes ordered by decreasing score
        """
        total = await asyncio.to_thread(self._collection.count)
        if total == 0:
            return []

        filters = filters or RetrievalFilters()
        where = {"category": filters.category} if filters.category else None
        n_results = top_k * TAG_OVERFETCH if filters.tags else top_k

        results = await asyncio.to_thread(
            self._collection.query,
            query_texts=[question],
            n_results=min(n_results, total),
            where=where,
            include=QUERY_INCLUDE_FIELDS,
        )

        ids = (results.get("ids") or [[]])[0]
        documents = (results.get("documents") or [[]])[0]
        metadatas = (results.get("metadatas") or [[]])[0]
        distances = (results.get("distances") or [[]])[0]

        wanted = set(filters.tags or [])
        nodes: list[NodeWithScore] = []
        for node_id, text, metadata, distance in zip(ids, documents, metadatas, distances):
            metadata = {k: str(v) for k, v in (metadata or {}).items()}
            if wanted and not wanted.intersection(split_tags(metadata.get("tags", ""))):
                continue
            # Cosine distance lies in [0, 2]
            score = round(1.0 - distance / 2.0, 4)
            nodes.append(NodeWithScore(node=IndexNode(node_id, text or "", metadata), score=score))

        return nodes[:top_k]

    def as_query_engine(
        self,
        llm: LLMClient | None = None,
        top_k: int = 5,
        filters: RetrievalFilters | None = None,
    ) -> RetrieverQueryEngine:
        """Bind this index to an LLM for retrieval and synthesis."""
        return RetrieverQueryEngine(self, llm=llm, top_k=top_k, filters=filters)


class ChromaIndexBackend:
    """Builds :class:`VectorIndex` instances in a ChromaDB client."""

    COLLECTION_NAME = "tome"

    def __init__(
        self,
        base_path: Path | str,
        embedding_function: TomeEmbeddingFunction | None = None,
        collection_name: str = COLLECTION_NAME,
        use_memory: bool = False,
    ) -> None:
        """Initialize the backend.

        Args:
            base_path: Directory for persistent vector data
            embedding_function: Embedding function for the collection
            collection_name: Name of the collection to (re)build
            use_memory: Whether to use in-memory storage
        """
        self.base_path = Path(base_path)
        self.collection_name = collection_name
        self._embedding_function = embedding_function or TomeEmbeddingFunction()
        self._use_memory = use_memory
        self._client: Any = None

    @property
    def client(self) -> Any:
        if self._client is None:
            settings = Settings(anonymized_telemetry=False, allow_reset=True)
            if self._use_memory:
                logger.info("Using in-memory vector storage")
                self._client = chromadb.EphemeralClient(settings=settings)
            else:
                self.base_path.mkdir(parents=True, exist_ok=True)
                persist_dir = self.base_path / "chroma"
                logger.info(f"Using persistent vector storage at {persist_dir}")
                self._client = chromadb.PersistentClient(path=str(persist_dir), settings=settings)
        return self._client

    def _get_collection(self) -> Collection:
        return self.client.get_collection(
            name=self.collection_name,
            embedding_function=self._embedding_function,
        )

    def _build(self, nodes: list[IndexNode]) -> VectorIndex:
        try:
            self.client.delete_collection(self.collection_name)
            logger.info(f"Deleted existing collection '{self.collection_name}'")
        except Exception as e:
            logger.info(f"No collection to delete: {e}")

        collection = self.client.create_collection(
            name=self.collection_name,
            embedding_function=self._embedding_function,
            metadata={"hnsw:space": "cosine"},
        )

        for start in range(0, len(nodes), ADD_BATCH_SIZE):
            batch = nodes[start : start + ADD_BATCH_SIZE]
            collection.add(
                ids=[node.node_id for node in batch],
                documents=[node.text for node in batch],
                metadatas=[node.metadata for node in batch],
            )

        logger.info(f"Built collection '{self.collection_name}' with {len(nodes)} documents")
        return VectorIndex(collection)

    async def build_from_documents(self, nodes: Sequence[IndexNode]) -> VectorIndex:
        """Drop the collection and rebuild it from ``nodes``."""
        return await asyncio.to_thread(self._build, list(nodes))

    def _load(self, nodes: list[IndexNode]) -> VectorIndex | None:
        try:
            collection = self._get_collection()
        except Exception as e:
            logger.info(f"No persisted collection '{self.collection_name}': {e}")
            return None

        expected = {node.node_id: (node.text, node.metadata) for node in nodes}
        if collection.count() != len(expected):
            return None

        stored = collection.get(include=GET_INCLUDE_FIELDS)
        ids = stored.get("ids") or []
        documents = stored.get("documents")
        metadatas = stored.get("metadatas")
        if set(ids) != expected.keys() or documents is None or metadatas is None:
            return None
        if not len(ids) == len(documents) == len(metadatas):
            return None

        for node_id, text, metadata in zip(ids, documents, metadatas):
            if expected[node_id] != (text, metadata):
                return None

        logger.info(f"Reusing persisted collection '{self.collection_name}' ({len(nodes)} documents)")
        return VectorIndex(collection)

    async def load_persisted(self, nodes: Sequence[IndexNode]) -> VectorIndex | None:
        """Open the persisted collection if it holds exactly ``nodes``.

        Returns:
            The persisted index, or None when it is missing or out of date
        """
        if self._use_memory:
            return None
        return await asyncio.to_thread(self._load, list(nodes))
