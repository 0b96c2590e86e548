"""Keeps the semantic index consistent with the document store."""

import asyncio
import logging
from collections.abc import Sequence
from enum import Enum
from pathlib import Path

from tome.exceptions import IndexUnavailableError, RebuildError, RebuildErrorType
from tome.index.types import (
    IndexBackend,
    QueryEngine,
    RetrievalFilters,
    SemanticIndex,
    node_from_document,
)
from tome.llm.base import LLMClient
from tome.store.models import Document

logger = logging.getLogger(__name__)


class IndexState(str, Enum):
    UNINITIALIZED = "uninitialized"
    READY = "ready"
    REBUILDING = "rebuilding"
    ERROR = "error"


class IndexSynchronizer:
    """Propagates store mutations to the semantic index.

    Additions are inserted incrementally. Deletions and imports go
    through :meth:`rebuild`, which discards the index and builds a new
    one from the full collection. A failed build leaves the synchronizer
    in ``ERROR`` until a later :meth:`rebuild` succeeds.
    """

    def __init__(self, backend: IndexBackend, index_dir: Path | None = None) -> None:
        self.backend = backend
        self.index_dir = index_dir
        self.state = IndexState.UNINITIALIZED
        self.builds = 0
        self.inserts = 0
        self._index: SemanticIndex | None = None
        self._idle = asyncio.Event()
        self._idle.set()

    @property
    def is_ready(self) -> bool:
        return self.state == IndexState.READY

    async def _build(self, documents: Sequence[Document], error_type: RebuildErrorType) -> None:
        self.state = IndexState.REBUILDING
        self._idle.clear()
        try:
            nodes = [node_from_document(doc) for doc in documents]
            self._index = await self.backend.build_from_documents(nodes)
            self.builds += 1
            self.state = IndexState.READY
            logger.info(f"Index built with {len(nodes)} documents")
        except Exception as e:
            self._index = None
            self.state = IndexState.ERROR
            logger.error(f"Index build failed: {e}")
            raise RebuildError(
                error_type=error_type,
                message=f"Failed to build index: {e}",
                context={"documents": len(documents)},
                is_recoverable=True,
            ) from e
        finally:
            self._idle.set()

    async def initialize(self, documents: Sequence[Document]) -> None:
        """Build the index over the current documents.

        A persisted index is reused when it already holds exactly these
        documents.

        Raises:
            RebuildError: If the index cannot be built
        """
        if self.index_dir is not None:
            self.index_dir.mkdir(parents=True, exist_ok=True)

        nodes = [node_from_document(doc) for doc in documents]
        try:
            existing = await self.backend.load_persisted(nodes)
        except Exception as e:
            logger.warning(f"Could not open persisted index, rebuilding: {e}")
            existing = None

        if existing is not None:
            self._index = existing
            self.state = IndexState.READY
            return

        await self._build(documents, RebuildErrorType.INITIALIZATION)

    async def on_add(self, document: Document, documents: Sequence[Document]) -> None:
        """Insert one newly added document.

        Args:
            document: The document that was just added
            documents: The full collection, used if the insert fails

        Raises:
            RebuildError: If the insert and the fallback rebuild both fail
        """
        if self.state != IndexState.READY or self._index is None:
            # Picked up by the next successful rebuild
            logger.warning(f"Index is {self.state.value}; document {document.id} not indexed yet")
            return

        try:
            await self._index.insert(node_from_document(document))
            self.inserts += 1
        except Exception as e:
            logger.warning(f"Insert of {document.id} failed, rebuilding index: {e}")
            await self._build(documents, RebuildErrorType.INSERT)

    async def rebuild(self, documents: Sequence[Document]) -> None:
        """Discard the index and rebuild it from ``documents``.

        Raises:
            RebuildError: If the build fails
        """
        await self._build(documents, RebuildErrorType.VECTOR_STORE)

    async def query_engine(
        self,
        llm: LLMClient | None = None,
        top_k: int = 5,
        filters: RetrievalFilters | None = None,
    ) -> QueryEngine:
        """Return a query engine bound to the current index.

        Waits for a running rebuild to finish first.

        Raises:
            IndexUnavailableError: If the index is uninitialized or failed
        """
        await self._idle.wait()
        if self.state != IndexState.READY or self._index is None:
            raise IndexUnavailableError(f"Semantic index unavailable (state: {self.state.value})")
        return self._index.as_query_engine(llm=llm, top_k=top_k, filters=filters)
