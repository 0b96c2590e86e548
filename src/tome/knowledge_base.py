"""Knowledge base facade.

Wires the document store, the index synchronizer, the query router and the
snapshot gateway together, and adds the file, URL and bulk ingestion paths
on top of them.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from tome.config import TomeConfig
from tome.exceptions import StorageError, ValidationError
from tome.index.synchronizer import IndexSynchronizer
from tome.index.types import IndexBackend
from tome.llm.base import LLMClient
from tome.llm.factory import create_llm_client
from tome.processing import ContentValidator, process_file, scrape_url
from tome.rag.router import QueryRouter
from tome.rag.types import QueryOptions, QueryResult
from tome.store.models import (
    Document,
    DocumentDetails,
    DocumentFilter,
    StoreStats,
    utcnow,
)
from tome.store.records import DocumentStore
from tome.store.snapshot import SnapshotGateway

logger = logging.getLogger(__name__)


@dataclass
class BulkAddResult:
    """Outcome of adding every matching file in a directory."""

    added: list[Document] = field(default_factory=list)
    failed: dict[str, str] = field(default_factory=dict)


def default_backend(config: TomeConfig) -> IndexBackend:
    """ChromaDB backend with the configured sentence-transformers model."""
    from tome.index.chroma import ChromaIndexBackend
    from tome.index.embedding import EmbeddingEngine, TomeEmbeddingFunction

    return ChromaIndexBackend(
        config.paths.vector_store_dir,
        embedding_function=TomeEmbeddingFunction(EmbeddingEngine(config.embedding.model)),
        collection_name=config.embedding.collection_name,
    )


class KnowledgeBase:
    """Personal document store with question answering."""

    def __init__(
        self,
        config: TomeConfig,
        backend: IndexBackend | None = None,
        llm: LLMClient | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        """Initialize the knowledge base.

        Args:
            config: Tome configuration
            backend: Semantic index backend; defaults to ChromaDB
            llm: Generative backend; created from ``config.llm`` on the
                first query that needs one when omitted
            clock: Source of the current time
        """
        self.config = config
        self.store = DocumentStore(config.store_config(), clock=clock)
        self.synchronizer = IndexSynchronizer(
            backend or default_backend(config),
            index_dir=config.paths.vector_store_dir,
        )
        self.router = QueryRouter(
            self.store,
            self.synchronizer,
            llm=llm,
            default_max_results=config.search.default_max_results,
            clock=clock,
        )
        self.gateway = SnapshotGateway(config.paths.data_dir)
        self.validator = ContentValidator()
        self._loaded = False

    async def initialize(self, with_index: bool = True) -> None:
        """Load stored documents and, optionally, build the index.

        Safe to call more than once; documents are read from disk only on
        the first call.

        Args:
            with_index: Whether to bring the semantic index up as well

        Raises:
            StorageError: If the documents file is unreadable
            RebuildError: If the index cannot be built
        """
        if not self._loaded:
            self.config.paths.data_dir.mkdir(parents=True, exist_ok=True)
            await self.store.load_from_disk()
            self._loaded = True

        if with_index and not self.synchronizer.is_ready:
            await self.synchronizer.initialize(self.store.documents)

    async def save(self) -> Path:
        """Write the documents file; needed only when autosave is off."""
        return await self.store.persist_to_disk()

    async def add_document(self, content: str, details: DocumentDetails | None = None) -> Document:
        """Validate, store and index a piece of text.

        Raises:
            ValidationError: If the content is too short
            RebuildError: If indexing fails and the fallback rebuild fails too
        """
        if not self.validator.is_valid_content(content):
            raise ValidationError(
                "Content must be more than 10 characters long", field="content"
            )

        existing = [doc.content for doc in self.store.documents]
        if self.validator.is_duplicate(content, existing):
            logger.warning("Content is very similar to an existing document")

        document = await self.store.add(content, details)
        await self.synchronizer.on_add(document, self.store.documents)
        return document

    async def add_document_from_file(
        self,
        file_path: Path | str,
        title: str | None = None,
        category: str | None = None,
    ) -> Document:
        """Extract text from a file and add it."""
        file_path = Path(file_path)
        processed = await process_file(file_path)
        if not self.validator.is_supported_file_type(file_path):
            logger.warning(f"Unsupported file type '{file_path.suffix}' for {file_path.name}, reading as text")
        extension = file_path.suffix.lower().lstrip(".")

        details = DocumentDetails(
            title=title or file_path.name,
            source=str(file_path),
            category=category or "file",
            tags=["file", extension] if extension else ["file"],
        )
        return await self.add_document(processed.content, details)

    async def add_document_from_url(self, url: str, title: str | None = None) -> Document:
        """Fetch a web page and add its text.

        Raises:
            ValidationError: If the URL is not an absolute http(s) URL
            BackendError: If the page cannot be fetched
        """
        if not self.validator.is_valid_url(url):
            raise ValidationError(f"Invalid URL: {url}", field="url")

        processed = await scrape_url(url)
        details = DocumentDetails(
            title=title or f"Document from {url}",
            source=url,
            category="web-content",
            tags=["web", "external"],
        )
        return await self.add_document(processed.content, details)

    async def bulk_add(
        self,
        directory: Path | str,
        pattern: str = "*.txt",
        category: str | None = None,
    ) -> BulkAddResult:
        """Add every file in ``directory`` whose name matches ``pattern``.

        A file that fails is recorded and skipped; the rest are still added.
        """
        directory = Path(directory)
        if not directory.is_dir():
            raise ValidationError(f"Not a directory: {directory}", field="directory")

        result = BulkAddResult()
        for file_path in sorted(p for p in directory.glob(pattern) if p.is_file()):
            try:
                result.added.append(
                    await self.add_document_from_file(file_path, category=category)
                )
            except (StorageError, ValidationError) as e:
                logger.warning(f"Skipping {file_path.name}: {e.message}")
                result.failed[file_path.name] = e.message
        return result

    def get_document(self, document_id: str) -> Document | None:
        return self.store.get(document_id)

    def list_documents(
        self,
        category: str | None = None,
        tags: list[str] | None = None,
        limit: int | None = None,
    ) -> list[Document]:
        """List documents, optionally filtered by category and any of ``tags``."""
        return self.store.list_documents(
            DocumentFilter(category=category, tags=tags or None, limit=limit)
        )

    def stats(self) -> StoreStats:
        return self.store.stats()

    async def delete_document(self, document_id: str) -> bool:
        """Delete a document and rebuild the index without it.

        Returns:
            False if no document has this id
        """
        removed = await self.store.remove(document_id)
        if removed is None:
            logger.info(f"Document not found: {document_id}")
            return False

        await self.synchronizer.rebuild(self.store.documents)
        logger.info(f'Deleted document "{removed.title}" (ID: {document_id})')
        return True

    def _resolve_llm(self) -> LLMClient:
        if self.router.llm is None:
            self.router.llm = create_llm_client(self.config.llm)
        return self.router.llm

    async def query(self, question: str, options: QueryOptions | None = None) -> QueryResult:
        """Answer a question from the stored documents.

        Raises:
            ConfigurationError: If the store is not empty and no LLM is available
            IndexUnavailableError: If the index is not ready
            QueryError: If retrieval or synthesis fails
        """
        if len(self.store) > 0:
            self._resolve_llm()
        return await self.router.query(question, options)

    async def export_data(self) -> Path:
        """Write a snapshot of all documents to the data directory."""
        return await self.gateway.export(self.store)

    async def import_data(self, path: Path | str) -> int:
        """Replace every document with the contents of a snapshot.

        Returns:
            Number of imported documents

        Raises:
            FormatError: If the snapshot is malformed; the store is untouched
            RebuildError: If the index cannot be rebuilt
        """
        documents = await self.gateway.load(path)
        await self.store.replace_all(documents)
        await self.synchronizer.rebuild(self.store.documents)
        logger.info(f"Imported {len(documents)} documents from {path}")
        return len(documents)

    async def rebuild(self) -> None:
        """Discard the index and rebuild it from the stored documents."""
        await self.synchronizer.rebuild(self.store.documents)
