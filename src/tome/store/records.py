"""Document record store.

This module owns the canonical collection of documents. The collection
lives in memory and is persisted as a single pretty-printed JSON array
which is rewritten in full on every autosaved mutation. Each document can
also be dumped to a human-readable ``<id>.txt`` copy; those copies are
never read back.
"""

import json
import logging
import uuid
from collections.abc import Callable, Iterable
from datetime import datetime, timedelta
from pathlib import Path

import aiofiles
import aiofiles.os
from pydantic import ValidationError as PydanticValidationError

from tome.exceptions import StorageError, ValidationError
from tome.store.models import (
    Document,
    DocumentDetails,
    DocumentFilter,
    DocumentMetadata,
    StoreConfig,
    StoreStats,
    utcnow,
)

logger = logging.getLogger(__name__)

RECENT_WINDOW = timedelta(days=7)


def default_title(added: datetime) -> str:
    """Placeholder title for documents added without one."""
    return f"Untitled {added.strftime('%Y-%m-%d %H:%M:%S')}"


def render_text_copy(document: Document) -> str:
    """Render the human-readable text copy of a document."""
    lines = [
        f"Title: {document.title}",
        f"Source: {document.source}",
        f"Category: {document.metadata.category}",
        f"Tags: {', '.join(document.metadata.tags)}",
        f"Added: {document.metadata.added_date.isoformat()}",
    ]
    if document.metadata.author:
        lines.append(f"Author: {document.metadata.author}")
    lines.append("")
    lines.append(document.content)
    return "\n".join(lines)


class DocumentStore:
    """Authoritative, append-mostly collection of documents."""

    def __init__(
        self,
        config: StoreConfig,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        """Initialize the store.

        Args:
            config: Store configuration
            clock: Source of the current time, used for ``addedDate`` and
                the recency window in :meth:`stats`
        """
        self.config = config
        self._clock = clock
        self._documents: list[Document] = []
        self._issued_ids: set[str] = set()

    @property
    def documents(self) -> list[Document]:
        """Snapshot of the current collection in insertion order."""
        return list(self._documents)

    def __len__(self) -> int:
        return len(self._documents)

    def _new_id(self) -> str:
        """Generate an id that was never issued or loaded in this session."""
        while True:
            candidate = str(uuid.uuid4())
            if candidate not in self._issued_ids:
                self._issued_ids.add(candidate)
                return candidate

    def _text_copy_path(self, document_id: str) -> Path:
        return self.config.data_dir / f"{document_id}.txt"

    async def load_from_disk(self) -> list[Document]:
        """Load the documents file, replacing the in-memory collection.

        A missing file is the valid empty state.

        Returns:
            The loaded documents

        Raises:
            StorageError: If the file exists but cannot be read or parsed
        """
        path = self.config.documents_path
        if not path.exists():
            logger.info(f"No documents file at {path}, starting with an empty store")
            self._documents = []
            return []

        try:
            async with aiofiles.open(path, "r", encoding="utf-8") as f:
                raw = json.loads(await f.read())
            if not isinstance(raw, list):
                raise StorageError("Documents file must contain a JSON array", str(path))
            documents = [Document.model_validate(record) for record in raw]
        except StorageError:
            raise
        except (OSError, json.JSONDecodeError, PydanticValidationError) as e:
            raise StorageError(f"Could not load documents: {e}", str(path)) from e

        self._documents = documents
        self._issued_ids.update(doc.id for doc in documents)
        logger.info(f"Loaded {len(documents)} existing documents")
        return self.documents

    async def persist_to_disk(self) -> Path:
        """Rewrite the documents file with the full collection.

        Returns:
            Path of the documents file

        Raises:
            StorageError: If the file cannot be written
        """
        path = self.config.documents_path
        payload = json.dumps([doc.to_record() for doc in self._documents], indent=2)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(path, "w", encoding="utf-8") as f:
                await f.write(payload)
        except OSError as e:
            raise StorageError(f"Could not save documents: {e}", str(path)) from e
        logger.debug(f"Saved {len(self._documents)} documents to {path}")
        return path

    async def _write_text_copy(self, document: Document) -> None:
        path = self._text_copy_path(document.id)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(path, "w", encoding="utf-8") as f:
                await f.write(render_text_copy(document))
        except OSError as e:
            raise StorageError(f"Could not write document copy: {e}", str(path)) from e

    async def add(self, content: str, details: DocumentDetails | None = None) -> Document:
        """Add a document.

        Args:
            content: Raw text body
            details: Title, source, category, tags and author

        Returns:
            The stored document with its generated id

        Raises:
            ValidationError: If the content is empty after trimming
            StorageError: If the text copy or the documents file cannot be written
        """
        if not content or not content.strip():
            raise ValidationError("Document content must not be empty", field="content")

        details = details or DocumentDetails()
        added = self._clock()
        document = Document(
            id=self._new_id(),
            title=details.title.strip() if details.title and details.title.strip() else default_title(added),
            content=content,
            source=details.source,
            metadata=DocumentMetadata(
                added_date=added,
                tags=list(details.tags),
                category=details.category or "general",
                author=details.author,
            ),
        )

        self._documents.append(document)
        if len(self._documents) > self.config.max_documents:
            logger.warning(
                f"Store holds {len(self._documents)} documents, "
                f"above the configured maximum of {self.config.max_documents}"
            )

        try:
            if self.config.write_text_copies:
                await self._write_text_copy(document)
            if self.config.autosave:
                await self.persist_to_disk()
        except StorageError:
            self._documents.remove(document)
            await self._remove_text_copy(document.id)
            raise

        logger.info(f'Added document "{document.title}" (ID: {document.id})')
        return document

    def get(self, document_id: str) -> Document | None:
        """Look up a document by id."""
        for document in self._documents:
            if document.id == document_id:
                return document
        return None

    async def remove(self, document_id: str) -> Document | None:
        """Remove a document and its text copy.

        Failure to delete the text copy is logged, not raised; the in-memory
        collection is authoritative.

        Returns:
            The removed document, or None if the id is unknown
        """
        document = self.get(document_id)
        if document is None:
            return None

        self._documents.remove(document)
        await self._remove_text_copy(document_id, expected=self.config.write_text_copies)

        if self.config.autosave:
            await self.persist_to_disk()
        return document

    async def _remove_text_copy(self, document_id: str, expected: bool = False) -> None:
        path = self._text_copy_path(document_id)
        if not expected and not path.exists():
            return
        try:
            await aiofiles.os.remove(path)
        except OSError as e:
            logger.warning(f"Could not delete document file {path}: {e}")

    async def replace_all(self, documents: Iterable[Document]) -> None:
        """Replace the whole collection and persist it.

        Documents absent from ``documents`` are dropped along with their
        text copies, and copies are written for the new collection.
        """
        previous_ids = {doc.id for doc in self._documents}
        self._documents = list(documents)
        self._issued_ids.update(doc.id for doc in self._documents)
        await self.persist_to_disk()

        for document_id in previous_ids - {doc.id for doc in self._documents}:
            await self._remove_text_copy(document_id)

        if self.config.write_text_copies:
            for document in self._documents:
                try:
                    await self._write_text_copy(document)
                except StorageError as e:
                    logger.warning(f"Could not write copy of imported document {document.id}: {e.message}")

    def list_documents(self, criteria: DocumentFilter | None = None) -> list[Document]:
        """List documents in insertion order.

        Args:
            criteria: Exact category, tags (any match) and limit

        Returns:
            Matching documents
        """
        criteria = criteria or DocumentFilter()
        filtered = self._documents

        if criteria.category:
            filtered = [doc for doc in filtered if doc.metadata.category == criteria.category]

        if criteria.tags:
            wanted = set(criteria.tags)
            filtered = [doc for doc in filtered if wanted.intersection(doc.metadata.tags)]

        if criteria.limit is not None:
            filtered = filtered[: criteria.limit]

        return list(filtered)

    def stats(self, now: datetime | None = None) -> StoreStats:
        """Compute aggregate statistics.

        Args:
            now: Reference time for the seven-day recency window; defaults
                to the store clock

        Returns:
            Counts by category, tag and source kind plus the recent count
        """
        cutoff = (now or self._clock()) - RECENT_WINDOW
        categories: dict[str, int] = {}
        tags: dict[str, int] = {}
        sources: dict[str, int] = {}
        recent = 0

        for doc in self._documents:
            categories[doc.metadata.category] = categories.get(doc.metadata.category, 0) + 1
            for tag in doc.metadata.tags:
                tags[tag] = tags.get(tag, 0) + 1
            kind = "web" if doc.is_web else "file"
            sources[kind] = sources.get(kind, 0) + 1
            if doc.metadata.added_date > cutoff:
                recent += 1

        return StoreStats(
            total_documents=len(self._documents),
            categories=categories,
            tags=tags,
            sources=sources,
            recent_documents=recent,
        )

    def categories(self) -> list[str]:
        """Distinct categories in first-seen order."""
        return list(dict.fromkeys(doc.metadata.category for doc in self._documents))

    def all_tags(self) -> list[str]:
        """Distinct tags in first-seen order."""
        return list(dict.fromkeys(tag for doc in self._documents for tag in doc.metadata.tags))
