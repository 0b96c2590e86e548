"""Snapshot export and import.

A snapshot is ``{"documents": [...], "stats": {...}, "exportDate": ...}``
written to ``export-<epoch-ms>.json`` in the data directory.
"""

import json
import logging
from pathlib import Path

import aiofiles
from pydantic import ValidationError as PydanticValidationError

from tome.exceptions import FormatError, StorageError
from tome.store.models import Document, utcnow
from tome.store.records import DocumentStore

logger = logging.getLogger(__name__)


class SnapshotGateway:
    """Serializes a store to snapshot files and reads them back."""

    def __init__(self, directory: Path) -> None:
        """Initialize the gateway.

        Args:
            directory: Directory that receives export files
        """
        self.directory = Path(directory)

    def _next_export_path(self) -> Path:
        """Pick a timestamp-derived file name that does not exist yet."""
        stamp = int(utcnow().timestamp() * 1000)
        path = self.directory / f"export-{stamp}.json"
        while path.exists():
            stamp += 1
            path = self.directory / f"export-{stamp}.json"
        return path

    async def export(self, store: DocumentStore) -> Path:
        """Write the full collection and its stats to a new snapshot file.

        Returns:
            Path of the snapshot

        Raises:
            StorageError: If the file cannot be written
        """
        payload = {
            "documents": [doc.to_record() for doc in store.documents],
            "stats": store.stats().model_dump(by_alias=True),
            "exportDate": utcnow().isoformat(),
        }

        self.directory.mkdir(parents=True, exist_ok=True)
        path = self._next_export_path()
        try:
            async with aiofiles.open(path, "x", encoding="utf-8") as f:
                await f.write(json.dumps(payload, indent=2))
        except OSError as e:
            raise StorageError(f"Could not write export: {e}", str(path)) from e

        logger.info(f"Exported {len(store)} documents to {path}")
        return path

    async def load(self, path: Path | str) -> list[Document]:
        """Read and validate a snapshot.

        Returns:
            Documents contained in the snapshot

        Raises:
            StorageError: If the file cannot be read
            FormatError: If the file is not a valid snapshot
        """
        path = Path(path)
        try:
            async with aiofiles.open(path, "r", encoding="utf-8") as f:
                raw = await f.read()
        except OSError as e:
            raise StorageError(f"Could not read import file: {e}", str(path)) from e

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise FormatError(f"Import file is not valid JSON: {e}", str(path)) from e

        if not isinstance(data, dict) or not isinstance(data.get("documents"), list):
            raise FormatError("Invalid import file format: 'documents' must be a list", str(path))

        try:
            documents = [Document.model_validate(record) for record in data["documents"]]
        except PydanticValidationError as e:
            raise FormatError(f"Invalid document record: {e}", str(path)) from e

        ids = [doc.id for doc in documents]
        if len(ids) != len(set(ids)):
            raise FormatError("Import file contains duplicate document ids", str(path))

        return documents
