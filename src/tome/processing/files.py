"""Text extraction for files added to the knowledge base."""

import asyncio
import csv
import io
import json
import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional, Type

import aiofiles
import markitdown

from tome.exceptions import StorageError, ValidationError

logger = logging.getLogger(__name__)

HEADING_PATTERN = re.compile(r"^#+\s+(.+)$", re.MULTILINE)


@dataclass
class ProcessedContent:
    """Extracted text and what was learned about its origin."""

    content: str
    metadata: Dict[str, Any] = field(default_factory=dict)


async def read_text(file_path: Path) -> str:
    """Read a text file, trying a few common encodings."""
    for encoding in ("utf-8", "utf-8-sig", "latin1"):
        try:
            async with aiofiles.open(file_path, "r", encoding=encoding) as f:
                return await f.read()
        except UnicodeDecodeError:
            continue
        except OSError as e:
            raise StorageError(f"Failed to read file: {e}", str(file_path)) from e
    raise StorageError("Could not decode file with any of the attempted encodings", str(file_path))


def file_stats(file_path: Path) -> Dict[str, Any]:
    stat = file_path.stat()
    return {
        "size": stat.st_size,
        "last_modified": datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
    }


def json_to_text(obj: Any, path: str = "") -> str:
    """Flatten JSON into ``path: value`` lines for indexing.

    Nested keys are joined with dots and list items are addressed as
    ``key[index]``.
    """
    if isinstance(obj, dict):
        text = ""
        for key, value in obj.items():
            current = f"{path}.{key}" if path else key
            text += f"{current}: {json_to_text(value, current)}\n"
        return text
    if isinstance(obj, list):
        return "".join(json_to_text(item, f"{path}[{i}]") for i, item in enumerate(obj))
    if obj is None:
        return "null"
    if isinstance(obj, bool):
        return "true" if obj else "false"
    return str(obj)


def json_structure(obj: Any) -> Any:
    """Describe the top-level shape of a JSON value."""
    if isinstance(obj, dict):
        return {key: type(value).__name__ for key, value in obj.items()}
    if isinstance(obj, list):
        return [json_structure(obj[0])] if obj else []
    return type(obj).__name__


class BaseFileProcessor(ABC):
    """Base class for file processors."""

    file_type = "text"

    @abstractmethod
    async def process(self, file_path: Path) -> ProcessedContent:
        """Extract indexable text from a file.

        Args:
            file_path: Path to the file

        Returns:
            Extracted content and metadata
        """
        pass


class TextProcessor(BaseFileProcessor):
    """Plain text; also the fallback for unknown extensions."""

    async def process(self, file_path: Path) -> ProcessedContent:
        content = await read_text(file_path)
        return ProcessedContent(
            content=content.strip(),
            metadata={"file_type": self.file_type, **file_stats(file_path)},
        )


class MarkdownProcessor(BaseFileProcessor):
    """Markdown files, with their headings collected as metadata."""

    file_type = "markdown"

    async def process(self, file_path: Path) -> ProcessedContent:
        content = await read_text(file_path)
        headings = [h.strip() for h in HEADING_PATTERN.findall(content)]
        return ProcessedContent(
            content=content.strip(),
            metadata={"file_type": self.file_type, "headings": headings, **file_stats(file_path)},
        )


class JsonProcessor(BaseFileProcessor):
    file_type = "json"

    async def process(self, file_path: Path) -> ProcessedContent:
        raw = await read_text(file_path)
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise ValidationError(f"Invalid JSON file: {file_path}", field="file") from e

        return ProcessedContent(
            content=json_to_text(data),
            metadata={
                "file_type": self.file_type,
                "json_structure": json_structure(data),
                **file_stats(file_path),
            },
        )


class CsvProcessor(BaseFileProcessor):
    """CSV files rendered as one labelled block per row."""

    file_type = "csv"

    async def process(self, file_path: Path) -> ProcessedContent:
        raw = await read_text(file_path)
        rows = [row for row in csv.reader(io.StringIO(raw.strip())) if row]
        if not rows:
            return ProcessedContent(
                content="",
                metadata={"file_type": self.file_type, "columns": [], "row_count": 0},
            )

        headers = [h.strip() for h in rows[0]]
        lines = [f"CSV Headers: {', '.join(headers)}", ""]
        for number, row in enumerate(rows[1:], start=1):
            lines.append(f"Row {number}:")
            for i, header in enumerate(headers):
                value = row[i].strip() if i < len(row) else ""
                lines.append(f"  {header}: {value}")
            lines.append("")

        return ProcessedContent(
            content="\n".join(lines),
            metadata={
                "file_type": self.file_type,
                "columns": headers,
                "row_count": len(rows) - 1,
                **file_stats(file_path),
            },
        )


class MarkItDownProcessor(BaseFileProcessor):
    """Office documents, PDF and HTML converted to markdown by markitdown."""

    file_type = "document"

    async def process(self, file_path: Path) -> ProcessedContent:
        converter = markitdown.MarkItDown()
        try:
            result = await asyncio.to_thread(converter.convert, str(file_path))
        except Exception as e:
            raise StorageError(f"Failed to convert file: {e}", str(file_path)) from e

        return ProcessedContent(
            content=(result.text_content or "").strip(),
            metadata={
                "file_type": file_path.suffix.lower().lstrip("."),
                "title": getattr(result, "title", None),
                **file_stats(file_path),
            },
        )


class FileProcessorFactory:
    """Factory for choosing a processor by file extension."""

    _processors: Dict[str, Type[BaseFileProcessor]] = {
        "txt": TextProcessor,
        "md": MarkdownProcessor,
        "json": JsonProcessor,
        "csv": CsvProcessor,
        "pdf": MarkItDownProcessor,
        "docx": MarkItDownProcessor,
        "pptx": MarkItDownProcessor,
        "xlsx": MarkItDownProcessor,
        "html": MarkItDownProcessor,
        "htm": MarkItDownProcessor,
    }

    @classmethod
    def supported_extensions(cls) -> list[str]:
        return [f".{ext}" for ext in cls._processors]

    @classmethod
    def get_processor(cls, file_type: str) -> Optional[BaseFileProcessor]:
        """Get processor for file type.

        Args:
            file_type: File extension without dot

        Returns:
            Processor instance if supported, None otherwise
        """
        processor_class = cls._processors.get(file_type.lower())
        if processor_class:
            return processor_class()
        return None


async def process_file(file_path: Path | str) -> ProcessedContent:
    """Extract indexable text from a file.

    Unknown extensions are read as plain text.

    Raises:
        StorageError: If the file is missing or unreadable
        ValidationError: If a JSON file does not parse
    """
    file_path = Path(file_path)
    if not file_path.is_file():
        raise StorageError("File not found", str(file_path))

    extension = file_path.suffix.lower().lstrip(".")
    processor = FileProcessorFactory.get_processor(extension)
    if processor is None:
        logger.debug(f"No processor for '.{extension}', reading {file_path} as text")
        processor = TextProcessor()

    processed = await processor.process(file_path)
    processed.metadata.setdefault("extension", extension)
    return processed
