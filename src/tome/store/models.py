"""Data models for the document store."""

from datetime import datetime, timezone
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_CATEGORY = "general"
DEFAULT_SOURCE = "manual-input"


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


class DocumentMetadata(BaseModel):
    """Metadata attached to a stored document."""

    model_config = ConfigDict(populate_by_name=True)

    added_date: datetime = Field(alias="addedDate")
    tags: list[str] = Field(default_factory=list)
    category: str = DEFAULT_CATEGORY
    author: str | None = None

    @field_validator("added_date")
    @classmethod
    def ensure_aware(cls, v: datetime) -> datetime:
        """Treat naive timestamps from legacy files as UTC."""
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v


class Document(BaseModel):
    """A stored unit of content plus its metadata.

    Serialized with the camelCase layout of the documents file, e.g.
    ``{"id": ..., "metadata": {"addedDate": ..., "tags": [...]}}``.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: str
    content: str
    source: str
    metadata: DocumentMetadata

    @property
    def is_web(self) -> bool:
        """Whether the document was fetched from a URL."""
        return self.source.startswith("http")

    def to_record(self) -> dict:
        """Return the JSON-ready record written to the documents file."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class DocumentDetails(BaseModel):
    """Caller-supplied metadata for a new document."""

    title: str | None = None
    source: str = DEFAULT_SOURCE
    category: str = DEFAULT_CATEGORY
    tags: list[str] = Field(default_factory=list)
    author: str | None = None


class DocumentFilter(BaseModel):
    """Filter for listing documents.

    Tags use OR semantics: a document matches when it carries any of them.
    """

    category: str | None = None
    tags: list[str] | None = None
    limit: int | None = Field(default=None, ge=0)


class StoreStats(BaseModel):
    """Aggregate counts over the stored documents."""

    model_config = ConfigDict(populate_by_name=True)

    total_documents: int = Field(alias="totalDocuments")
    categories: dict[str, int] = Field(default_factory=dict)
    tags: dict[str, int] = Field(default_factory=dict)
    sources: dict[str, int] = Field(default_factory=dict)
    recent_documents: int = Field(alias="recentDocuments")


class StoreConfig(BaseModel):
    """Immutable configuration of one document store instance.

    ``max_documents`` is advisory: exceeding it is logged, never rejected.
    """

    model_config = ConfigDict(frozen=True)

    data_dir: Path = Path("./rag-data")
    vector_store_dir: Path = Path("./rag-vector-store")
    documents_file: str = "user-documents.json"
    max_documents: int = 1000
    autosave: bool = True
    write_text_copies: bool = True

    @property
    def documents_path(self) -> Path:
        """Path of the documents file."""
        return self.data_dir / self.documents_file
