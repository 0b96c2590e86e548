"""Types for question answering over the knowledge base."""

from datetime import datetime

from pydantic import BaseModel, Field


class QueryOptions(BaseModel):
    """Options for a single query.

    ``category`` restricts retrieval to one category; ``tags`` keeps only
    retrieved documents carrying at least one of the given tags.
    """

    max_results: int | None = Field(default=None, gt=0)
    category: str | None = None
    tags: list[str] | None = None
    include_metadata: bool = False


class SourceAttribution(BaseModel):
    """A document the answer was grounded on."""

    id: str
    title: str
    source: str
    category: str
    score: float | None = None


class QueryMetadata(BaseModel):
    """Store snapshot taken when the query ran."""

    total_documents: int
    query_time: datetime
    categories: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)


class QueryResult(BaseModel):
    """Answer text plus the documents it was drawn from."""

    response: str
    sources: list[SourceAttribution] = Field(default_factory=list)
    metadata: QueryMetadata | None = None
