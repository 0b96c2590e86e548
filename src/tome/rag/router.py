"""Routes questions to the semantic index and maps the answer back."""

import logging
from collections.abc import Callable
from datetime import datetime

from tome.exceptions import QueryError, TomeError
from tome.index.synchronizer import IndexSynchronizer
from tome.index.types import NodeWithScore, RetrievalFilters
from tome.llm.base import LLMClient
from tome.rag.types import QueryMetadata, QueryOptions, QueryResult, SourceAttribution
from tome.store.models import utcnow
from tome.store.records import DocumentStore

logger = logging.getLogger(__name__)

EMPTY_STORE_RESPONSE = (
    "I don't have any documents to search through yet. "
    "Please add some documents first using the 'add' command."
)


def attribution_from_node(item: NodeWithScore) -> SourceAttribution:
    """Read the source attribution carried in a node's metadata."""
    metadata = item.node.metadata
    return SourceAttribution(
        id=metadata.get("id", item.node.node_id),
        title=metadata.get("title", ""),
        source=metadata.get("source", ""),
        category=metadata.get("category", ""),
        score=item.score,
    )


class QueryRouter:
    """Answers questions against the store's semantic index."""

    def __init__(
        self,
        store: DocumentStore,
        synchronizer: IndexSynchronizer,
        llm: LLMClient | None = None,
        default_max_results: int = 5,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.store = store
        self.synchronizer = synchronizer
        self.llm = llm
        self.default_max_results = default_max_results
        self._clock = clock

    def _metadata(self) -> QueryMetadata:
        return QueryMetadata(
            total_documents=len(self.store),
            query_time=self._clock(),
            categories=self.store.categories(),
            tags=self.store.all_tags(),
        )

    async def query(self, question: str, options: QueryOptions | None = None) -> QueryResult:
        """Answer a question from the stored documents.

        Args:
            question: Natural-language question
            options: Result count, filters and whether to attach metadata

        Returns:
            The answer and its source attributions

        Raises:
            IndexUnavailableError: If the index is uninitialized or failed
            ConfigurationError: If no LLM is configured
            QueryError: If retrieval or synthesis fails
        """
        options = options or QueryOptions()

        if len(self.store) == 0:
            return QueryResult(
                response=EMPTY_STORE_RESPONSE,
                sources=[],
                metadata=QueryMetadata(total_documents=0, query_time=self._clock()),
            )

        top_k = options.max_results or self.default_max_results
        filters = RetrievalFilters(category=options.category, tags=options.tags or None)
        engine = await self.synchronizer.query_engine(llm=self.llm, top_k=top_k, filters=filters)

        try:
            answer = await engine.query(question)
        except TomeError:
            raise
        except Exception as e:
            logger.error(f"Query failed: {e}")
            raise QueryError(f"Failed to answer query: {e}") from e

        return QueryResult(
            response=answer.response,
            sources=[attribution_from_node(item) for item in answer.source_nodes],
            metadata=self._metadata() if options.include_metadata else None,
        )
