"""Retrieval plus synthesis over a single index build."""

import logging
from typing import Protocol

from tome.exceptions import ConfigurationError
from tome.index.types import EngineResponse, NodeWithScore, RetrievalFilters
from tome.llm.base import LLMClient, PromptBlock, PromptPayload

logger = logging.getLogger(__name__)

NO_MATCH_RESPONSE = "No matching documents were found for this question."


class Retriever(Protocol):
    async def retrieve(
        self,
        question: str,
        top_k: int = 5,
        filters: RetrievalFilters | None = None,
    ) -> list[NodeWithScore]: ...


class RetrieverQueryEngine:
    """Retrieve the top-k nodes, then ask the LLM to answer from them."""

    def __init__(
        self,
        retriever: Retriever,
        llm: LLMClient | None = None,
        top_k: int = 5,
        filters: RetrievalFilters | None = None,
    ) -> None:
        self.retriever = retriever
        self.llm = llm
        self.top_k = top_k
        self.filters = filters

    def _build_payload(self, question: str, nodes: list[NodeWithScore]) -> PromptPayload:
        contexts = [
            PromptBlock(
                type="context",
                content=item.node.text,
                metadata={
                    "source": item.node.metadata.get("source", "unknown"),
                    "title": item.node.metadata.get("title", ""),
                },
            )
            for item in nodes
        ]
        return PromptPayload.build(question, contexts)

    async def query(self, question: str) -> EngineResponse:
        """Answer ``question`` from the retrieved nodes.

        Raises:
            ConfigurationError: If there are nodes to synthesize from but no LLM
        """
        nodes = await self.retriever.retrieve(question, top_k=self.top_k, filters=self.filters)
        logger.debug(f"Retrieved {len(nodes)} nodes for query")

        if not nodes:
            return EngineResponse(response=NO_MATCH_RESPONSE, source_nodes=[])

        if self.llm is None:
            raise ConfigurationError("No LLM provider configured; set OPENAI_API_KEY or ANTHROPIC_API_KEY")

        result = await self.llm.complete(self._build_payload(question, nodes))
        return EngineResponse(response=result.content, source_nodes=nodes)
