"""Tests for retrieval plus synthesis."""

import pytest

from conftest import FakeLLM
from tome.exceptions import ConfigurationError
from tome.index.engine import NO_MATCH_RESPONSE, RetrieverQueryEngine
from tome.index.types import IndexNode, NodeWithScore, RetrievalFilters


class FixedRetriever:
    def __init__(self, nodes: list[NodeWithScore]) -> None:
        self.nodes = nodes
        self.calls: list[tuple[str, int, RetrievalFilters | None]] = []

    async def retrieve(self, question, top_k=5, filters=None):
        self.calls.append((question, top_k, filters))
        return self.nodes[:top_k]


def scored(node_id: str, text: str, score: float) -> NodeWithScore:
    node = IndexNode(node_id, text, {"id": node_id, "title": f"Doc {node_id}", "source": f"src-{node_id}"})
    return NodeWithScore(node=node, score=score)


@pytest.mark.asyncio
async def test_query_builds_payload_from_nodes(llm: FakeLLM) -> None:
    retriever = FixedRetriever([scored("a", "alpha text", 0.9), scored("b", "beta text", 0.5)])
    filters = RetrievalFilters(category="x")
    engine = RetrieverQueryEngine(retriever, llm=llm, top_k=2, filters=filters)

    response = await engine.query("what is alpha?")

    assert retriever.calls == [("what is alpha?", 2, filters)]
    assert response.response == "Answer from: Doc a, Doc b"
    assert [n.node.node_id for n in response.source_nodes] == ["a", "b"]

    [payload] = llm.payloads
    assert payload.query == "what is alpha?"
    contexts = [b for b in payload.blocks if b.type == "context"]
    assert [b.content for b in contexts] == ["alpha text", "beta text"]
    assert contexts[0].metadata["source"] == "src-a"
    assert 'source="src-b"' in payload.context_text()


@pytest.mark.asyncio
async def test_no_nodes_skips_llm(llm: FakeLLM) -> None:
    engine = RetrieverQueryEngine(FixedRetriever([]), llm=llm)

    response = await engine.query("anything")

    assert response.response == NO_MATCH_RESPONSE
    assert response.source_nodes == []
    assert llm.payloads == []


@pytest.mark.asyncio
async def test_missing_llm_raises() -> None:
    engine = RetrieverQueryEngine(FixedRetriever([scored("a", "alpha", 1.0)]), llm=None)

    with pytest.raises(ConfigurationError):
        await engine.query("anything")
