"""Test fixtures for Tome."""

import hashlib
import re
from collections.abc import Sequence
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any

import numpy as np
import pytest

from tome.config import TomeConfig
from tome.index.engine import RetrieverQueryEngine
from tome.index.types import IndexNode, NodeWithScore, RetrievalFilters
from tome.knowledge_base import KnowledgeBase
from tome.llm.base import LLMClient, LLMResponse, PromptPayload
from tome.store.models import StoreConfig

WORD = re.compile(r"\w+")


class MutableClock:
    """Clock whose current time tests can move."""

    def __init__(self, now: datetime | None = None) -> None:
        self.now = now or datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


def word_overlap(question: str, text: str) -> float:
    asked = set(WORD.findall(question.lower()))
    words = set(WORD.findall(text.lower()))
    if not asked or not words:
        return 0.0
    return len(asked & words) / len(asked)


class StubIndex:
    """In-memory index that scores nodes by word overlap."""

    def __init__(self, backend: "StubBackend", nodes: Sequence[IndexNode]) -> None:
        self.backend = backend
        self.nodes: dict[str, IndexNode] = {node.node_id: node for node in nodes}

    async def insert(self, node: IndexNode) -> None:
        if self.backend.fail_inserts:
            raise RuntimeError("insert failed")
        self.backend.inserts += 1
        self.nodes[node.node_id] = node

    async def retrieve(
        self,
        question: str,
        top_k: int = 5,
        filters: RetrievalFilters | None = None,
    ) -> list[NodeWithScore]:
        if self.backend.fail_queries:
            raise RuntimeError("backend exploded")
        filters = filters or RetrievalFilters()
        scored = []
        for node in self.nodes.values():
            if filters.category and node.metadata["category"] != filters.category:
                continue
            if filters.tags:
                tags = {t.strip() for t in node.metadata["tags"].split(",")}
                if not tags.intersection(filters.tags):
                    continue
            scored.append(NodeWithScore(node=node, score=word_overlap(question, node.text)))
        scored.sort(key=lambda item: item.score or 0.0, reverse=True)
        return scored[:top_k]

    def as_query_engine(
        self,
        llm: LLMClient | None = None,
        top_k: int = 5,
        filters: RetrievalFilters | None = None,
    ) -> RetrieverQueryEngine:
        return RetrieverQueryEngine(self, llm=llm, top_k=top_k, filters=filters)


class StubBackend:
    """Index backend that counts builds and inserts."""

    def __init__(self) -> None:
        self.builds = 0
        self.inserts = 0
        self.fail_builds = False
        self.fail_inserts = False
        self.fail_queries = False
        self.index: StubIndex | None = None

    async def build_from_documents(self, nodes: Sequence[IndexNode]) -> StubIndex:
        if self.fail_builds:
            raise RuntimeError("build failed")
        self.builds += 1
        self.index = StubIndex(self, nodes)
        return self.index

    async def load_persisted(self, nodes: Sequence[IndexNode]) -> StubIndex | None:
        return None

    @property
    def node_ids(self) -> set[str]:
        return set(self.index.nodes) if self.index else set()


class FakeLLM(LLMClient):
    """LLM client that records payloads and answers with the context titles."""

    provider = "fake"

    def __init__(self) -> None:
        self.payloads: list[PromptPayload] = []

    async def complete(self, payload: PromptPayload, **kwargs: Any) -> LLMResponse:
        self.payloads.append(payload)
        titles = [b.metadata.get("title", "") for b in payload.blocks if b.type == "context"]
        return LLMResponse(content=f"Answer from: {', '.join(titles)}")


class HashingEngine:
    """Deterministic bag-of-words embeddings for ChromaDB tests."""

    dimensions = 64

    def embed_texts(self, texts: list[str]) -> list[np.ndarray]:
        vectors = []
        for text in texts:
            vector = np.zeros(self.dimensions, dtype=np.float32)
            for word in WORD.findall(text.lower()):
                bucket = int(hashlib.md5(word.encode()).hexdigest(), 16) % self.dimensions
                vector[bucket] += 1.0
            norm = np.linalg.norm(vector)
            if norm == 0:
                vector[0] = 1.0
                norm = 1.0
            vectors.append(vector / norm)
        return vectors


@pytest.fixture
def clock() -> MutableClock:
    return MutableClock()


@pytest.fixture
def store_config(tmp_path: Path) -> StoreConfig:
    return StoreConfig(
        data_dir=tmp_path / "data",
        vector_store_dir=tmp_path / "vectors",
    )


@pytest.fixture
def tome_config(tmp_path: Path) -> TomeConfig:
    return TomeConfig(
        paths=TomeConfig.Paths(
            data_dir=tmp_path / "data",
            vector_store_dir=tmp_path / "vectors",
            logs_dir=tmp_path / "logs",
        )
    )


@pytest.fixture
def backend() -> StubBackend:
    return StubBackend()


@pytest.fixture
def llm() -> FakeLLM:
    return FakeLLM()


@pytest.fixture
def knowledge_base(
    tome_config: TomeConfig, backend: StubBackend, llm: FakeLLM, clock: MutableClock
) -> KnowledgeBase:
    return KnowledgeBase(tome_config, backend=backend, llm=llm, clock=clock)
