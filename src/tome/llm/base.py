"""Base interface for LLM clients."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

SYSTEM_INSTRUCTIONS = (
    "You answer questions using only the documents provided as context. "
    "If the context does not contain the answer, say so plainly."
)


@dataclass
class PromptBlock:
    """A block of content in a prompt payload."""

    type: str  # "system", "context" or "user"
    content: str
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass
class PromptPayload:
    """A complete prompt: instructions, retrieved context and the question."""

    blocks: list[PromptBlock]
    query: str

    @classmethod
    def build(cls, query: str, contexts: list[PromptBlock]) -> "PromptPayload":
        """Build a payload with the default system instructions."""
        blocks = [PromptBlock(type="system", content=SYSTEM_INSTRUCTIONS)]
        blocks.extend(contexts)
        blocks.append(PromptBlock(type="user", content=query))
        return cls(blocks=blocks, query=query)

    @property
    def system(self) -> str:
        return "\n\n".join(b.content for b in self.blocks if b.type == "system")

    def context_text(self) -> str:
        """Join context blocks, each tagged with its source."""
        parts = []
        for block in self.blocks:
            if block.type != "context":
                continue
            source = block.metadata.get("source", "unknown")
            parts.append(f"<context source=\"{source}\">\n{block.content}\n</context>")
        return "\n\n".join(parts)


@dataclass
class LLMResponse:
    """Response from an LLM backend."""

    content: str
    metadata: dict[str, Any] = field(default_factory=dict)
    usage: Any = None


class LLMClient(ABC):
    """Abstract base class for LLM clients."""

    provider: str = "llm"

    @abstractmethod
    async def complete(self, payload: PromptPayload, **kwargs: Any) -> LLMResponse:
        """Complete a prompt with the LLM.

        Args:
            payload: The prompt payload to send to the LLM
            **kwargs: Additional model-specific arguments

        Returns:
            The complete response
        """
        pass
