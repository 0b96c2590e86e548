"""Tome LLM module."""

from .base import LLMClient, LLMResponse, PromptBlock, PromptPayload

__all__ = [
    "LLMClient",
    "LLMResponse",
    "PromptBlock",
    "PromptPayload",
]
