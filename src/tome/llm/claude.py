"""Client for Anthropic's Claude API."""

from typing import Any

from anthropic import AsyncAnthropic

from tome.llm.base import LLMClient, LLMResponse, PromptPayload


class ClaudeClient(LLMClient):
    """Client for interacting with Claude API."""

    provider = "claude"

    def __init__(
        self,
        api_key: str,
        model: str = "claude-3-5-haiku-latest",
        max_tokens: int = 1000,
        temperature: float = 0.7,
    ):
        """Initialize Claude client."""
        self.client = AsyncAnthropic(api_key=api_key)
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature

    async def complete(self, payload: PromptPayload, **kwargs: Any) -> LLMResponse:
        """Complete a prompt with Claude."""
        response = await self.client.messages.create(
            model=self.model,
            max_tokens=self.max_tokens,
            temperature=self.temperature,
            system=payload.system,
            messages=[{"role": "user", "content": self._format_payload(payload)}],
            **kwargs,
        )

        text = "".join(
            getattr(block, "text", "") for block in response.content
        )
        return LLMResponse(
            content=text,
            metadata={"model": self.model},
            usage=response.usage,
        )

    def _format_payload(self, payload: PromptPayload) -> str:
        """Format context and question as a single user turn."""
        context = payload.context_text()
        if context:
            return f"{context}\n\n{payload.query}"
        return payload.query
