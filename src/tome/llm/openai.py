"""Client for interacting with OpenAI API."""

from typing import Any

from openai import AsyncOpenAI

from tome.llm.base import LLMClient, LLMResponse, PromptPayload


class OpenAIClient(LLMClient):
    """Client for interacting with OpenAI API."""

    provider = "openai"

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o-mini",
        max_tokens: int = 1000,
        temperature: float = 0.7,
    ):
        """Initialize OpenAI client."""
        self.client = AsyncOpenAI(api_key=api_key)
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature

    async def complete(self, payload: PromptPayload, **kwargs: Any) -> LLMResponse:
        """Complete a prompt with OpenAI."""
        response = await self.client.chat.completions.create(
            model=self.model,
            messages=self._format_payload(payload),
            max_tokens=self.max_tokens,
            temperature=self.temperature,
            **kwargs,
        )

        return LLMResponse(
            content=response.choices[0].message.content or "",
            metadata={"model": self.model},
            usage=response.usage,
        )

    def _format_payload(self, payload: PromptPayload) -> list[dict[str, str]]:
        """Format the payload as chat messages."""
        messages = [{"role": "system", "content": payload.system}]

        context = payload.context_text()
        if context:
            messages.append({"role": "user", "content": context})

        messages.append({"role": "user", "content": payload.query})
        return messages
