"""Factory for creating LLM clients."""

from tome.config import TomeConfig
from tome.exceptions import ConfigurationError
from tome.llm.base import LLMClient
from tome.llm.claude import ClaudeClient
from tome.llm.openai import OpenAIClient


def create_llm_client(settings: TomeConfig.LLM) -> LLMClient:
    """Create an LLM client based on configuration.

    Args:
        settings: LLM section of the Tome configuration

    Returns:
        An instance of LLMClient

    Raises:
        ConfigurationError: If the API key is missing or the provider is not supported
    """
    if not settings.api_key:
        env_var = "ANTHROPIC_API_KEY" if settings.provider == "claude" else "OPENAI_API_KEY"
        raise ConfigurationError(f"{env_var} environment variable is required")

    if settings.provider == "openai":
        return OpenAIClient(
            api_key=settings.api_key,
            model=settings.model or "gpt-4o-mini",
            max_tokens=settings.max_tokens,
            temperature=settings.temperature,
        )
    elif settings.provider == "claude":
        return ClaudeClient(
            api_key=settings.api_key,
            model=settings.model or "claude-3-5-haiku-latest",
            max_tokens=settings.max_tokens,
            temperature=settings.temperature,
        )
    else:
        raise ConfigurationError(f"Unsupported LLM provider: {settings.provider}")
