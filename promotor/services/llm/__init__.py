"""LLM module: Gemini REST client and prompt texts."""

from .client import (
    ChatTurn,
    GeminiClient,
    LLMResponse,
    close_llm_client,
    get_llm_client,
)

__all__ = [
    "ChatTurn",
    "GeminiClient",
    "LLMResponse",
    "close_llm_client",
    "get_llm_client",
]
