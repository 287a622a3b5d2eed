"""Async client for the hosted Gemini REST API.

All AI features (assistant chat, feasibility narrative, document field
extraction) go through ``GeminiClient.generate``. The client never retries;
callers get a domain error and decide what to show.
"""

import base64
import time
from typing import Any, Literal

import httpx
from pydantic import BaseModel

from promotor.core.config import settings
from promotor.core.exceptions import (
    LLMConfigurationError,
    LLMRateLimitError,
    LLMServiceError,
)
from promotor.core.logging import get_structured_logger
from promotor.core.metrics import record_llm_request
from promotor.shared.logging import log_llm_request, log_llm_response

logger = get_structured_logger(__name__)


class ChatTurn(BaseModel):
    """One turn of a conversation as the model sees it."""

    role: Literal["user", "model"]
    text: str


class LLMResponse(BaseModel):
    """Response from the LLM service."""

    content: str
    model: str
    input_tokens: int = 0
    output_tokens: int = 0
    finish_reason: str = ""


class GeminiClient:
    """Async client for ``models/{model}:generateContent``.

    The API key is read on every call so a key added to the settings
    after startup is picked up; without one every call raises
    ``LLMConfigurationError``.
    """

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        timeout: int | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            api_key: Optional API key overriding the settings.
            base_url: Optional API root overriding the settings.
            timeout: Optional timeout in seconds.
        """
        self._api_key = api_key
        self.base_url = (base_url or settings.llm.api_base_url).rstrip("/")
        self.timeout = timeout or settings.llm.timeout
        self._client: httpx.AsyncClient | None = None

    @property
    def api_key(self) -> str:
        """Configured API key (may be empty)."""
        return (self._api_key if self._api_key is not None else settings.llm.api_key).strip()

    @property
    def is_configured(self) -> bool:
        """Whether calls can be made at all."""
        return bool(self.api_key)

    @property
    def client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers={"Content-Type": "application/json"},
                timeout=httpx.Timeout(self.timeout, connect=10.0),
            )
        return self._client

    def _require_api_key(self) -> str:
        if not self.api_key:
            raise LLMConfigurationError()
        return self.api_key

    @staticmethod
    def build_payload(
        contents: list[dict[str, Any]],
        *,
        system_instruction: str | None = None,
        response_mime_type: str | None = None,
        thinking_budget: int | None = None,
    ) -> dict[str, Any]:
        """Build a ``generateContent`` request body.

        Args:
            contents: Conversation contents (role + parts).
            system_instruction: Optional system instruction text.
            response_mime_type: Optional response MIME type (``application/json``).
            thinking_budget: Optional thinking token budget.

        Returns:
            JSON-serializable request body.
        """
        payload: dict[str, Any] = {"contents": contents}

        if system_instruction:
            payload["systemInstruction"] = {"parts": [{"text": system_instruction}]}

        generation_config: dict[str, Any] = {}
        if response_mime_type:
            generation_config["responseMimeType"] = response_mime_type
        if thinking_budget is not None:
            generation_config["thinkingConfig"] = {"thinkingBudget": thinking_budget}
        if generation_config:
            payload["generationConfig"] = generation_config

        return payload

    @staticmethod
    def parse_response(data: dict[str, Any], model: str) -> LLMResponse:
        """Extract the answer text and usage from a ``generateContent`` response.

        Thought parts are skipped; the remaining text parts of the first
        candidate are concatenated.
        """
        candidates = data.get("candidates") or []
        text_parts: list[str] = []
        finish_reason = ""

        if candidates:
            candidate = candidates[0]
            finish_reason = candidate.get("finishReason", "")
            for part in (candidate.get("content") or {}).get("parts") or []:
                if part.get("thought"):
                    continue
                if "text" in part:
                    text_parts.append(part["text"])

        usage = data.get("usageMetadata") or {}
        return LLMResponse(
            content="".join(text_parts),
            model=data.get("modelVersion", model),
            input_tokens=usage.get("promptTokenCount", 0),
            output_tokens=usage.get("candidatesTokenCount", 0),
            finish_reason=finish_reason,
        )

    async def generate(
        self,
        model: str,
        contents: list[dict[str, Any]] | str,
        *,
        system_instruction: str | None = None,
        response_mime_type: str | None = None,
        thinking_budget: int | None = None,
        operation: str = "generate",
    ) -> LLMResponse:
        """Run one ``generateContent`` call.

        Args:
            model: Model name.
            contents: Contents list, or a plain prompt for a single user turn.
            system_instruction: Optional system instruction.
            response_mime_type: Optional response MIME type.
            thinking_budget: Optional thinking token budget.
            operation: Label for logs and metrics.

        Returns:
            LLMResponse with the generated text and usage.

        Raises:
            LLMConfigurationError: No API key is configured.
            LLMRateLimitError: The API answered 429.
            LLMServiceError: Any other HTTP or transport failure.
        """
        api_key = self._require_api_key()

        if isinstance(contents, str):
            contents = [{"role": "user", "parts": [{"text": contents}]}]

        payload = self.build_payload(
            contents,
            system_instruction=system_instruction,
            response_mime_type=response_mime_type,
            thinking_budget=thinking_budget,
        )

        log_llm_request(
            operation,
            model,
            prompt_chars=sum(len(p.get("text", "")) for c in contents for p in c.get("parts", [])),
            has_attachment=any("inline_data" in p for c in contents for p in c.get("parts", [])),
        )

        start_time = time.perf_counter()
        try:
            response = await self.client.post(
                f"/models/{model}:generateContent",
                json=payload,
                headers={"x-goog-api-key": api_key},
            )
        except httpx.TimeoutException as e:
            record_llm_request(operation, model, "timeout", time.perf_counter() - start_time)
            logger.error("LLM request timeout", model=model, operation=operation, error=str(e))
            raise LLMServiceError(f"LLM request timeout after {self.timeout}s") from e
        except httpx.HTTPError as e:
            record_llm_request(operation, model, "error", time.perf_counter() - start_time)
            logger.error("LLM HTTP error", model=model, operation=operation, error=str(e))
            raise LLMServiceError(f"LLM HTTP error: {e}") from e

        latency = time.perf_counter() - start_time

        if response.status_code == 429:
            record_llm_request(operation, model, "rate_limited", latency)
            retry_after = response.headers.get("Retry-After", "60")
            raise LLMRateLimitError(
                f"LLM rate limit exceeded. Retry after {retry_after}s",
                retry_after=retry_after,
            )

        if response.status_code >= 400:
            record_llm_request(operation, model, "error", latency)
            logger.error(
                "LLM request failed",
                model=model,
                operation=operation,
                status_code=response.status_code,
                error=response.text[:500],
            )
            raise LLMServiceError(f"LLM error: {response.status_code} - {response.text[:200]}")

        result = self.parse_response(response.json(), model)

        record_llm_request(
            operation,
            model,
            "success",
            latency,
            input_tokens=result.input_tokens,
            output_tokens=result.output_tokens,
        )
        log_llm_response(
            operation,
            model,
            int(latency * 1000),
            input_tokens=result.input_tokens,
            output_tokens=result.output_tokens,
            finish_reason=result.finish_reason,
        )

        return result

    async def chat(
        self,
        history: list[ChatTurn],
        message: str,
        *,
        system_instruction: str,
        model: str | None = None,
    ) -> LLMResponse:
        """Continue a conversation with one more user message.

        Args:
            history: Previous turns, oldest first.
            message: New user message.
            system_instruction: Assistant persona.
            model: Optional model override.
        """
        contents = [{"role": turn.role, "parts": [{"text": turn.text}]} for turn in history]
        contents.append({"role": "user", "parts": [{"text": message}]})

        return await self.generate(
            model or settings.llm.chat_model,
            contents,
            system_instruction=system_instruction,
            operation="chat",
        )

    async def generate_with_attachment(
        self,
        prompt: str,
        data: bytes,
        mime_type: str,
        *,
        model: str | None = None,
        response_mime_type: str | None = "application/json",
        operation: str = "document_extraction",
    ) -> LLMResponse:
        """Send a file inline (base64) followed by a text prompt.

        Args:
            prompt: Instruction text.
            data: Raw file bytes.
            mime_type: File MIME type.
            model: Optional model override.
            response_mime_type: Response MIME type, JSON by default.
            operation: Label for logs and metrics.
        """
        contents = [
            {
                "role": "user",
                "parts": [
                    {
                        "inline_data": {
                            "mime_type": mime_type,
                            "data": base64.b64encode(data).decode("ascii"),
                        }
                    },
                    {"text": prompt},
                ],
            }
        ]

        return await self.generate(
            model or settings.llm.extraction_model,
            contents,
            response_mime_type=response_mime_type,
            operation=operation,
        )

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "GeminiClient":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()


# Singleton instance
_llm_client: GeminiClient | None = None


def get_llm_client() -> GeminiClient:
    """Get or create the LLM client singleton."""
    global _llm_client
    if _llm_client is None:
        _llm_client = GeminiClient()
    return _llm_client


async def close_llm_client() -> None:
    """Close the LLM client singleton."""
    global _llm_client
    if _llm_client is not None:
        await _llm_client.close()
        _llm_client = None
