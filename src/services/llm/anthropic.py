from typing import Any

import structlog

from src.core.config import settings
from src.core.exceptions import LLMError, LLMProviderUnavailableError, LLMRateLimitError
from src.services.llm.base import Completion, CompletionRequest, LLMProvider

logger = structlog.get_logger()

DEFAULT_ANTHROPIC_MODEL = "claude-sonnet-4-20250514"


class AnthropicProvider(LLMProvider):
    """Anthropic Claude provider."""

    def __init__(self, model: str | None = None) -> None:
        self._model = model or DEFAULT_ANTHROPIC_MODEL
        self._client: Any = None

    @property
    def name(self) -> str:
        return "anthropic"

    @property
    def model(self) -> str:
        return self._model

    def _get_client(self) -> Any:
        """Lazy initialization of Anthropic client."""
        if self._client is None:
            if not self.is_available():
                raise LLMProviderUnavailableError("Anthropic API key not configured")

            import anthropic

            self._client = anthropic.AsyncAnthropic(
                api_key=settings.anthropic_api_key.get_secret_value()  # type: ignore[union-attr]
            )
        return self._client

    def is_available(self) -> bool:
        return settings.anthropic_api_key is not None

    async def complete(self, request: CompletionRequest) -> Completion:
        import anthropic

        client = self._get_client()

        logger.debug("Sending completion request to Anthropic", model=self._model)

        try:
            message = await client.messages.create(
                model=self._model,
                max_tokens=request.max_tokens,
                temperature=request.temperature,
                messages=[{"role": "user", "content": request.prompt}],
            )
        except anthropic.RateLimitError as e:
            raise LLMRateLimitError(f"Anthropic rate limit exceeded: {e}") from e
        except anthropic.AnthropicError as e:
            raise LLMError(f"Anthropic API error: {e}") from e

        text = "".join(
            block.text for block in message.content if getattr(block, "type", "") == "text"
        )

        return Completion(
            text=text,
            model=self._model,
            input_tokens=message.usage.input_tokens,
            output_tokens=message.usage.output_tokens,
        )
