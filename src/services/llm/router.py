import time
from typing import Literal

import structlog

from src.core.config import settings
from src.core.exceptions import LLMError, LLMProviderUnavailableError
from src.core.metrics import record_llm_request
from src.services.llm.anthropic import AnthropicProvider
from src.services.llm.base import Completion, CompletionRequest, LLMProvider
from src.services.llm.ollama import OllamaProvider
from src.services.llm.openai import OpenAIProvider

logger = structlog.get_logger()

ProviderName = Literal["openai", "anthropic", "ollama"]


class LLMRouter:
    """Routes completion requests to the configured LLM provider.

    There is no cross-provider fallback: a failed call surfaces as an
    ``LLMError`` and the caller decides what to skip.
    """

    def __init__(
        self,
        provider: ProviderName | None = None,
        model: str | None = None,
    ) -> None:
        self.provider_name: ProviderName = provider or settings.llm_provider
        self.model_name = model if model is not None else settings.model
        self._provider: LLMProvider | None = None

    def _create_provider(self, name: ProviderName) -> LLMProvider:
        if name == "openai":
            return OpenAIProvider(model=self.model_name)
        if name == "anthropic":
            return AnthropicProvider(model=self.model_name)
        if name == "ollama":
            return OllamaProvider(model=self.model_name)
        raise LLMProviderUnavailableError(f"Unknown provider: {name}")

    @property
    def provider(self) -> LLMProvider:
        """The provider instance, created on first use."""
        if self._provider is None:
            self._provider = self._create_provider(self.provider_name)
        return self._provider

    async def complete(self, request: CompletionRequest) -> Completion:
        """
        Send a completion request to the configured provider.

        Args:
            request: The prompt and decoding configuration.

        Returns:
            The model's raw completion.

        Raises:
            LLMError: If the provider is unavailable or the call fails.
        """
        llm = self.provider
        start_time = time.perf_counter()

        try:
            completion = await llm.complete(request)
        except LLMError:
            record_llm_request(
                provider=llm.name,
                model=llm.model,
                status="error",
                duration_seconds=time.perf_counter() - start_time,
            )
            raise

        record_llm_request(
            provider=llm.name,
            model=llm.model,
            status="success",
            duration_seconds=time.perf_counter() - start_time,
            tokens_input=completion.input_tokens,
            tokens_output=completion.output_tokens,
        )
        return completion
