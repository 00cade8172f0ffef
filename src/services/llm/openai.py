from typing import Any

import openai
import structlog

from src.core.config import settings
from src.core.exceptions import LLMError, LLMProviderUnavailableError, LLMRateLimitError
from src.services.llm.base import Completion, CompletionRequest, LLMProvider

logger = structlog.get_logger()

DEFAULT_OPENAI_MODEL = "gpt-4o"

# Models that accept response_format={"type": "json_object"}
JSON_MODE_MODEL_PREFIXES = (
    "gpt-4o",
    "gpt-4.1",
    "gpt-4-turbo",
    "gpt-4-1106-preview",
    "gpt-4-0125-preview",
    "gpt-3.5-turbo-1106",
    "gpt-3.5-turbo-0125",
)


class OpenAIProvider(LLMProvider):
    """OpenAI chat completions provider."""

    def __init__(self, model: str | None = None) -> None:
        self._model = model or DEFAULT_OPENAI_MODEL
        self._client: openai.AsyncOpenAI | None = None

    @property
    def name(self) -> str:
        return "openai"

    @property
    def model(self) -> str:
        return self._model

    @property
    def supports_json_mode(self) -> bool:
        return self._model.startswith(JSON_MODE_MODEL_PREFIXES)

    def _get_client(self) -> openai.AsyncOpenAI:
        """Lazy initialization of the OpenAI client."""
        if self._client is None:
            if not self.is_available():
                raise LLMProviderUnavailableError("OpenAI API key not configured")

            self._client = openai.AsyncOpenAI(
                api_key=settings.openai_api_key.get_secret_value()  # type: ignore[union-attr]
            )
        return self._client

    def is_available(self) -> bool:
        return settings.openai_api_key is not None

    async def complete(self, request: CompletionRequest) -> Completion:
        client = self._get_client()

        extra: dict[str, Any] = {}
        if self.supports_json_mode:
            extra["response_format"] = {"type": "json_object"}

        logger.debug("Sending completion request to OpenAI", model=self._model)

        try:
            response = await client.chat.completions.create(
                model=self._model,
                messages=[{"role": "system", "content": request.prompt}],
                max_tokens=request.max_tokens,
                temperature=request.temperature,
                top_p=1,
                frequency_penalty=0,
                presence_penalty=0,
                **extra,
            )
        except openai.RateLimitError as e:
            raise LLMRateLimitError(f"OpenAI rate limit exceeded: {e}") from e
        except openai.OpenAIError as e:
            raise LLMError(f"OpenAI API error: {e}") from e

        if not response.choices:
            raise LLMError("OpenAI returned no choices")

        usage = response.usage
        return Completion(
            text=response.choices[0].message.content or "",
            model=self._model,
            input_tokens=usage.prompt_tokens if usage else 0,
            output_tokens=usage.completion_tokens if usage else 0,
        )
