import httpx
import structlog

from src.core.config import settings
from src.core.exceptions import LLMError
from src.services.llm.base import Completion, CompletionRequest, LLMProvider

logger = structlog.get_logger()

DEFAULT_OLLAMA_MODEL = "deepseek-coder:6.7b"


class OllamaProvider(LLMProvider):
    """Ollama provider for local LLM inference."""

    def __init__(self, model: str | None = None, base_url: str | None = None) -> None:
        self._model = model or DEFAULT_OLLAMA_MODEL
        self._base_url = base_url or settings.ollama_host

    @property
    def name(self) -> str:
        return "ollama"

    @property
    def model(self) -> str:
        return self._model

    def is_available(self) -> bool:
        """Check if Ollama server is running."""
        try:
            with httpx.Client(timeout=5.0) as client:
                response = client.get(f"{self._base_url}/api/tags")
                is_ok: bool = response.status_code == 200
                return is_ok
        except httpx.HTTPError:
            return False

    async def complete(self, request: CompletionRequest) -> Completion:
        logger.debug("Sending completion request to Ollama", model=self._model)

        try:
            async with httpx.AsyncClient(timeout=120.0) as client:
                response = await client.post(
                    f"{self._base_url}/api/generate",
                    json={
                        "model": self._model,
                        "prompt": request.prompt,
                        "stream": False,
                        "format": "json",
                        "options": {
                            "temperature": request.temperature,
                            "num_predict": request.max_tokens,
                        },
                    },
                )
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPError as e:
            raise LLMError(f"Ollama API error: {e}") from e
        except ValueError as e:
            raise LLMError(f"Ollama returned invalid JSON: {e}") from e

        if not isinstance(data, dict):
            raise LLMError("Unexpected response format from Ollama")

        return Completion(
            text=data.get("response", ""),
            model=self._model,
            input_tokens=data.get("prompt_eval_count", 0),
            output_tokens=data.get("eval_count", 0),
        )
