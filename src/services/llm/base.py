from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class CompletionRequest:
    """A single prompt with its decoding configuration."""

    prompt: str
    max_tokens: int
    temperature: float


@dataclass
class Completion:
    """Raw text returned by a model, plus usage accounting."""

    text: str
    model: str = ""
    input_tokens: int = 0
    output_tokens: int = 0


class LLMProvider(ABC):
    """Abstract base class for LLM providers."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider name."""
        pass

    @property
    @abstractmethod
    def model(self) -> str:
        """Model identifier."""
        pass

    @abstractmethod
    async def complete(self, request: CompletionRequest) -> Completion:
        """Send the prompt and return the model's raw reply.

        Raises:
            LLMError: On network, authentication or provider failures.
        """
        pass

    @abstractmethod
    def is_available(self) -> bool:
        """Check if this provider is configured and available."""
        pass
