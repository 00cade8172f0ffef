from src.services.llm.base import Completion, CompletionRequest, LLMProvider
from src.services.llm.router import LLMRouter

__all__ = [
    "Completion",
    "CompletionRequest",
    "LLMProvider",
    "LLMRouter",
]
