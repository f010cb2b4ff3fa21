"""LLM package initialization."""

from rephrase_ai.llm.errors import GenerationError
from rephrase_ai.llm.gemini_provider import GeminiProvider
from rephrase_ai.llm.parsing import MalformedStructuredResponse, parse_structured
from rephrase_ai.llm.provider import GenerationParameters, LLMProvider

__all__ = [
    "GeminiProvider",
    "GenerationError",
    "GenerationParameters",
    "LLMProvider",
    "MalformedStructuredResponse",
    "parse_structured",
]
