"""Abstract base class for LLM providers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class GenerationParameters:
    """Prompt plus sampling parameters for one generation call."""

    prompt: str
    max_output_tokens: int
    temperature: float

    def __post_init__(self) -> None:
        if not self.prompt:
            raise ValueError("prompt must not be empty")
        if self.max_output_tokens <= 0:
            raise ValueError("max_output_tokens must be a positive integer")
        if not 0.0 <= self.temperature <= 2.0:
            raise ValueError("temperature must be within [0, 2]")


class LLMProvider(ABC):
    """Abstract base class for LLM providers.

    Keeps the task layer independent of the concrete backend, and lets tests
    substitute a stub.
    """

    @abstractmethod
    def generate(
        self,
        prompt: str,
        max_tokens: int | None = None,
        temperature: float | None = None,
        **kwargs: Any,
    ) -> str:
        """Generate text completion from a prompt.

        Args:
            prompt: The input prompt.
            max_tokens: Maximum tokens to generate.
            temperature: Sampling temperature.
            **kwargs: Additional provider-specific parameters.

        Returns:
            Generated text completion.

        Raises:
            GenerationError: If the call fails or yields no usable text.
        """

    def run(self, params: GenerationParameters) -> str:
        """Generate text for a prepared set of call parameters."""
        return self.generate(
            params.prompt,
            max_tokens=params.max_output_tokens,
            temperature=params.temperature,
        )
