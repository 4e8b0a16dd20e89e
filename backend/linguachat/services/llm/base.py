"""Abstract completion provider interface.

All completion implementations must inherit from this class.
Business logic never imports a concrete provider directly.
The concrete provider is instantiated once in the FastAPI lifespan
and injected everywhere via Depends().
"""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass


@dataclass(frozen=True)
class ChatContextEntry:
    """One role/content pair sent to the completion provider."""

    role: str
    content: str

    def to_dict(self) -> dict[str, str]:
        return {"role": self.role, "content": self.content}


@dataclass(frozen=True)
class LLMResponse:
    """Structured response from a completion call, including token usage."""

    text: str
    input_tokens: int = 0
    output_tokens: int = 0


class LLMProvider(ABC):
    """Abstract base class for chat completion providers."""

    @abstractmethod
    async def complete(
        self,
        messages: Sequence[ChatContextEntry],
        max_tokens: int = 500,
        temperature: float = 0.7,
    ) -> LLMResponse:
        """Generate a reply for an ordered chat transcript.

        Args:
            messages: Ordered role/content pairs, system instruction first.
            max_tokens: Maximum tokens in the generated response.
            temperature: Sampling temperature.

        Returns:
            LLMResponse with text content and token usage counts.

        Raises:
            RuntimeError: If the call fails, times out, or returns no text.
        """
        ...
