"""Completion service interface and its input types."""

from abc import ABC, abstractmethod
from typing import Literal, Sequence, Union

from pydantic import BaseModel, Field

Speaker = Literal["user", "assistant"]


class ContextEntry(BaseModel):
    """One speaker-tagged entry of the context sent to the completion service."""

    speaker: Speaker = Field(..., description="Who is speaking: 'user' or 'assistant'")
    text: str = Field(..., description="Entry text")


Prompt = Union[str, Sequence[ContextEntry]]


class CompletionService(ABC):
    """Text completion backend.

    Implementations may be slow and unreliable; every failure must surface as
    CompletionServiceError so callers can decide whether to absorb it.
    """

    @abstractmethod
    async def complete(self, prompt: Prompt) -> str:
        """Complete a single prompt or an ordered sequence of context entries.

        Args:
            prompt: Plain prompt text, or entries whose last item is the
                message to answer

        Returns:
            The completion text

        Raises:
            CompletionServiceError: If the backend fails or times out
        """
