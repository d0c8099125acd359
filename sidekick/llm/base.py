"""
Base class for LLM clients in sidekick.
Defines the interface the conversation loop depends on.
"""
from abc import ABC, abstractmethod
from typing import Sequence

from .types import LLMResponse, Turn


class LLMClient(ABC):
    """
    Abstract client that turns one prompt plus history into one response.

    Implementations send a single request per call and never retry;
    failures surface as subclasses of ``sidekick.errors.LLMError``.
    """

    @abstractmethod
    async def generate(self, prompt: str, history: Sequence[Turn]) -> LLMResponse:
        """
        Ask the model for the next turn.

        Args:
            prompt: Text of the new user turn
            history: Turns preceding the prompt; not modified

        Returns:
            A TextResponse or a ToolCallResponse

        Raises:
            TransportError: The endpoint could not be reached
            ApiError: The endpoint returned a non-success status
            DecodingError: The response had an unexpected shape
            UnknownLLMError: Any other transport anomaly
        """

    async def aclose(self) -> None:
        """Release network resources held by the client."""

    async def __aenter__(self) -> "LLMClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"
