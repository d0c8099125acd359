"""
Conversation history sent to the model on every request.
"""
from typing import Iterator, Optional

from ..llm.types import Turn


class ConversationState:
    """
    Ordered, append-only log of turns.

    The log is replayed verbatim to the model on every request, so insertion
    order matters. It grows without bound until ``reset`` is called.
    """

    def __init__(self, system_prompt: Optional[str] = None) -> None:
        """
        Initialize the log, seeded with the system prompt if given.

        Args:
            system_prompt: Text of the first user turn
        """
        self._turns: list[Turn] = []
        self.reset(system_prompt)

    def append(self, turn: Turn) -> None:
        """Add a turn to the end of the log."""
        self._turns.append(turn)

    def reset(self, system_prompt: Optional[str] = None) -> None:
        """
        Discard all turns and re-seed the log.

        Args:
            system_prompt: Text of the seed user turn; no seed when empty
        """
        self._turns = []
        if system_prompt:
            self._turns.append(Turn.user(system_prompt))

    @property
    def turns(self) -> tuple[Turn, ...]:
        """Immutable view of the current turns."""
        return tuple(self._turns)

    def snapshot(self) -> list[Turn]:
        """Copy of the current turns, safe to hand to a request builder."""
        return list(self._turns)

    def __len__(self) -> int:
        return len(self._turns)

    def __iter__(self) -> Iterator[Turn]:
        return iter(tuple(self._turns))

    def __repr__(self) -> str:
        return f"ConversationState(turns={len(self._turns)})"
