"""
Display messages: what the user sees, as opposed to what the model sees.
"""
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Iterator, Optional


class MessageKind(Enum):
    """Kinds of events shown to the user."""
    USER = "user"
    ASSISTANT = "assistant"
    TOOL_NOTICE = "tool_notice"
    SHELL_OUTPUT = "shell_output"
    TOOL_OUTPUT = "tool_output"
    ERROR = "error"


@dataclass(frozen=True)
class DisplayMessage:
    """A single rendered event."""
    kind: MessageKind
    content: str
    timestamp: float = field(default_factory=time.time, compare=False)

    @property
    def is_error(self) -> bool:
        return self.kind is MessageKind.ERROR


DisplayListener = Callable[[DisplayMessage], None]


class MessageLog:
    """Ordered list of display messages with an optional listener."""

    def __init__(self, listener: Optional[DisplayListener] = None) -> None:
        self._messages: list[DisplayMessage] = []
        self._listener = listener

    def add(self, kind: MessageKind, content: str) -> DisplayMessage:
        """Record a message and forward it to the listener."""
        message = DisplayMessage(kind=kind, content=content)
        self._messages.append(message)
        if self._listener is not None:
            self._listener(message)
        return message

    def clear(self) -> None:
        self._messages = []

    @property
    def messages(self) -> list[DisplayMessage]:
        return list(self._messages)

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self) -> Iterator[DisplayMessage]:
        return iter(list(self._messages))
