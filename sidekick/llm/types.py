"""
Conversation data types shared by the LLM client and the conversation loop.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Union


class TurnRole(Enum):
    """Role of a turn in the conversation history."""
    USER = "user"
    MODEL = "model"
    TOOL_RESULT = "tool-result"


@dataclass(frozen=True)
class ToolResult:
    """Outcome of one tool dispatch, as reported back to the model.

    Exactly one of ``result`` and ``error`` is set.
    """
    name: str
    result: Optional[str] = None
    error: Optional[str] = None

    @property
    def is_error(self) -> bool:
        return self.error is not None


@dataclass(frozen=True)
class Turn:
    """One role-tagged entry in the conversation history.

    Attributes:
        role: Who produced the turn.
        text: Free text for user and model turns.
        tool_result: Structured payload for tool-result turns.
    """
    role: TurnRole
    text: Optional[str] = None
    tool_result: Optional[ToolResult] = None

    def __post_init__(self) -> None:
        if self.role is TurnRole.TOOL_RESULT:
            if self.tool_result is None:
                raise ValueError("tool-result turns need a tool_result payload")
        elif self.text is None:
            raise ValueError(f"{self.role.value} turns need text")

    @classmethod
    def user(cls, text: str) -> "Turn":
        return cls(role=TurnRole.USER, text=text)

    @classmethod
    def model(cls, text: str) -> "Turn":
        return cls(role=TurnRole.MODEL, text=text)

    @classmethod
    def tool(
        cls,
        name: str,
        result: Optional[str] = None,
        error: Optional[str] = None,
    ) -> "Turn":
        """Create a tool-result turn carrying either a result or an error."""
        if (result is None) == (error is None):
            raise ValueError("exactly one of result and error must be given")
        return cls(
            role=TurnRole.TOOL_RESULT,
            tool_result=ToolResult(name=name, result=result, error=error),
        )


@dataclass(frozen=True)
class ToolCallRequest:
    """A model-initiated request to invoke a named tool."""
    name: str
    arguments: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class TextResponse:
    """The model answered with plain text."""
    text: str


@dataclass(frozen=True)
class ToolCallResponse:
    """The model asked for a tool to be run."""
    call: ToolCallRequest


LLMResponse = Union[TextResponse, ToolCallResponse]
