"""
Slash command primitives: the command interface, its context and its result.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Optional, Tuple

if TYPE_CHECKING:
    from ..config import ConfigManager
    from ..conversation import ConversationLoop
    from .registry import CommandRegistry


class CommandAction(Enum):
    """What the CLI should do after printing a command's message."""
    NONE = "none"
    EXIT = "exit"
    CLEAR = "clear"


@dataclass(frozen=True)
class CommandResult:
    """Outcome of one slash command."""
    message: str = ""
    is_error: bool = False
    action: CommandAction = CommandAction.NONE

    @classmethod
    def ok(cls, message: str = "") -> "CommandResult":
        return cls(message=message)

    @classmethod
    def fail(cls, message: str) -> "CommandResult":
        return cls(message=message, is_error=True)

    @classmethod
    def exit(cls, message: str = "") -> "CommandResult":
        return cls(message=message, action=CommandAction.EXIT)

    @classmethod
    def clear(cls) -> "CommandResult":
        return cls(action=CommandAction.CLEAR)

    @property
    def should_exit(self) -> bool:
        return self.action is CommandAction.EXIT

    @property
    def should_clear(self) -> bool:
        return self.action is CommandAction.CLEAR


@dataclass
class CommandContext:
    """
    Everything a command may act on.

    Attributes:
        loop: The chat session the command belongs to
        registry: Registry the command was dispatched from
        config: Application configuration, when running under the CLI
    """
    loop: "ConversationLoop"
    registry: "CommandRegistry"
    config: Optional["ConfigManager"] = None


class SlashCommand(ABC):
    """
    A command typed as ``/name [args]`` at the prompt.

    Subclasses set ``name`` and ``summary`` and implement ``run``. Every
    concrete subclass in the ``commands`` package is registered
    automatically.
    """

    name: str = ""
    summary: str = ""
    aliases: Tuple[str, ...] = ()
    usage: str = ""

    @abstractmethod
    def run(self, args: str, context: CommandContext) -> CommandResult:
        """
        Execute the command.

        Args:
            args: Text after the command word, stripped
            context: Session the command acts on

        Returns:
            Message to show and the follow-up action
        """

    @property
    def invocations(self) -> Tuple[str, ...]:
        """The name followed by every alias."""
        return (self.name,) + tuple(self.aliases)

    def help_text(self) -> str:
        """Markdown help for this command."""
        signature = f"/{self.name} {self.usage}".rstrip()
        text = f"`{signature}`: {self.summary}"
        if self.aliases:
            others = ", ".join(f"/{alias}" for alias in self.aliases)
            text += f" (also {others})"
        return text

    def __repr__(self) -> str:
        return f"<SlashCommand /{self.name}>"
