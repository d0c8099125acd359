"""
Command registry: discovery of the built-in commands and dispatch by name.
"""
import importlib
import inspect
import logging
import pkgutil
from typing import Dict, List, Optional

from .base import CommandContext, CommandResult, SlashCommand

logger = logging.getLogger(__name__)


class CommandRegistry:
    """
    Slash commands indexed by name and alias.

    Built-in commands are found by importing every module of the
    ``commands`` package and instantiating the concrete SlashCommand
    subclasses defined there.
    """

    def __init__(self, discover: bool = True) -> None:
        self._commands: List[SlashCommand] = []
        self._lookup: Dict[str, SlashCommand] = {}
        if discover:
            self._load_builtin_commands()

    def _load_builtin_commands(self) -> None:
        from . import commands

        for info in pkgutil.iter_modules(commands.__path__):
            if info.name.startswith("_"):
                continue
            module_name = f"{commands.__name__}.{info.name}"
            try:
                module = importlib.import_module(module_name)
            except ImportError as e:
                logger.warning("Skipping command module %s: %s", module_name, e)
                continue

            for _, cls in inspect.getmembers(module, inspect.isclass):
                if (
                    issubclass(cls, SlashCommand)
                    and cls.__module__ == module_name
                    and not inspect.isabstract(cls)
                ):
                    self.register(cls())

        logger.debug("Loaded %d slash commands", len(self._commands))

    def register(self, command: SlashCommand) -> None:
        """
        Add a command under its name and aliases.

        Raises:
            ValueError: The name or an alias is already taken
        """
        words = [word.lower() for word in command.invocations]
        taken = [word for word in words if word in self._lookup]
        if taken:
            raise ValueError(f"Command name already registered: /{taken[0]}")

        self._commands.append(command)
        for word in words:
            self._lookup[word] = command

    def get(self, word: str) -> Optional[SlashCommand]:
        """Find a command by name or alias, case-insensitively."""
        return self._lookup.get(word.lower())

    def commands(self) -> List[SlashCommand]:
        """Registered commands sorted by name."""
        return sorted(self._commands, key=lambda command: command.name)

    def execute(self, word: str, args: str, context: CommandContext) -> CommandResult:
        """
        Run the command registered under ``word``.

        Returns:
            The command's result, or an error result when the word is unknown
        """
        command = self.get(word)
        if command is None:
            return CommandResult.fail(
                f"Unknown command: /{word}. Type /help for available commands."
            )

        logger.debug("Running /%s", command.name)
        return command.run(args, context)

    def __contains__(self, word: object) -> bool:
        return isinstance(word, str) and word.lower() in self._lookup

    def __len__(self) -> int:
        return len(self._commands)


_registry: Optional[CommandRegistry] = None


def get_command_registry() -> CommandRegistry:
    """Get the global command registry instance."""
    global _registry
    if _registry is None:
        _registry = CommandRegistry()
    return _registry
