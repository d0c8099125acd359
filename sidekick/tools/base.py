"""
Tool interface and registry.

A tool is a named capability the model can invoke with JSON arguments.
The conversation loop never compares tool names itself: it looks tools up
in a ToolRegistry and calls ``invoke``.
"""
from abc import ABC, abstractmethod
from typing import Any, Iterable, Iterator, Mapping, Optional

from ..errors import ToolValidationError


class Tool(ABC):
    """Definition and implementation of a tool available to the LLM.

    Attributes:
        name: Unique identifier the model uses to call the tool.
        description: Human-readable description of what the tool does.
        parameters: JSON schema for the tool's arguments.
    """

    name: str = ""
    description: str = ""
    parameters: dict[str, Any]

    def declaration(self) -> dict[str, Any]:
        """Return the function declaration advertised to the model."""
        return {
            "name": self.name,
            "description": self.description,
            "parameters": self.parameters,
        }

    @abstractmethod
    async def invoke(self, arguments: Mapping[str, Any]) -> str:
        """
        Run the tool.

        Args:
            arguments: Arguments decoded from the model's function call

        Returns:
            The tool output sent back to the model

        Raises:
            ToolValidationError: The arguments do not match the schema
            ToolExecutionError: The tool ran and failed
        """

    def __repr__(self) -> str:
        return f"<Tool {self.name}>"


def require_string(arguments: Mapping[str, Any], key: str) -> str:
    """
    Extract a required string argument without coercion.

    Args:
        arguments: Decoded argument mapping
        key: Argument name

    Returns:
        The string value

    Raises:
        ToolValidationError: The key is missing or its value is not a string
    """
    if not isinstance(arguments, Mapping):
        raise ToolValidationError(f"Arguments must be an object, got {type(arguments).__name__}")
    if key not in arguments:
        raise ToolValidationError(f"Missing required argument '{key}'")
    value = arguments[key]
    if not isinstance(value, str):
        raise ToolValidationError(
            f"Argument '{key}' must be a string, got {_json_type(value)}"
        )
    return value


def _json_type(value: Any) -> str:
    """Name the JSON type of a decoded value."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, Mapping):
        return "object"
    if isinstance(value, (list, tuple)):
        return "array"
    return type(value).__name__


class ToolRegistry:
    """Registry of tools keyed by name."""

    def __init__(self, tools: Optional[Iterable[Tool]] = None) -> None:
        self._tools: dict[str, Tool] = {}
        for tool in tools or []:
            self.register(tool)

    def register(self, tool: Tool) -> None:
        """
        Register a tool.

        Raises:
            ValueError: A tool with the same name is already registered
        """
        if not tool.name:
            raise ValueError("Tool must have a name")
        if tool.name in self._tools:
            raise ValueError(f"Tool already registered: {tool.name}")
        self._tools[tool.name] = tool

    def get(self, name: str) -> Optional[Tool]:
        """Get a tool by name, or None when unknown."""
        return self._tools.get(name)

    def declarations(self) -> list[dict[str, Any]]:
        """Function declarations of all registered tools."""
        return [tool.declaration() for tool in self._tools.values()]

    def names(self) -> list[str]:
        return list(self._tools)

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __iter__(self) -> Iterator[Tool]:
        return iter(self._tools.values())

    def __len__(self) -> int:
        return len(self._tools)
