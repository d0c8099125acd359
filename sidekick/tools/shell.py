"""Shell command tool: lets the model run a command through a CommandRunner."""
from typing import TYPE_CHECKING, Any, Mapping

from .base import Tool, require_string

if TYPE_CHECKING:
    from ..io_handlers.bash_runner import CommandRunner


SHELL_TOOL_NAME = "execute_shell_command"

SHELL_TOOL_DECLARATION: dict[str, Any] = {
    "name": SHELL_TOOL_NAME,
    "description": "Executes a shell command on the user's machine and returns the output.",
    "parameters": {
        "type": "object",
        "properties": {
            "command": {
                "type": "string",
                "description": "The shell command to execute."
            }
        },
        "required": ["command"]
    }
}


class ShellCommandTool(Tool):
    """Runs the ``command`` argument and returns its trimmed output."""

    name = SHELL_TOOL_NAME
    description = SHELL_TOOL_DECLARATION["description"]
    parameters = SHELL_TOOL_DECLARATION["parameters"]

    def __init__(self, runner: "CommandRunner") -> None:
        self._runner = runner

    async def invoke(self, arguments: Mapping[str, Any]) -> str:
        command = require_string(arguments, "command")
        return await self._runner.execute(command)
