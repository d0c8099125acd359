"""
Tools the model can call.

Provides the Tool interface, the ToolRegistry the conversation loop
dispatches through, and the shell command tool.
"""

from .base import Tool, ToolRegistry, require_string
from .shell import SHELL_TOOL_DECLARATION, SHELL_TOOL_NAME, ShellCommandTool

__all__ = [
    "Tool",
    "ToolRegistry",
    "require_string",
    "SHELL_TOOL_DECLARATION",
    "SHELL_TOOL_NAME",
    "ShellCommandTool",
]
