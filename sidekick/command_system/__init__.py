"""Slash command system for sidekick."""
from .base import CommandAction, CommandContext, CommandResult, SlashCommand
from .parser import InputKind, ParsedInput, parse_input
from .registry import CommandRegistry, get_command_registry

__all__ = [
    'CommandAction', 'CommandContext', 'CommandResult', 'SlashCommand',
    'InputKind', 'ParsedInput', 'parse_input',
    'CommandRegistry', 'get_command_registry'
]
