"""/clear: wipe the terminal, keep the conversation."""
from ..base import CommandContext, CommandResult, SlashCommand


class ClearCommand(SlashCommand):
    name = "clear"
    summary = "Clear the screen (the chat history is kept)"
    aliases = ("cls",)

    def run(self, args: str, context: CommandContext) -> CommandResult:
        return CommandResult.clear()
