"""/quit: leave the prompt."""
from ..base import CommandContext, CommandResult, SlashCommand


class QuitCommand(SlashCommand):
    name = "quit"
    summary = "Exit sidekick"
    aliases = ("exit", "q")

    def run(self, args: str, context: CommandContext) -> CommandResult:
        return CommandResult.exit("Goodbye!")
