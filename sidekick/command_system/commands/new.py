"""/new: forget the conversation and start over."""
from ..base import CommandContext, CommandResult, SlashCommand


class NewCommand(SlashCommand):
    name = "new"
    summary = "Start a new chat"
    aliases = ("reset",)

    def run(self, args: str, context: CommandContext) -> CommandResult:
        context.loop.reset()
        seeded = len(context.loop.state)
        if seeded:
            return CommandResult.ok("Started a new chat (system prompt kept)")
        return CommandResult.ok("Started a new chat")
