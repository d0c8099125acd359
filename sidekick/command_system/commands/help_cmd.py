"""/help: list commands or describe one."""
from ...constants import SHELL_PREFIX, SLASH_PREFIX
from ..base import CommandContext, CommandResult, SlashCommand


class HelpCommand(SlashCommand):
    """Shows every command, or the help of the one named in ``args``."""

    name = "help"
    summary = "Show available commands"
    aliases = ("h", "?")
    usage = "[command]"

    def run(self, args: str, context: CommandContext) -> CommandResult:
        if args:
            word = args.split()[0].lstrip(SLASH_PREFIX)
            command = context.registry.get(word)
            if command is None:
                return CommandResult.fail(f"Unknown command: /{word}")
            return CommandResult.ok(command.help_text())

        lines = ["**Commands**", ""]
        lines.extend(f"- {command.help_text()}" for command in context.registry.commands())
        lines.append("")
        lines.append(f"Start a line with `{SHELL_PREFIX}` to run it in your shell directly.")
        lines.append("Anything else goes to the model, which may run shell commands itself.")
        return CommandResult.ok("\n".join(lines))
