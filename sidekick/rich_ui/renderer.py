"""
Terminal rendering of display messages with rich.
"""
from typing import Optional

from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.syntax import Syntax
from rich.text import Text

from ..constants import APP_DESCRIPTION, APP_NAME, APP_VERSION, SHELL_PREFIX
from ..conversation.display import DisplayMessage, MessageKind


# Border style and title of the panels used for command output
OUTPUT_PANELS = {
    MessageKind.SHELL_OUTPUT: ("green", "Shell Output"),
    MessageKind.TOOL_OUTPUT: ("cyan", "Tool Output"),
}


class RichRenderer:
    """
    Prints display messages as they are produced.

    User messages are skipped since they are already on screen at the
    prompt. Model answers are rendered as markdown, command output in
    panels, errors in red.
    """

    def __init__(
        self,
        console: Optional[Console] = None,
        markdown: bool = True,
        show_tool_notices: bool = True
    ) -> None:
        """
        Initialize the renderer.

        Args:
            console: Console to print to (a new one by default)
            markdown: Render model answers as markdown instead of plain text
            show_tool_notices: Print a line for every tool the model calls
        """
        self._console = console or Console(color_system="auto")
        self._markdown = markdown
        self._show_tool_notices = show_tool_notices

    @property
    def console(self) -> Console:
        return self._console

    def print_welcome(self, model: str = "") -> None:
        """Print the banner shown when the prompt starts."""
        banner = Text.assemble(
            (APP_NAME, "bold cyan"), " ", (f"v{APP_VERSION}", "dim"), "\n",
            (APP_DESCRIPTION, "dim"),
        )
        if model:
            banner.append(f"\nModel: {model}", style="dim")
        banner.append(
            f"\n/help for commands, {SHELL_PREFIX}<cmd> to run a shell command",
            style="dim",
        )
        self._console.print(Panel(banner, border_style="cyan", expand=False))

    def render(self, message: DisplayMessage) -> None:
        """Print one display message according to its kind."""
        kind = message.kind

        if kind is MessageKind.USER:
            return
        if kind is MessageKind.ASSISTANT:
            self.print_answer(message.content)
        elif kind is MessageKind.TOOL_NOTICE:
            if self._show_tool_notices:
                self._console.print(Text(f"» {message.content}", style="dim italic"))
        elif kind in OUTPUT_PANELS:
            border, title = OUTPUT_PANELS[kind]
            self.print_output(message.content, title=title, border_style=border)
        elif kind is MessageKind.ERROR:
            self.print_error(message.content)

    def print_answer(self, content: str) -> None:
        """Print a model answer."""
        self._console.print(Text("Sidekick", style="bold cyan"))
        body = Markdown(content) if self._markdown else Text(content)
        self._console.print(body)
        self._console.print()

    def print_markdown(self, content: str) -> None:
        self._console.print(Markdown(content))

    def print_output(self, output: str, title: str, border_style: str = "green") -> None:
        """Print command output in a titled panel, highlighted as shell text."""
        syntax = Syntax(output, "bash", theme="monokai", word_wrap=True)
        self._console.print(
            Panel(syntax, title=title, title_align="left", border_style=border_style)
        )

    def print_error(self, message: str) -> None:
        self._console.print(Text("✗ ", style="bold red") + Text(message, style="red"))

    def print_warning(self, message: str) -> None:
        self._console.print(Text("! ", style="bold yellow") + Text(message, style="yellow"))

    def clear(self) -> None:
        self._console.clear()
