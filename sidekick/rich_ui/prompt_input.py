"""
Line input with prompt_toolkit: history, placeholder and completion of
slash commands.
"""
from typing import Iterable, Optional, Sequence

from prompt_toolkit import PromptSession
from prompt_toolkit.completion import CompleteEvent, Completer, Completion
from prompt_toolkit.document import Document
from prompt_toolkit.formatted_text import HTML
from prompt_toolkit.history import InMemoryHistory
from prompt_toolkit.styles import Style

from ..command_system import SlashCommand
from ..constants import SLASH_PREFIX


PLACEHOLDER = HTML("<placeholder>Ask Sidekick, or !cmd to run a shell command</placeholder>")

STYLE = Style.from_dict({
    "prompt": "ansigreen bold",
    "placeholder": "#777777 italic",
    "completion-menu.completion.current": "bg:ansicyan ansiblack",
})


class SlashCompleter(Completer):
    """Completes ``/`` followed by a partial command name or alias."""

    def __init__(self, commands: Sequence[SlashCommand] = ()) -> None:
        self._commands = list(commands)

    def get_completions(
        self, document: Document, complete_event: CompleteEvent
    ) -> Iterable[Completion]:
        text = document.text_before_cursor.lstrip()
        if not text.startswith(SLASH_PREFIX) or " " in text:
            return

        partial = text[len(SLASH_PREFIX):].lower()
        for command in self._commands:
            for word in command.invocations:
                if word.startswith(partial):
                    yield Completion(
                        SLASH_PREFIX + word,
                        start_position=-len(text),
                        display_meta=command.summary,
                    )


class PromptInput:
    """Reads one line at a time from the terminal."""

    def __init__(self, commands: Sequence[SlashCommand] = ()) -> None:
        self._completer = SlashCompleter(commands)
        self._history = InMemoryHistory()
        self._session: Optional[PromptSession] = None

    def _get_session(self) -> PromptSession:
        # Created on first use so constructing a CLI needs no terminal
        if self._session is None:
            self._session = PromptSession(
                completer=self._completer,
                complete_while_typing=True,
                history=self._history,
                style=STYLE,
                placeholder=PLACEHOLDER,
            )
        return self._session

    async def get_input(self, prompt: str = "> ") -> str:
        """
        Read one line.

        Returns:
            The line as typed; ``/quit`` on end of input and an empty
            string when the line is interrupted with Ctrl-C
        """
        try:
            return await self._get_session().prompt_async([("class:prompt", prompt)])
        except EOFError:
            return f"{SLASH_PREFIX}quit"
        except KeyboardInterrupt:
            return ""
