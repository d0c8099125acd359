"""
Classification of prompt input: slash command, direct shell command or chat.
"""
from dataclasses import dataclass
from enum import Enum

from ..constants import SHELL_PREFIX, SLASH_PREFIX


class InputKind(Enum):
    EMPTY = "empty"
    COMMAND = "command"
    SHELL = "shell"
    MESSAGE = "message"


@dataclass(frozen=True)
class ParsedInput:
    """
    One classified input line.

    ``text`` is the stripped line. For commands, ``command`` holds the
    lowercased command word and ``args`` the rest of the line.
    """
    kind: InputKind
    text: str = ""
    command: str = ""
    args: str = ""


def parse_input(line: str) -> ParsedInput:
    """
    Classify one line typed at the prompt.

    ``!`` lines are kept whole so the conversation loop sees the prefix.
    """
    text = line.strip()

    if not text:
        return ParsedInput(InputKind.EMPTY)

    if text.startswith(SLASH_PREFIX):
        word, _, rest = text[len(SLASH_PREFIX):].partition(" ")
        return ParsedInput(
            InputKind.COMMAND,
            text=text,
            command=word.lower(),
            args=rest.strip(),
        )

    if text.startswith(SHELL_PREFIX):
        return ParsedInput(InputKind.SHELL, text=text)

    return ParsedInput(InputKind.MESSAGE, text=text)
