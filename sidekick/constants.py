"""
Constants and configuration defaults for sidekick.
"""
from pathlib import Path
from typing import Final, Optional

APP_NAME: Final[str] = "sidekick"
APP_VERSION: Final[str] = "1.0.0"
APP_DESCRIPTION: Final[str] = "Chat with Gemini and let it run shell commands for you"

CONFIG_DIR: Final[Path] = Path.home() / ".sidekick"
CONFIG_FILE: Final[Path] = CONFIG_DIR / "config.json"

API_KEY_ENV: Final[str] = "GEMINI_API_KEY"
MODEL_ENV: Final[str] = "SIDEKICK_MODEL"

GEMINI_BASE_URL: Final[str] = "https://generativelanguage.googleapis.com"
GEMINI_API_VERSION: Final[str] = "v1beta"
DEFAULT_MODEL: Final[str] = "gemini-2.5-flash"
DEFAULT_REQUEST_TIMEOUT: Final[float] = 120.0

SLASH_PREFIX: Final[str] = "/"
SHELL_PREFIX: Final[str] = "!"

# Sent as the next user turn after every tool result
CONTINUATION_PROMPT: Final[str] = "continue"
EMPTY_OUTPUT_PLACEHOLDER: Final[str] = "(empty output)"

DEFAULT_MAX_HOPS: Final[Optional[int]] = 10
DEFAULT_SHELL_TIMEOUT: Final[Optional[float]] = None

DEFAULT_SYSTEM_PROMPT: Final[str] = (
    "You are Sidekick, a concise assistant running on the user's computer. "
    "When a task needs information from the machine or a change to it, call "
    "the execute_shell_command tool with a single shell command. After a tool "
    "result arrives, explain the outcome briefly."
)
