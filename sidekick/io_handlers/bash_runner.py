"""
Shell command runner for sidekick.
Executes commands for both the !command syntax and the shell tool.
"""
import asyncio
import logging
import os
from abc import ABC, abstractmethod
from typing import Optional

from ..errors import CommandFailedError, CommandLaunchError, CommandTimeoutError
from ..utils import is_windows, truncate_string

logger = logging.getLogger(__name__)


class CommandRunner(ABC):
    """Runs a shell command string and returns its output."""

    @abstractmethod
    async def execute(self, command: str) -> str:
        """
        Run a command to completion.

        Args:
            command: Command line handed to the interpreter

        Returns:
            Combined stdout/stderr with surrounding whitespace trimmed

        Raises:
            CommandLaunchError: The interpreter could not be started
            CommandFailedError: The command exited with a non-zero status
            CommandTimeoutError: A configured timeout elapsed
        """


class BashRunner(CommandRunner):
    """
    Executes shell commands through a command interpreter.

    Standard output and standard error are captured through one pipe so
    the result reads the way it would in a terminal.
    """

    def __init__(
        self,
        shell: Optional[str] = None,
        timeout: Optional[float] = None,
        env: Optional[dict] = None,
        cwd: Optional[str] = None
    ) -> None:
        """
        Initialize bash runner.

        Args:
            shell: Shell to use (auto-detected if not provided)
            timeout: Timeout in seconds; None waits indefinitely
            env: Additional environment variables
            cwd: Working directory for commands
        """
        self._shell = shell or self._detect_shell()
        self._timeout = timeout
        self._env = {**os.environ, **(env or {})}
        self._cwd = cwd

    @property
    def shell(self) -> str:
        return self._shell

    def _detect_shell(self) -> str:
        """Detect the appropriate shell for the platform."""
        if is_windows():
            return "powershell.exe"

        for shell in ["/bin/bash", "/bin/zsh", "/bin/sh"]:
            if os.path.exists(shell):
                return shell

        return os.environ.get("SHELL", "/bin/sh")

    def _build_args(self, command: str) -> list[str]:
        if is_windows():
            return [self._shell, "-Command", command]
        return [self._shell, "-c", command]

    async def execute(self, command: str) -> str:
        """Run a command and return its trimmed output."""
        logger.debug("Running command with %s: %s", self._shell, truncate_string(command, 200))

        try:
            process = await asyncio.create_subprocess_exec(
                *self._build_args(command),
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.STDOUT,
                cwd=self._cwd,
                env=self._env
            )
        except (OSError, ValueError) as e:
            raise CommandLaunchError(f"Could not launch {self._shell}: {e}") from e

        try:
            if self._timeout is None:
                stdout, _ = await process.communicate()
            else:
                stdout, _ = await asyncio.wait_for(
                    process.communicate(),
                    timeout=self._timeout
                )
        except asyncio.TimeoutError:
            process.kill()
            await process.wait()
            raise CommandTimeoutError(self._timeout)

        # Handle Windows console encoding
        encoding = 'cp866' if is_windows() else 'utf-8'
        output = stdout.decode(encoding, errors='replace').strip() if stdout else ""

        if process.returncode != 0:
            logger.debug("Command exited with %s", process.returncode)
            raise CommandFailedError(output, process.returncode)

        return output

