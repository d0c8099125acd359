"""
Interactive front end for sidekick.
Reads input, routes slash commands, and hands everything else to the conversation loop.
"""
import logging
from typing import Optional

from .command_system import (
    CommandContext,
    CommandRegistry,
    InputKind,
    get_command_registry,
    parse_input,
)
from .config import ConfigManager, get_config
from .constants import API_KEY_ENV
from .conversation import ConversationLoop
from .conversation.display import DisplayMessage
from .errors import describe_error
from .io_handlers import BashRunner, CommandRunner
from .llm import GeminiClient, LLMClient
from .rich_ui import PromptInput, RichRenderer
from .tools import ShellCommandTool, ToolRegistry

logger = logging.getLogger(__name__)


class CLI:
    """
    Wires configuration, model client, command runner and renderer into
    one ConversationLoop and drives it from the prompt.
    """

    def __init__(
        self,
        config: Optional[ConfigManager] = None,
        client: Optional[LLMClient] = None,
        runner: Optional[CommandRunner] = None,
        renderer: Optional[RichRenderer] = None,
        commands: Optional[CommandRegistry] = None,
        prompt_input: Optional[PromptInput] = None,
    ) -> None:
        self._config = config or get_config()
        self._renderer = renderer or RichRenderer(
            markdown=self._config.ui.markdown_rendering,
            show_tool_notices=self._config.ui.show_tool_notices,
        )
        self._runner = runner or BashRunner(
            shell=self._config.shell.shell,
            timeout=self._config.shell.timeout,
        )
        # One registry feeds both the declarations sent to the model and dispatch
        self._tools = ToolRegistry([ShellCommandTool(self._runner)])
        self._client = client or GeminiClient(
            api_key=self._config.api_key or "",
            model=self._config.llm.model,
            timeout=self._config.llm.request_timeout,
            function_declarations=self._tools.declarations(),
        )
        self._loop = ConversationLoop(
            client=self._client,
            runner=self._runner,
            tools=self._tools,
            system_prompt=self._config.llm.system_prompt,
            max_hops=self._config.llm.max_hops,
            on_display=self._renderer.render,
        )
        self._commands = commands or get_command_registry()
        self._context = CommandContext(
            loop=self._loop,
            registry=self._commands,
            config=self._config,
        )
        self._input = prompt_input or PromptInput(self._commands.commands())
        self._running = False

    @property
    def loop(self) -> ConversationLoop:
        return self._loop

    @property
    def client(self) -> LLMClient:
        return self._client

    @property
    def running(self) -> bool:
        return self._running

    def _missing_api_key(self) -> bool:
        # Injected clients bring their own credentials
        return isinstance(self._client, GeminiClient) and not self._config.api_key

    async def run(self) -> None:
        """Run the interactive prompt until /quit or end of input."""
        self._running = True
        self._renderer.print_welcome(model=self._config.llm.model)

        if self._missing_api_key():
            self._renderer.print_warning(
                f"No API key configured. Set {API_KEY_ENV} or add api_key to "
                f"{self._config.config_file}. !commands still work."
            )

        try:
            while self._running:
                line = await self._input.get_input()
                try:
                    await self.process_input(line)
                except Exception as e:
                    logger.exception("Unhandled error while processing input")
                    self._renderer.print_error(describe_error(e))
        finally:
            await self._client.aclose()

    async def process_input(self, line: str) -> Optional[DisplayMessage]:
        """
        Route one line of input.

        Returns:
            The last display message for chat and ! input, None for slash
            commands, blank lines and refused input
        """
        parsed = parse_input(line)

        if parsed.kind is InputKind.EMPTY:
            return None
        if parsed.kind is InputKind.COMMAND:
            self._run_command(parsed.command, parsed.args)
            return None
        if parsed.kind is InputKind.MESSAGE and self._missing_api_key():
            self._renderer.print_error(f"No API key set. Export {API_KEY_ENV} first.")
            return None
        return await self._loop.handle(parsed.text)

    async def execute_once(self, line: str) -> int:
        """
        Process a single line and return an exit status.

        Returns:
            0 if the line ended in an answer or output, 1 otherwise
        """
        try:
            result = await self.process_input(line)
        finally:
            await self._client.aclose()
        return 1 if result is None or result.is_error else 0

    def _run_command(self, word: str, args: str) -> None:
        result = self._commands.execute(word, args, self._context)

        if result.should_exit:
            self._running = False
        if result.should_clear:
            self._renderer.clear()

        if result.message:
            if result.is_error:
                self._renderer.print_error(result.message)
            else:
                self._renderer.print_markdown(result.message)
