"""
The conversation loop: ask the model, run the tools it asks for, ask again.

One call to ``ConversationLoop.handle`` processes one user message. Messages
starting with ``!`` go straight to the command runner and never reach the
model or the history. Everything else is appended to the history and sent
to the model; every tool call the model makes is dispatched through the
tool registry, its outcome is appended as a tool-result turn, and the model
is queried again with the continuation prompt until it answers with text.
"""
import asyncio
import logging
from typing import Optional

from ..constants import (
    CONTINUATION_PROMPT,
    DEFAULT_MAX_HOPS,
    EMPTY_OUTPUT_PLACEHOLDER,
    SHELL_PREFIX,
)
from ..errors import (
    HopLimitExceeded,
    LLMError,
    SidekickError,
    ToolExecutionError,
    ToolValidationError,
    describe_error,
)
from ..io_handlers.bash_runner import CommandRunner
from ..llm.base import LLMClient
from ..llm.types import TextResponse, ToolCallRequest, Turn
from ..tools import ShellCommandTool, ToolRegistry
from ..utils import format_arguments
from .display import DisplayListener, DisplayMessage, MessageKind, MessageLog
from .state import ConversationState

logger = logging.getLogger(__name__)


class ConversationLoop:
    """
    Orchestrates one chat session.

    Owns the conversation history and the display log. Messages are
    processed one at a time: a message submitted while another is in
    flight waits for it to finish, so appends from two messages never
    interleave.
    """

    def __init__(
        self,
        client: LLMClient,
        runner: CommandRunner,
        tools: Optional[ToolRegistry] = None,
        system_prompt: Optional[str] = None,
        max_hops: Optional[int] = DEFAULT_MAX_HOPS,
        continuation_prompt: str = CONTINUATION_PROMPT,
        on_display: Optional[DisplayListener] = None,
    ) -> None:
        """
        Initialize the loop.

        Args:
            client: Model client
            runner: Command runner for !commands (and the default shell tool)
            tools: Tools the model may call; defaults to the shell tool
            system_prompt: Seed turn of every fresh history
            max_hops: Model queries allowed per message; None for no limit
            continuation_prompt: User turn sent after each tool result
            on_display: Called with every display message as it is produced
        """
        if max_hops is not None and max_hops < 1:
            raise ValueError("max_hops must be at least 1")

        self._client = client
        self._runner = runner
        self._tools = tools if tools is not None else ToolRegistry([ShellCommandTool(runner)])
        self._system_prompt = system_prompt
        self._max_hops = max_hops
        self._continuation_prompt = continuation_prompt
        self._state = ConversationState(system_prompt)
        self._log = MessageLog(on_display)
        self._lock = asyncio.Lock()

    @property
    def state(self) -> ConversationState:
        return self._state

    @property
    def messages(self) -> list[DisplayMessage]:
        return self._log.messages

    @property
    def tools(self) -> ToolRegistry:
        return self._tools

    @property
    def max_hops(self) -> Optional[int]:
        return self._max_hops

    def reset(self) -> None:
        """Start a new chat: re-seed the history and clear the display log."""
        self._state.reset(self._system_prompt)
        self._log.clear()
        logger.debug("Conversation reset")

    async def handle(self, message: str) -> Optional[DisplayMessage]:
        """
        Process one user message to completion.

        Args:
            message: Raw user input

        Returns:
            The last display message produced (the answer or the error),
            or None when the input was blank
        """
        text = message.strip()
        if not text:
            return None

        async with self._lock:
            self._log.add(MessageKind.USER, text)

            if text.startswith(SHELL_PREFIX):
                return await self._run_direct_command(text[len(SHELL_PREFIX):].strip())

            return await self._converse(text)

    async def _run_direct_command(self, command: str) -> DisplayMessage:
        """Run a !command; the history is left untouched."""
        if not command:
            return self._log.add(MessageKind.ERROR, "Shell Error: No command provided")

        try:
            output = await self._runner.execute(command)
        except ToolExecutionError as e:
            logger.info("Direct command failed: %s", e)
            return self._log.add(MessageKind.ERROR, f"Shell Error: {e}")

        return self._log.add(MessageKind.SHELL_OUTPUT, output or EMPTY_OUTPUT_PLACEHOLDER)

    async def _converse(self, text: str) -> DisplayMessage:
        """Query the model until it answers with text or something fails."""
        prompt = text
        hops = 0

        while True:
            history = self._state.snapshot()
            self._state.append(Turn.user(prompt))
            hops += 1

            try:
                response = await self._client.generate(prompt, history)
            except LLMError as e:
                logger.warning("Model request failed: %s", e)
                return self._fail(e)

            if isinstance(response, TextResponse):
                self._state.append(Turn.model(response.text))
                return self._log.add(MessageKind.ASSISTANT, response.text)

            await self._dispatch(response.call)

            if self._max_hops is not None and hops >= self._max_hops:
                return self._fail(HopLimitExceeded(self._max_hops))

            prompt = self._continuation_prompt

    async def _dispatch(self, call: ToolCallRequest) -> None:
        """Run one tool call and record its outcome as a tool-result turn."""
        arguments = format_arguments(call.arguments)
        self._log.add(
            MessageKind.TOOL_NOTICE,
            f"Executing tool: {call.name} with args: {arguments}"
        )
        logger.info("Dispatching tool %s", call.name)

        tool = self._tools.get(call.name)
        try:
            if tool is None:
                raise ToolValidationError(f"no tool named '{call.name}'")
            output = await tool.invoke(call.arguments)
        except ToolValidationError as e:
            error = f"Unknown tool or invalid arguments: {call.name} {arguments} ({e})"
            self._log.add(MessageKind.ERROR, error)
            self._state.append(Turn.tool(call.name, error=error))
            return
        except ToolExecutionError as e:
            error = describe_error(e)
            self._log.add(MessageKind.ERROR, error)
            self._state.append(Turn.tool(call.name, error=error))
            return

        self._log.add(MessageKind.TOOL_OUTPUT, output or EMPTY_OUTPUT_PLACEHOLDER)
        self._state.append(Turn.tool(call.name, result=output))

    def _fail(self, error: SidekickError) -> DisplayMessage:
        return self._log.add(MessageKind.ERROR, describe_error(error))
