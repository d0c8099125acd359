"""
Tests for the tool-calling conversation loop.

The model and the shell are replaced by scripted fakes that record every call.
"""

import asyncio
import sys
from typing import Any, Sequence

import allure
import pytest
from hypothesis import given, settings, strategies as st

from sidekick.constants import CONTINUATION_PROMPT, EMPTY_OUTPUT_PLACEHOLDER
from sidekick.conversation import ConversationLoop, MessageKind
from sidekick.errors import (
    ApiError,
    CommandFailedError,
    CommandLaunchError,
    DecodingError,
    TransportError,
)
from sidekick.io_handlers import BashRunner, CommandRunner
from sidekick.llm import (
    LLMClient,
    TextResponse,
    ToolCallRequest,
    ToolCallResponse,
    Turn,
    TurnRole,
)
from sidekick.tools import Tool, ToolRegistry


class ScriptedClient(LLMClient):
    """Returns (or raises) scripted responses in order and records calls."""

    def __init__(self, *responses: Any) -> None:
        self._responses = list(responses)
        self.calls: list[tuple[str, list[Turn]]] = []

    async def generate(self, prompt: str, history: Sequence[Turn]):
        self.calls.append((prompt, list(history)))
        response = self._responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


class RepeatingClient(LLMClient):
    """Always asks for the same tool call."""

    def __init__(self, call: ToolCallRequest) -> None:
        self._call = call
        self.calls = 0

    async def generate(self, prompt: str, history: Sequence[Turn]):
        self.calls += 1
        return ToolCallResponse(call=self._call)


class FakeRunner(CommandRunner):
    """Maps commands to outputs or exceptions and records what ran."""

    def __init__(self, outputs: dict = None) -> None:
        self._outputs = outputs or {}
        self.commands: list[str] = []

    async def execute(self, command: str) -> str:
        self.commands.append(command)
        result = self._outputs.get(command, "")
        if isinstance(result, Exception):
            raise result
        return result


def shell_call(command: Any) -> ToolCallResponse:
    return ToolCallResponse(
        call=ToolCallRequest(name="execute_shell_command", arguments={"command": command})
    )


def make_loop(client: LLMClient, runner: CommandRunner = None, **kwargs: Any) -> ConversationLoop:
    return ConversationLoop(client=client, runner=runner or FakeRunner(), **kwargs)


def kinds(loop: ConversationLoop) -> list[MessageKind]:
    return [m.kind for m in loop.messages]


@allure.feature("Conversation Loop")
@allure.story("Plain text answer")
def test_text_answer_ends_after_one_query():
    client = ScriptedClient(TextResponse("ok"))
    runner = FakeRunner()
    loop = make_loop(client, runner)

    final = asyncio.run(loop.handle("hello"))

    assert len(client.calls) == 1
    assert runner.commands == []
    assert final.kind is MessageKind.ASSISTANT
    assert final.content == "ok"
    assert [m.content for m in loop.messages if m.kind is MessageKind.ASSISTANT] == ["ok"]
    assert loop.state.turns == (Turn.user("hello"), Turn.model("ok"))


def test_prompt_is_sent_once_with_preceding_history():
    client = ScriptedClient(TextResponse("first"), TextResponse("second"))
    loop = make_loop(client, system_prompt="be brief")

    asyncio.run(loop.handle("one"))
    asyncio.run(loop.handle("two"))

    prompt, history = client.calls[1]
    assert prompt == "two"
    assert history == [Turn.user("be brief"), Turn.user("one"), Turn.model("first")]


@allure.feature("Conversation Loop")
@allure.story("Tool call round trip")
def test_tool_call_then_text():
    client = ScriptedClient(shell_call("echo hi"), TextResponse("done"))
    runner = FakeRunner({"echo hi": "hi"})
    loop = make_loop(client, runner)

    asyncio.run(loop.handle("say hi"))

    assert kinds(loop) == [
        MessageKind.USER,
        MessageKind.TOOL_NOTICE,
        MessageKind.TOOL_OUTPUT,
        MessageKind.ASSISTANT,
    ]
    assert loop.messages[0].content == "say hi"
    assert "execute_shell_command" in loop.messages[1].content
    assert loop.messages[2].content == "hi"
    assert loop.messages[3].content == "done"

    assert runner.commands == ["echo hi"]
    assert len(client.calls) == 2
    assert client.calls[1][0] == CONTINUATION_PROMPT

    turns = loop.state.turns
    assert len(turns) == 4
    assert [t.role for t in turns] == [
        TurnRole.USER, TurnRole.TOOL_RESULT, TurnRole.USER, TurnRole.MODEL,
    ]
    assert turns[1].tool_result.name == "execute_shell_command"
    assert turns[1].tool_result.result == "hi"
    assert turns[2].text == CONTINUATION_PROMPT
    assert turns[3].text == "done"


def test_continuation_query_sees_tool_result():
    client = ScriptedClient(shell_call("date"), TextResponse("done"))
    loop = make_loop(client, FakeRunner({"date": "Mon"}))

    asyncio.run(loop.handle("what day is it"))

    _, history = client.calls[1]
    assert history[-1].role is TurnRole.TOOL_RESULT
    assert history[-1].tool_result.result == "Mon"


def test_empty_tool_output_uses_placeholder_for_display_only():
    client = ScriptedClient(shell_call("true"), TextResponse("done"))
    loop = make_loop(client, FakeRunner({"true": ""}))

    asyncio.run(loop.handle("run true"))

    outputs = [m.content for m in loop.messages if m.kind is MessageKind.TOOL_OUTPUT]
    assert outputs == [EMPTY_OUTPUT_PLACEHOLDER]
    assert loop.state.turns[1].tool_result.result == ""


@allure.feature("Conversation Loop")
@allure.story("Unknown tool")
def test_unknown_tool_reports_error_and_requeries():
    client = ScriptedClient(
        ToolCallResponse(call=ToolCallRequest(name="delete_everything", arguments={})),
        TextResponse("sorry"),
    )
    runner = FakeRunner()
    loop = make_loop(client, runner)

    asyncio.run(loop.handle("clean up"))

    assert runner.commands == []
    assert len(client.calls) == 2
    assert client.calls[1][0] == CONTINUATION_PROMPT

    tool_turns = [t for t in loop.state.turns if t.role is TurnRole.TOOL_RESULT]
    assert len(tool_turns) == 1
    assert tool_turns[0].tool_result.name == "delete_everything"
    assert tool_turns[0].tool_result.is_error
    assert "Unknown tool or invalid arguments" in tool_turns[0].tool_result.error

    errors = [m for m in loop.messages if m.kind is MessageKind.ERROR]
    assert len(errors) == 1
    assert "delete_everything" in errors[0].content


@pytest.mark.parametrize("arguments", [{}, {"command": 42}, {"command": None}, {"cmd": "ls"}])
def test_invalid_shell_arguments_never_reach_runner(arguments: dict):
    client = ScriptedClient(
        ToolCallResponse(call=ToolCallRequest(name="execute_shell_command", arguments=arguments)),
        TextResponse("ok"),
    )
    runner = FakeRunner()
    loop = make_loop(client, runner)

    asyncio.run(loop.handle("do it"))

    assert runner.commands == []
    assert len(client.calls) == 2
    tool_turn = loop.state.turns[1]
    assert tool_turn.role is TurnRole.TOOL_RESULT
    assert tool_turn.tool_result.is_error


@pytest.mark.parametrize("failure", [
    CommandFailedError("ls: nope: No such file or directory", 2),
    CommandLaunchError("Could not launch /bin/bash"),
])
def test_command_failure_is_folded_into_history(failure: Exception):
    client = ScriptedClient(shell_call("ls nope"), TextResponse("it failed"))
    loop = make_loop(client, FakeRunner({"ls nope": failure}))

    asyncio.run(loop.handle("list nope"))

    tool_turn = loop.state.turns[1]
    assert tool_turn.tool_result.error.startswith("Tool Error:")
    assert str(failure) in tool_turn.tool_result.error
    assert len(client.calls) == 2
    assert kinds(loop) == [
        MessageKind.USER,
        MessageKind.TOOL_NOTICE,
        MessageKind.ERROR,
        MessageKind.ASSISTANT,
    ]


@pytest.mark.skipif(sys.platform == "win32", reason="POSIX shell required")
def test_unlaunchable_command_is_folded_into_history():
    client = ScriptedClient(shell_call("echo a\x00b"), TextResponse("ok"))
    loop = make_loop(client, BashRunner(shell="/bin/sh"))

    final = asyncio.run(loop.handle("print something odd"))

    assert final.content == "ok"
    assert len(client.calls) == 2
    tool_turn = loop.state.turns[1]
    assert tool_turn.role is TurnRole.TOOL_RESULT
    assert tool_turn.tool_result.error.startswith("Tool Error: Could not launch")


@allure.feature("Conversation Loop")
@allure.story("Model failure")
@pytest.mark.parametrize("failure", [
    ApiError(500, "boom"),
    TransportError("connection refused"),
    DecodingError("no candidates"),
])
def test_model_failure_terminates_immediately(failure: Exception):
    client = ScriptedClient(failure)
    loop = make_loop(client)

    final = asyncio.run(loop.handle("hi"))

    assert len(client.calls) == 1
    assert final.kind is MessageKind.ERROR
    assert len([m for m in loop.messages if m.kind is MessageKind.ERROR]) == 1
    assert loop.state.turns == (Turn.user("hi"),)


def test_api_error_message_carries_status_and_body():
    loop = make_loop(ScriptedClient(ApiError(500, "boom")))

    final = asyncio.run(loop.handle("hi"))

    assert "500" in final.content
    assert "boom" in final.content


def test_failure_after_tool_keeps_tool_result():
    client = ScriptedClient(shell_call("ls"), ApiError(503, "busy"))
    loop = make_loop(client, FakeRunner({"ls": "a b"}))

    final = asyncio.run(loop.handle("list"))

    assert final.kind is MessageKind.ERROR
    assert [t.role for t in loop.state.turns] == [
        TurnRole.USER, TurnRole.TOOL_RESULT, TurnRole.USER,
    ]


@allure.feature("Conversation Loop")
@allure.story("Direct shell commands")
def test_direct_command_bypasses_model_and_history():
    client = ScriptedClient()
    runner = FakeRunner({"ls -la": "total 0"})
    loop = make_loop(client, runner, system_prompt="seed")
    before = loop.state.turns

    final = asyncio.run(loop.handle("!ls -la"))

    assert client.calls == []
    assert runner.commands == ["ls -la"]
    assert final.kind is MessageKind.SHELL_OUTPUT
    assert final.content == "total 0"
    assert loop.state.turns == before


def test_direct_command_failure_is_displayed():
    runner = FakeRunner({"false": CommandFailedError("", 1)})
    loop = make_loop(ScriptedClient(), runner)

    final = asyncio.run(loop.handle("!false"))

    assert final.kind is MessageKind.ERROR
    assert final.content.startswith("Shell Error:")
    assert len(loop.state) == 0


def test_direct_command_empty_output_placeholder():
    loop = make_loop(ScriptedClient(), FakeRunner({"true": ""}))

    final = asyncio.run(loop.handle("! true"))

    assert final.content == EMPTY_OUTPUT_PLACEHOLDER


def test_bare_marker_runs_nothing():
    runner = FakeRunner()
    loop = make_loop(ScriptedClient(), runner)

    final = asyncio.run(loop.handle("!"))

    assert runner.commands == []
    assert final.kind is MessageKind.ERROR


def test_blank_input_is_ignored():
    client = ScriptedClient()
    loop = make_loop(client)

    assert asyncio.run(loop.handle("   ")) is None
    assert loop.messages == []
    assert client.calls == []


# **Property: direct commands never touch the history**
@settings(max_examples=50, deadline=None)
@given(command=st.text(min_size=1, max_size=40).filter(lambda s: s.strip()))
def test_direct_commands_leave_state_unchanged(command: str):
    loop = make_loop(ScriptedClient(), FakeRunner(), system_prompt="seed")
    before = loop.state.turns

    asyncio.run(loop.handle("!" + command))

    assert loop.state.turns == before


# **Property: one user turn per message before the first query**
@settings(max_examples=50, deadline=None)
@given(message=st.text(min_size=1, max_size=80).filter(
    lambda s: s.strip() and not s.strip().startswith("!")
))
def test_exactly_one_user_turn_before_first_query(message: str):
    client = ScriptedClient(TextResponse("ok"))
    loop = make_loop(client)

    asyncio.run(loop.handle(message))

    prompt, history = client.calls[0]
    assert prompt == message.strip()
    assert history == []
    assert loop.state.turns[0] == Turn.user(message.strip())


# **Property: every tool call yields one tool-result turn and one more query**
@settings(max_examples=50, deadline=None)
@given(
    name=st.sampled_from(["execute_shell_command", "delete_everything", "read_file"]),
    arguments=st.dictionaries(
        st.sampled_from(["command", "path", "force"]),
        st.one_of(st.text(max_size=10), st.integers(), st.booleans(), st.none()),
        max_size=3,
    ),
)
def test_every_tool_call_gets_one_result_and_one_requery(name: str, arguments: dict):
    client = ScriptedClient(
        ToolCallResponse(call=ToolCallRequest(name=name, arguments=arguments)),
        TextResponse("ok"),
    )
    loop = make_loop(client)

    asyncio.run(loop.handle("go"))

    tool_turns = [t for t in loop.state.turns if t.role is TurnRole.TOOL_RESULT]
    assert len(tool_turns) == 1
    assert len(client.calls) == 2
    assert client.calls[1][0] == CONTINUATION_PROMPT


@allure.feature("Conversation Loop")
@allure.story("Hop limit")
def test_hop_limit_stops_endless_tool_calls():
    client = RepeatingClient(ToolCallRequest("execute_shell_command", {"command": "ls"}))
    runner = FakeRunner({"ls": "x"})
    loop = make_loop(client, runner, max_hops=3)

    final = asyncio.run(loop.handle("loop forever"))

    assert client.calls == 3
    assert runner.commands == ["ls", "ls", "ls"]
    assert final.kind is MessageKind.ERROR
    assert "3" in final.content
    assert loop.state.turns[-1].role is TurnRole.TOOL_RESULT


def test_no_hop_limit_when_disabled():
    responses = [shell_call("ls") for _ in range(25)] + [TextResponse("finally")]
    client = ScriptedClient(*responses)
    loop = make_loop(client, FakeRunner({"ls": "x"}), max_hops=None)

    final = asyncio.run(loop.handle("go"))

    assert final.content == "finally"
    assert len(client.calls) == 26


def test_invalid_max_hops_rejected():
    with pytest.raises(ValueError):
        make_loop(ScriptedClient(), max_hops=0)


def test_custom_tool_is_dispatched_through_registry():
    class EchoTool(Tool):
        name = "echo"
        description = "Echo the text argument"
        parameters = {"type": "object", "properties": {"text": {"type": "string"}}}

        async def invoke(self, arguments):
            return arguments["text"].upper()

    client = ScriptedClient(
        ToolCallResponse(call=ToolCallRequest("echo", {"text": "hey"})),
        TextResponse("done"),
    )
    loop = make_loop(client, tools=ToolRegistry([EchoTool()]))

    asyncio.run(loop.handle("echo hey"))

    assert loop.state.turns[1].tool_result.result == "HEY"


def test_reset_reseeds_history_and_clears_display():
    client = ScriptedClient(TextResponse("a"))
    loop = make_loop(client, system_prompt="seed")
    asyncio.run(loop.handle("q"))

    loop.reset()

    assert loop.state.turns == (Turn.user("seed"),)
    assert loop.messages == []


@allure.feature("Conversation Loop")
@allure.story("Serialized sends")
def test_concurrent_messages_do_not_interleave():
    class SlowClient(LLMClient):
        def __init__(self) -> None:
            self.calls = 0

        async def generate(self, prompt, history):
            self.calls += 1
            if prompt != CONTINUATION_PROMPT and self.calls == 1:
                await asyncio.sleep(0.01)
                return shell_call("ls")
            await asyncio.sleep(0)
            return TextResponse(f"re: {prompt}")

    client = SlowClient()
    loop = make_loop(client, FakeRunner({"ls": "x"}))

    async def send_both():
        await asyncio.gather(loop.handle("first"), loop.handle("second"))

    asyncio.run(send_both())

    texts = [(t.role, t.text) for t in loop.state.turns if t.role is not TurnRole.TOOL_RESULT]
    assert texts == [
        (TurnRole.USER, "first"),
        (TurnRole.USER, CONTINUATION_PROMPT),
        (TurnRole.MODEL, f"re: {CONTINUATION_PROMPT}"),
        (TurnRole.USER, "second"),
        (TurnRole.MODEL, "re: second"),
    ]


def test_display_listener_sees_every_message():
    seen = []
    client = ScriptedClient(shell_call("pwd"), TextResponse("done"))
    loop = make_loop(client, FakeRunner({"pwd": "/tmp"}), on_display=seen.append)

    asyncio.run(loop.handle("where am I"))

    assert seen == loop.messages
