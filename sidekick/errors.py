"""
Error types for sidekick.

Every failure the conversation loop can meet has its own exception class so
that the loop can turn it into a display message (and, inside a tool
dispatch, into a tool-result turn) without inspecting error strings.
"""
from typing import Optional


class SidekickError(Exception):
    """Base class for all sidekick errors."""


class ConfigError(SidekickError):
    """Configuration file could not be read or is malformed."""


class LLMError(SidekickError):
    """Base class for failures of a single LLM request."""


class TransportError(LLMError):
    """The endpoint could not be reached (connection, timeout, network)."""


class ApiError(LLMError):
    """The endpoint answered with a non-success status."""

    def __init__(self, status_code: int, body: str) -> None:
        self.status_code = status_code
        self.body = body
        super().__init__(f"API Error: Status {status_code}, {body}")


class DecodingError(LLMError):
    """The response body did not have the expected shape."""


class UnknownLLMError(LLMError):
    """Any other transport-layer anomaly."""


class ToolError(SidekickError):
    """Base class for tool dispatch failures."""


class ToolValidationError(ToolError):
    """Unknown tool name or malformed tool arguments."""


class ToolExecutionError(ToolError):
    """The tool ran but could not produce a result."""


class CommandLaunchError(ToolExecutionError):
    """The command interpreter itself could not be started."""


class CommandFailedError(ToolExecutionError):
    """The command exited with a non-zero status."""

    def __init__(self, output: str, return_code: Optional[int] = None) -> None:
        self.output = output
        self.return_code = return_code
        message = output or f"Command failed with code {return_code}"
        super().__init__(message)


class CommandTimeoutError(ToolExecutionError):
    """The command did not finish within the configured timeout."""

    def __init__(self, timeout: float) -> None:
        self.timeout = timeout
        super().__init__(f"Command timed out after {timeout} seconds")


class HopLimitExceeded(SidekickError):
    """The model kept requesting tools past the configured hop limit."""

    def __init__(self, max_hops: int) -> None:
        self.max_hops = max_hops
        super().__init__(
            f"Stopped after {max_hops} model queries without a final answer"
        )


def describe_error(error: BaseException) -> str:
    """
    Build the user-facing text for an error.

    Args:
        error: The exception to describe

    Returns:
        A one-line message prefixed by the failure kind
    """
    if isinstance(error, TransportError):
        return f"Could not reach the model: {error}"
    if isinstance(error, ApiError):
        return str(error)
    if isinstance(error, DecodingError):
        return f"Unexpected response from the model: {error}"
    if isinstance(error, HopLimitExceeded):
        return str(error)
    if isinstance(error, ToolValidationError):
        return str(error)
    if isinstance(error, ToolExecutionError):
        return f"Tool Error: {error}"
    detail = str(error) or type(error).__name__
    return f"Sidekick Error: {detail}"
