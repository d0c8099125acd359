"""LLM client modules for sidekick."""
from .base import LLMClient
from .gemini import GeminiClient
from .types import (
    LLMResponse,
    TextResponse,
    ToolCallRequest,
    ToolCallResponse,
    ToolResult,
    Turn,
    TurnRole,
)

__all__ = [
    'LLMClient', 'GeminiClient',
    'LLMResponse', 'TextResponse', 'ToolCallRequest', 'ToolCallResponse',
    'ToolResult', 'Turn', 'TurnRole',
]
