"""Conversation state and the tool-calling loop."""
from .display import DisplayMessage, MessageKind, MessageLog
from .loop import ConversationLoop
from .state import ConversationState

__all__ = [
    'ConversationLoop',
    'ConversationState',
    'DisplayMessage',
    'MessageKind',
    'MessageLog',
]
