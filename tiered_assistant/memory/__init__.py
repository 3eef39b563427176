"""
Conversation memory: immutable messages and the append-only history.
"""

from .message import Role, Message, UserMessage, AssistantMessage, SystemMessage
from .conversation import ConversationMemory, ReadOnlyMemory, MessagesView

__all__ = [
    "Role",
    "Message",
    "UserMessage",
    "AssistantMessage",
    "SystemMessage",
    "ConversationMemory",
    "ReadOnlyMemory",
    "MessagesView",
]
