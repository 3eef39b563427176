"""
Conversation message model.

Messages are immutable values created by the session (user role)
or by a responder (assistant role).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Union


class Role(str, Enum):
    """Author of a conversation message."""
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


@dataclass(frozen=True)
class Message:
    """A single immutable conversation message."""
    role: Role
    text: str
    created_at: datetime = field(default_factory=datetime.utcnow, compare=False)

    @classmethod
    def of(cls, role: Union[Role, str], text: str) -> Message:
        """Create a message from a role value such as ``"user"``."""
        return cls(role=Role(role), text=text)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "role": self.role.value,
            "text": self.text,
            "created_at": self.created_at.isoformat()
        }


def UserMessage(text: str) -> Message:
    return Message(role=Role.USER, text=text)


def AssistantMessage(text: str) -> Message:
    return Message(role=Role.ASSISTANT, text=text)


def SystemMessage(text: str) -> Message:
    return Message(role=Role.SYSTEM, text=text)
