"""
Base agent class for the Tiered Assistant agents.

Provides the shared model handle and the conversation assembly used by
both the responders and the critique scorer.
"""

from abc import ABC
from typing import List, Optional, Sequence

from .llm import ChatModel
from ..memory import Message, ReadOnlyMemory, Role, SystemMessage
from ..utils.logger import get_logger


logger = get_logger()


class BaseAgent(ABC):
    """
    Abstract base class for all agents in the system.

    Agents never write to memory: they receive a ReadOnlyMemory and
    return their result to the caller.
    """

    name: str = "BaseAgent"

    def __init__(self, llm: ChatModel, instructions: Optional[str] = None):
        self.llm = llm
        self.instructions = instructions

    @property
    def log(self):
        return logger.with_agent(self.name)

    def build_messages(
        self,
        memory: ReadOnlyMemory,
        *extra: Optional[Message]
    ) -> List[Message]:
        """
        Assemble the conversation sent to the model.

        The agent's instructions come first, then the memory in insertion
        order, then any extra messages that are not part of memory.
        """
        messages: List[Message] = []
        if self.instructions:
            messages.append(SystemMessage(self.instructions))
        messages.extend(memory.messages)
        messages.extend(m for m in extra if m is not None)
        return messages

    @staticmethod
    def last_user_text(messages: Sequence[Message]) -> str:
        """Text of the latest user message, for logging."""
        for message in reversed(messages):
            if message.role == Role.USER:
                return message.text
        return ""
