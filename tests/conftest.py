"""
Test configuration and fixtures.
"""

import io
import os
import sys
from pathlib import Path
from typing import List, Optional, Sequence

import pytest

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

# Set test environment variables
os.environ.setdefault("TIERED_ASSISTANT_GEMINI_API_KEY", "test_key")
os.environ.setdefault("TIERED_ASSISTANT_TAVILY_API_KEY", "test_key")
os.environ.setdefault("TIERED_ASSISTANT_LOG_LEVEL", "DEBUG")

from rich.console import Console

from tiered_assistant.agents.llm import ChatModel, ChatTurn, ToolCall
from tiered_assistant.core.errors import PluginError
from tiered_assistant.memory import ConversationMemory, UserMessage
from tiered_assistant.tools.base import Plugin, PluginOutput
from tiered_assistant.utils.console import ConsoleReader


class FakeChatModel(ChatModel):
    """
    Scripted ChatModel.

    ``turns`` feed ``chat`` and ``json_replies`` feed ``generate_json``,
    in order. An exception instance in either list is raised instead.
    """

    model_name = "fake"

    def __init__(self, turns: Sequence = (), json_replies: Sequence = ()):
        self.turns = list(turns)
        self.json_replies = list(json_replies)
        self.chat_calls: List[dict] = []
        self.json_calls: List[list] = []

    async def chat(self, messages, tools=(), rounds=()):
        self.chat_calls.append({
            "messages": list(messages),
            "tools": [tool.name for tool in tools],
            "rounds": list(rounds),
        })
        item = self.turns.pop(0)
        if isinstance(item, BaseException):
            raise item
        if isinstance(item, str):
            return ChatTurn(text=item)
        return item

    async def generate_json(self, schema, messages):
        self.json_calls.append(list(messages))
        item = self.json_replies.pop(0)
        if isinstance(item, BaseException):
            raise item
        return item


class FakePlugin(Plugin):
    """Plugin returning a canned answer (or failing) and recording queries."""

    def __init__(self, name: str, answer: str = "", error: Optional[str] = None):
        self.name = name
        self.description = f"Fake {name}"
        self.answer = answer
        self.error = error
        self.queries: List[str] = []

    async def run(self, query: str) -> PluginOutput:
        self.queries.append(query)
        if self.error:
            raise PluginError(self.name, self.error)
        return PluginOutput(text=self.answer)


def tool_turn(name: str, query: str) -> ChatTurn:
    """A model turn asking for a single tool call."""
    return ChatTurn(tool_calls=[ToolCall(name=name, query=query, call_id=f"call_{name}")])


def make_reader(text: str, **kwargs) -> ConsoleReader:
    """ConsoleReader reading ``text`` and rendering into a plain buffer."""
    console = Console(
        file=io.StringIO(),
        width=200,
        color_system=None,
        force_terminal=False,
        highlight=False
    )
    return ConsoleReader(console=console, stream=io.StringIO(text), **kwargs)


def output_of(reader: ConsoleReader) -> str:
    return reader.console.file.getvalue()


@pytest.fixture
def memory():
    """Conversation memory holding a single user question."""
    memory = ConversationMemory()
    memory.add(UserMessage("What's 2+2?"))
    return memory


@pytest.fixture
def sample_obscure_question():
    """Sample question that needs a lookup."""
    return "In which year was the Eiffel Tower's radio antenna first extended?"
