"""
Responder agents.

A ResponderAgent reads the conversation so far and produces exactly one
assistant message. The simple variant answers straight from the model;
the complex variant may call lookup plugins first.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from .base import BaseAgent
from .llm import ChatModel, ToolCall, ToolRound
from ..core.config import settings
from ..core.errors import BackendError, PluginError, ResponderError
from ..memory import AssistantMessage, Message, ReadOnlyMemory
from ..tools import default_capabilities
from ..tools.base import Plugin


SIMPLE_INSTRUCTIONS = (
    "You are a helpful assistant. Answer the user's latest message directly "
    "and concisely using your own knowledge."
)

COMPLEX_INSTRUCTIONS = (
    "You are a careful research assistant. Answer the user's latest message. "
    "Use the available tools whenever the answer depends on facts you are not "
    "sure about, current events or the weather, then answer concisely based "
    "on what the tools returned. If a tool fails, try another one or explain "
    "what could not be found."
)


@dataclass
class ResponderOutput:
    """Result of a responder run."""
    result: Message
    tool_calls: int = 0


class ResponderAgent(BaseAgent):
    """
    Produces one answer message for the conversation in ``memory``.

    With plugins, runs a function-calling loop: every tool call the model
    requests is executed and its result (or the plugin's error, as a
    degraded result) is fed back until the model answers in text.
    """

    def __init__(
        self,
        llm: ChatModel,
        memory: ReadOnlyMemory,
        tools: Sequence[Plugin] = (),
        instructions: Optional[str] = None,
        name: str = "Responder",
        max_iterations: Optional[int] = None
    ):
        super().__init__(llm, instructions)
        self.memory = memory
        self.tools: Dict[str, Plugin] = {tool.name: tool for tool in tools}
        self.name = name
        self.max_iterations = (
            max_iterations if max_iterations is not None else settings.max_tool_iterations
        )

    @classmethod
    def simple(cls, llm: ChatModel, memory: ReadOnlyMemory) -> "ResponderAgent":
        """Fast responder without external lookups."""
        return cls(llm, memory, tools=(), instructions=SIMPLE_INSTRUCTIONS, name="SimpleAgent")

    @classmethod
    def complex(
        cls,
        llm: ChatModel,
        memory: ReadOnlyMemory,
        tools: Optional[Sequence[Plugin]] = None
    ) -> "ResponderAgent":
        """Escalation responder equipped with lookup capabilities."""
        if tools is None:
            tools = default_capabilities()
        return cls(llm, memory, tools=tools, instructions=COMPLEX_INSTRUCTIONS, name="ComplexAgent")

    async def run(self, prompt: Optional[Message] = None) -> ResponderOutput:
        """
        Answer the conversation.

        Args:
            prompt: Optional extra message appended after memory for this
                call only; it is not stored

        Raises:
            ResponderError: backend failure, empty answer, or too many
                tool-calling rounds
        """
        messages = self.build_messages(self.memory, prompt)
        self.log.info(f"Answering: {self.last_user_text(messages)[:50]}...")

        tools = list(self.tools.values())
        rounds: List[ToolRound] = []
        calls_made = 0

        while True:
            try:
                turn = await self.llm.chat(messages, tools=tools, rounds=rounds)
            except BackendError as e:
                raise ResponderError(self.name, str(e)) from e

            if not turn.wants_tools:
                break

            if len(rounds) >= self.max_iterations:
                raise ResponderError(
                    self.name,
                    f"no answer after {self.max_iterations} tool-calling rounds"
                )

            results = [await self._invoke(call) for call in turn.tool_calls]
            calls_made += len(results)
            rounds.append(ToolRound(turn=turn, results=results))

        if not turn.text:
            raise ResponderError(self.name, "model returned an empty answer")

        self.log.info(f"Answered after {calls_made} tool call(s)")
        return ResponderOutput(result=AssistantMessage(turn.text), tool_calls=calls_made)

    async def _invoke(self, call: ToolCall) -> str:
        plugin = self.tools.get(call.name)
        if plugin is None:
            self.log.warning(f"Model requested unknown tool '{call.name}'")
            return f"Error: there is no tool named '{call.name}'."

        self.log.info(f"Calling {call.name}({call.query[:50]!r})")
        try:
            output = await plugin.run(call.query)
        except PluginError as e:
            self.log.warning(f"Tool {call.name} failed: {e}")
            return f"Error: {e}"
        except Exception as e:
            self.log.exception(f"Tool {call.name} crashed")
            return f"Error: {call.name} failed unexpectedly ({type(e).__name__}: {e})"
        return output.text
