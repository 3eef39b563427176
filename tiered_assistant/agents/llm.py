"""
Chat model backend.

ChatModel is the narrow interface the agents talk to; GeminiChatModel
implements it on top of the google-genai SDK, translating conversation
messages, tool declarations and tool results into Gemini contents.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple, Type

from google import genai
from google.genai import types
from pydantic import BaseModel

from ..core.config import settings
from ..core.errors import BackendError
from ..memory import Message, Role
from ..tools.base import Plugin
from ..utils.logger import get_logger


logger = get_logger()


# ==================== Backend-neutral Types ====================

@dataclass
class ToolCall:
    """A request from the model to run a plugin."""
    name: str
    query: str
    call_id: Optional[str] = None


@dataclass
class ChatTurn:
    """One model turn: either text, or one or more tool calls."""
    text: str = ""
    tool_calls: List[ToolCall] = field(default_factory=list)
    raw: Any = None  # backend-native content, replayed verbatim

    @property
    def wants_tools(self) -> bool:
        return bool(self.tool_calls)


@dataclass
class ToolRound:
    """A tool-calling turn together with the results fed back to the model."""
    turn: ChatTurn
    results: List[str]


class ChatModel(ABC):
    """Interface of the language model used by responders and the critic."""

    model_name: str = "unknown"

    @abstractmethod
    async def chat(
        self,
        messages: Sequence[Message],
        tools: Sequence[Plugin] = (),
        rounds: Sequence[ToolRound] = ()
    ) -> ChatTurn:
        """
        Produce the next assistant turn.

        Raises:
            BackendError: if the model could not be reached
        """
        pass

    @abstractmethod
    async def generate_json(
        self,
        schema: Type[BaseModel],
        messages: Sequence[Message]
    ) -> str:
        """
        Ask for a JSON document following ``schema``; returns the raw text.

        Raises:
            BackendError: if the model could not be reached
        """
        pass


# ==================== Gemini ====================

class GeminiChatModel(ChatModel):
    """ChatModel backed by Google Gemini."""

    def __init__(
        self,
        model_config: Optional[Dict[str, Any]] = None,
        api_key: Optional[str] = None,
        client: Optional[genai.Client] = None
    ):
        model_config = model_config or {}
        self.model_name = model_config.get("model", settings.llm_model)
        self.temperature = model_config.get("temperature", settings.llm_temperature)
        self.max_tokens = model_config.get("max_tokens", settings.llm_max_tokens)

        api_key = api_key or settings.gemini_api_key
        if client is not None:
            self.client = client
        elif api_key:
            self.client = genai.Client(api_key=api_key)
        else:
            self.client = None
            logger.warning("Gemini API key not configured")

    async def chat(
        self,
        messages: Sequence[Message],
        tools: Sequence[Plugin] = (),
        rounds: Sequence[ToolRound] = ()
    ) -> ChatTurn:
        system, contents = self._to_contents(messages, rounds)
        config = types.GenerateContentConfig(
            system_instruction=system,
            temperature=self.temperature,
            max_output_tokens=self.max_tokens,
            tools=[types.Tool(function_declarations=[
                self._declare(plugin) for plugin in tools
            ])] if tools else None,
        )
        response = await self._generate(contents, config)

        calls = [
            ToolCall(
                name=call.name,
                query=str((call.args or {}).get("query", "")),
                call_id=call.id
            )
            for call in (response.function_calls or [])
        ]
        raw = response.candidates[0].content if response.candidates else None
        if calls:
            return ChatTurn(tool_calls=calls, raw=raw)
        return ChatTurn(text=(response.text or "").strip(), raw=raw)

    async def generate_json(
        self,
        schema: Type[BaseModel],
        messages: Sequence[Message]
    ) -> str:
        system, contents = self._to_contents(messages, ())
        config = types.GenerateContentConfig(
            system_instruction=system,
            temperature=self.temperature,
            max_output_tokens=self.max_tokens,
            response_mime_type="application/json",
            response_schema=schema,
        )
        response = await self._generate(contents, config)
        return (response.text or "").strip()

    async def _generate(
        self,
        contents: List[types.Content],
        config: types.GenerateContentConfig
    ) -> types.GenerateContentResponse:
        if not self.client:
            raise BackendError("Gemini API key not configured")

        logger.debug(f"Calling {self.model_name} with {len(contents)} contents")
        try:
            return await self.client.aio.models.generate_content(
                model=self.model_name,
                contents=contents,
                config=config
            )
        except Exception as e:
            raise BackendError(f"{self.model_name} call failed: {e}") from e

    @staticmethod
    def _declare(plugin: Plugin) -> types.FunctionDeclaration:
        return types.FunctionDeclaration(
            name=plugin.name,
            description=plugin.description,
            parameters=types.Schema(
                type=types.Type.OBJECT,
                properties={
                    "query": types.Schema(
                        type=types.Type.STRING,
                        description=plugin.query_description
                    )
                },
                required=["query"]
            )
        )

    @staticmethod
    def _to_contents(
        messages: Sequence[Message],
        rounds: Sequence[ToolRound]
    ) -> Tuple[Optional[str], List[types.Content]]:
        """Split system instructions off and map roles to Gemini contents."""
        system_parts = []
        contents = []
        for message in messages:
            if message.role == Role.SYSTEM:
                system_parts.append(message.text)
                continue
            role = "model" if message.role == Role.ASSISTANT else "user"
            contents.append(types.Content(role=role, parts=[types.Part(text=message.text)]))

        for tool_round in rounds:
            if isinstance(tool_round.turn.raw, types.Content):
                contents.append(tool_round.turn.raw)
            else:
                contents.append(types.Content(role="model", parts=[
                    types.Part(function_call=types.FunctionCall(
                        id=call.call_id, name=call.name, args={"query": call.query}
                    ))
                    for call in tool_round.turn.tool_calls
                ]))
            contents.append(types.Content(role="user", parts=[
                types.Part(function_response=types.FunctionResponse(
                    id=call.call_id, name=call.name, response={"result": result}
                ))
                for call, result in zip(tool_round.turn.tool_calls, tool_round.results)
            ]))

        system = "\n\n".join(system_parts) if system_parts else None
        return system, contents
