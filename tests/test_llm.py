"""
Tests for the Gemini chat model adapter.

The SDK client is replaced by a stub; only request assembly and response
mapping are exercised.
"""

import asyncio
from types import SimpleNamespace

import pytest
from google.genai import types

from tiered_assistant.agents.critic import CritiqueResult
from tiered_assistant.agents.llm import ChatTurn, GeminiChatModel, ToolCall, ToolRound
from tiered_assistant.core.errors import BackendError
from tiered_assistant.memory import AssistantMessage, SystemMessage, UserMessage

from conftest import FakePlugin


class StubModels:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.requests = []

    async def generate_content(self, model, contents, config):
        self.requests.append({"model": model, "contents": contents, "config": config})
        if self.error:
            raise self.error
        return self.response


def stub_client(response=None, error=None):
    models = StubModels(response, error)
    return SimpleNamespace(aio=SimpleNamespace(models=models)), models


def text_response(text):
    content = types.Content(role="model", parts=[types.Part(text=text)])
    return SimpleNamespace(text=text, function_calls=None, candidates=[SimpleNamespace(content=content)])


class TestContents:
    """Tests for message translation."""

    def test_roles_and_system(self):
        """Test system text is split off and assistant maps to model."""
        system, contents = GeminiChatModel._to_contents([
            SystemMessage("Be brief."),
            UserMessage("What's 2+2?"),
            AssistantMessage("4"),
        ], ())

        assert system == "Be brief."
        assert [c.role for c in contents] == ["user", "model"]
        assert contents[1].parts[0].text == "4"

    def test_no_system(self):
        """Test conversations without instructions."""
        system, contents = GeminiChatModel._to_contents([UserMessage("hi")], ())
        assert system is None
        assert len(contents) == 1

    def test_tool_rounds(self):
        """Test tool calls and their results follow the conversation."""
        call = ToolCall(name="wikipedia", query="Eiffel Tower", call_id="c1")
        rounds = [ToolRound(turn=ChatTurn(tool_calls=[call]), results=["324 m tall"])]

        _, contents = GeminiChatModel._to_contents([UserMessage("How tall?")], rounds)

        assert [c.role for c in contents] == ["user", "model", "user"]
        assert contents[1].parts[0].function_call.args == {"query": "Eiffel Tower"}
        response = contents[2].parts[0].function_response
        assert response.name == "wikipedia"
        assert response.response == {"result": "324 m tall"}

    def test_raw_content_replayed(self):
        """Test the backend's own content is reused for tool turns."""
        raw = types.Content(role="model", parts=[types.Part(
            function_call=types.FunctionCall(name="open_meteo", args={"query": "Oslo"})
        )])
        call = ToolCall(name="open_meteo", query="Oslo")
        rounds = [ToolRound(turn=ChatTurn(tool_calls=[call], raw=raw), results=["cold"])]

        _, contents = GeminiChatModel._to_contents([UserMessage("Weather?")], rounds)

        assert contents[1] is raw


class TestGeminiChatModel:
    """Tests for calls through the stubbed client."""

    def test_text_turn(self):
        """Test a text answer is returned as a chat turn."""
        client, models = stub_client(text_response(" 4 "))
        llm = GeminiChatModel({"model": "test-model"}, client=client)

        turn = asyncio.run(llm.chat([UserMessage("2+2?")]))

        assert turn.text == "4"
        assert not turn.wants_tools
        assert models.requests[0]["model"] == "test-model"
        assert models.requests[0]["config"].tools is None

    def test_tool_turn(self):
        """Test function calls are mapped to tool calls."""
        response = SimpleNamespace(
            text=None,
            function_calls=[SimpleNamespace(name="wikipedia", args={"query": "Oslo"}, id="c7")],
            candidates=[SimpleNamespace(content="raw-content")],
        )
        client, models = stub_client(response)
        llm = GeminiChatModel(client=client)

        turn = asyncio.run(llm.chat([UserMessage("Oslo?")], tools=[FakePlugin("wikipedia")]))

        assert turn.tool_calls == [ToolCall(name="wikipedia", query="Oslo", call_id="c7")]
        assert turn.raw == "raw-content"
        declaration = models.requests[0]["config"].tools[0].function_declarations[0]
        assert declaration.name == "wikipedia"

    def test_generate_json(self):
        """Test structured output is requested with the schema."""
        client, models = stub_client(text_response('{"score": 90}'))
        llm = GeminiChatModel(client=client)

        raw = asyncio.run(llm.generate_json(CritiqueResult, [UserMessage("hi")]))

        assert raw == '{"score": 90}'
        config = models.requests[0]["config"]
        assert config.response_mime_type == "application/json"

    def test_backend_failure(self):
        """Test SDK errors become backend errors."""
        client, _ = stub_client(error=RuntimeError("429 quota"))
        llm = GeminiChatModel(client=client)

        with pytest.raises(BackendError, match="429 quota"):
            asyncio.run(llm.chat([UserMessage("hi")]))

    def test_missing_key(self, monkeypatch):
        """Test an unconfigured model fails on use, not on creation."""
        from tiered_assistant.agents import llm as llm_module
        monkeypatch.setattr(llm_module.settings, "gemini_api_key", "")

        llm = GeminiChatModel()

        assert llm.client is None
        with pytest.raises(BackendError):
            asyncio.run(llm.chat([UserMessage("hi")]))
