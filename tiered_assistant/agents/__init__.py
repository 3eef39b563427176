"""
Agent modules: the two responders, the critique scorer and the model backend.
"""

from .llm import ChatModel, GeminiChatModel, ChatTurn, ToolCall, ToolRound
from .responder import ResponderAgent, ResponderOutput
from .critic import CritiqueScorer, CritiqueResult

__all__ = [
    "ChatModel",
    "GeminiChatModel",
    "ChatTurn",
    "ToolCall",
    "ToolRound",
    "ResponderAgent",
    "ResponderOutput",
    "CritiqueScorer",
    "CritiqueResult",
]
