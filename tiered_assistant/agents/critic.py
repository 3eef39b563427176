"""
Critique Agent (The Judge)

Responsible for:
- Scoring the credibility of the latest answer on a 0-100 scale
- Seeing the whole conversation so small talk can be recognised
- Failing loudly when the score cannot be obtained
"""

import json
from typing import Optional

from pydantic import BaseModel, Field, ValidationError

from .base import BaseAgent
from .llm import ChatModel
from ..core.config import settings
from ..core.errors import BackendError, CritiqueError
from ..memory import Message, ReadOnlyMemory
from ..utils.helpers import truncate_text


class CritiqueResult(BaseModel):
    """Structured output of the critique."""
    score: int = Field(ge=0, le=100, description="Credibility of the last answer")


class CritiqueScorer(BaseAgent):
    """
    The Critique Agent.

    Asks the model for a structured score of the candidate answer in the
    context of the full prior conversation. Chit-chat scores 100; an
    answer that does not address the query scores 0.
    """

    name = "Critique"

    def __init__(self, llm: ChatModel, instructions: Optional[str] = None):
        super().__init__(llm, instructions or settings.critique_instructions)

    async def score(self, memory: ReadOnlyMemory, answer: Message) -> CritiqueResult:
        """
        Score ``answer`` given ``memory``.

        Raises:
            CritiqueError: backend unreachable, or no valid score returned
        """
        messages = self.build_messages(memory, answer)

        try:
            raw = await self.llm.generate_json(CritiqueResult, messages)
        except BackendError as e:
            raise CritiqueError(f"Scoring backend unavailable: {e}") from e

        result = self.parse(raw)
        self.log.info(f"Score {result.score} for: {truncate_text(answer.text, 60)}")
        return result

    @staticmethod
    def parse(raw: str) -> CritiqueResult:
        """
        Parse the model's JSON, tolerating a surrounding markdown fence.

        Raises:
            CritiqueError: if the text is not a valid CritiqueResult
        """
        text = (raw or "").strip()
        if "```json" in text:
            text = text.split("```json")[1].split("```")[0]
        elif text.startswith("```"):
            text = text.split("```")[1].split("```")[0]
        text = text.strip()

        if not text:
            raise CritiqueError("Critique returned no output")

        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise CritiqueError(f"Critique output is not JSON: {truncate_text(text, 80)}") from e

        try:
            return CritiqueResult.model_validate(data)
        except ValidationError as e:
            raise CritiqueError(f"Critique output is not a valid score: {e}") from e
