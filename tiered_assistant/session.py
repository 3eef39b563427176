"""
Interactive console session.

Reads one query at a time, runs the escalation workflow once per query,
stores the answer in conversation memory and renders the result.
"""

from typing import Optional

from .core.config import settings
from .core.errors import CritiqueError, ResponderError, WorkflowError
from .core.state import WorkflowState
from .core.workflow import Workflow, WorkflowRun
from .memory import ConversationMemory, Message, UserMessage
from .utils.console import ConsoleReader
from .utils.helpers import async_retry
from .utils.logger import get_logger


logger = get_logger()


class ConsoleSession:
    """
    Drives the conversation loop.

    Memory is appended to only here, and only after the previous run has
    finished, so steps never observe a history that changes under them.
    """

    FINAL_ANSWER_LABEL = "🤖 Final Answer"
    ERROR_LABEL = "❗ Error"

    def __init__(
        self,
        reader: ConsoleReader,
        workflow: Workflow[WorkflowState],
        memory: Optional[ConversationMemory] = None,
        max_retries: Optional[int] = None,
        retry_delay: float = 1.0
    ):
        self.reader = reader
        self.workflow = workflow
        self.memory = memory if memory is not None else ConversationMemory()
        self.max_retries = (
            settings.session_max_retries if max_retries is None else max_retries
        )
        self.retry_delay = retry_delay

    async def run(self) -> int:
        """
        Serve prompts until the reader ends.

        Returns:
            Number of prompts that produced an answer
        """
        handled = 0
        async for record in self.reader:
            try:
                await self.handle(record.prompt)
            except WorkflowError as e:
                logger.with_agent("Session").error(
                    f"Run {record.iteration} failed: {e}"
                )
                self.reader.write(self.ERROR_LABEL, str(e))
                continue
            except Exception as e:
                logger.with_agent("Session").exception(
                    f"Run {record.iteration} crashed"
                )
                self.reader.write(self.ERROR_LABEL, f"{type(e).__name__}: {e}")
                continue
            handled += 1
        return handled

    async def handle(self, prompt: str) -> Message:
        """
        Answer one prompt and remember both sides of the exchange.

        Raises:
            WorkflowError: if the run failed (the user message stays in memory)
        """
        self.memory.add(UserMessage(prompt))

        run = await self._run_workflow()
        answer = run.state.answer
        if answer is None:
            raise WorkflowError(f"Workflow finished without an answer (steps: {run.steps})")

        self.memory.add(answer)
        logger.with_agent("Session").info(
            f"Answered via {' -> '.join(run.steps)}"
        )
        self.reader.write(self.FINAL_ANSWER_LABEL, answer.text)
        return answer

    async def _run_workflow(self) -> WorkflowRun[WorkflowState]:
        run_with_retries = async_retry(
            max_retries=self.max_retries,
            delay=self.retry_delay,
            exceptions=(ResponderError, CritiqueError)
        )(self.workflow.run)
        return await run_with_retries(memory=self.memory.as_read_only())
