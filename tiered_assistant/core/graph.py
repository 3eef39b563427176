"""
Escalation workflow for the Tiered Assistant.

Builds the step graph that answers one user query: a cheap responder
answers first, a critique scores the answer, and only low-scoring
answers are escalated to the responder with lookup capabilities.
"""

from typing import Callable, Optional, Sequence

from .config import settings, ModelConfig
from .state import END, StepReturn, WorkflowState
from .workflow import Workflow, WorkflowRun
from ..agents.critic import CritiqueScorer
from ..agents.llm import ChatModel, GeminiChatModel
from ..agents.responder import ResponderAgent
from ..memory import Message, ReadOnlyMemory
from ..tools.base import Plugin
from ..utils.logger import get_logger, log_agent_action


logger = get_logger()

SIMPLE_AGENT = "simpleAgent"
CRITIQUE = "critique"
COMPLEX_AGENT = "complexAgent"

# Receives (label, text) for every intermediate result
Reporter = Callable[[str, str], None]


def route_from_critique(score: int, threshold: int) -> StepReturn:
    """Escalate strictly below the threshold; a score equal to it is accepted."""
    return COMPLEX_AGENT if score < threshold else END


class EscalationGraph:
    """
    Two-tier answering graph.

    Graph Flow:
    1. simpleAgent answers without tools, always followed by critique
    2. critique (strict: needs answer and memory) scores the answer
    3. complexAgent re-answers with lookups when the score is too low
    """

    def __init__(
        self,
        llm: Optional[ChatModel] = None,
        critic_llm: Optional[ChatModel] = None,
        complex_llm: Optional[ChatModel] = None,
        tools: Optional[Sequence[Plugin]] = None,
        threshold: Optional[int] = None,
        reporter: Optional[Reporter] = None,
        max_steps: Optional[int] = None
    ):
        """
        Args:
            llm: Model for the simple agent (and the others unless given)
            critic_llm: Model for the critique
            complex_llm: Model for the complex agent
            tools: Capabilities of the complex agent (default set if None)
            threshold: Escalation threshold (settings.critique_threshold)
            reporter: Callback for intermediate outputs
            max_steps: Optional step bound per run
        """
        self.llm = llm or GeminiChatModel(ModelConfig.SIMPLE_AGENT)
        self.critic_llm = critic_llm or (
            self.llm if llm is not None else GeminiChatModel(ModelConfig.CRITIC)
        )
        self.complex_llm = complex_llm or (
            self.llm if llm is not None else GeminiChatModel(ModelConfig.COMPLEX_AGENT)
        )
        self.tools = tools
        self.threshold = settings.critique_threshold if threshold is None else threshold
        self.reporter = reporter
        self.scorer = CritiqueScorer(self.critic_llm)

        self.workflow = self._build_workflow(
            max_steps if max_steps is not None else settings.max_workflow_steps
        )

        logger.with_agent("Workflow").debug(
            f"Escalation graph initialized (threshold={self.threshold})"
        )

    def _build_workflow(self, max_steps: Optional[int]) -> Workflow[WorkflowState]:
        return (
            Workflow(WorkflowState, name="Workflow", max_steps=max_steps)
            .add_step(SIMPLE_AGENT, self._simple_agent_node)
            .add_strict_step(
                CRITIQUE,
                {"answer": Message, "memory": ReadOnlyMemory},
                self._critique_node
            )
            .add_step(COMPLEX_AGENT, self._complex_agent_node)
            .set_start(SIMPLE_AGENT)
        )

    # ==================== Node Functions ====================

    @log_agent_action("SimpleAgent")
    async def _simple_agent_node(self, state: WorkflowState) -> StepReturn:
        agent = ResponderAgent.simple(self.llm, state.memory)
        output = await agent.run(prompt=None)
        self._report("🤖 Simple Agent", output.result.text)

        state.answer = output.result
        return CRITIQUE

    @log_agent_action("Critique")
    async def _critique_node(self, state: WorkflowState) -> StepReturn:
        result = await self.scorer.score(state.memory, state.answer)
        self._report("🧠 Score", str(result.score))

        return route_from_critique(result.score, self.threshold)

    @log_agent_action("ComplexAgent")
    async def _complex_agent_node(self, state: WorkflowState) -> StepReturn:
        agent = ResponderAgent.complex(self.complex_llm, state.memory, self.tools)
        output = await agent.run(prompt=None)
        self._report("🤖 Complex Agent", output.result.text)

        state.answer = output.result
        # No successor: falling off the end finishes the run

    def _report(self, label: str, text: str) -> None:
        if self.reporter is not None:
            self.reporter(label, text)

    # ==================== Public Interface ====================

    async def answer(self, memory: ReadOnlyMemory) -> WorkflowRun[WorkflowState]:
        """Run the graph once over the current conversation."""
        return await self.workflow.run(memory=memory)


# ==================== Factory Function ====================

def build_escalation_workflow(**kwargs) -> Workflow[WorkflowState]:
    """Build the escalation step graph; see EscalationGraph for arguments."""
    return EscalationGraph(**kwargs).workflow
