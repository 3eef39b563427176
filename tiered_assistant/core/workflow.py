"""
Step-graph execution engine.

A Workflow holds a set of named steps over one shared state object.
Each step receives the state, may mutate it, and returns the name of
the next step (or END). The engine keeps running steps until a step
ends the run or raises.
"""

import inspect
from dataclasses import dataclass, field
from typing import (
    Any,
    Awaitable,
    Callable,
    Dict,
    Generic,
    List,
    Mapping,
    Optional,
    Type,
    TypeVar,
    Union,
)

from .errors import ConfigurationError, StepLimitExceededError, UnknownStepError
from .state import (
    END,
    Continue,
    RequiredShape,
    StepReturn,
    create_initial_state,
    to_transition,
)
from ..utils.logger import get_logger


logger = get_logger()

S = TypeVar("S")

StepHandler = Callable[[S], Union[StepReturn, Awaitable[StepReturn]]]


@dataclass(frozen=True)
class Step(Generic[S]):
    """A registered step: its handler plus the shape it requires, if strict."""
    name: str
    handler: StepHandler
    required: Optional[RequiredShape] = None


@dataclass
class WorkflowRun(Generic[S]):
    """Result of a workflow run."""
    state: S
    steps: List[str] = field(default_factory=list)


class Workflow(Generic[S]):
    """
    Directed step graph executed over a typed shared state.

    There is no guard against cycles: a step that keeps returning an
    earlier step name loops forever unless ``max_steps`` is set.

    Example:
        workflow = (
            Workflow(WorkflowState)
            .add_step("first", first)
            .add_step("second", second)
            .set_start("first")
        )
        run = await workflow.run(memory=memory.as_read_only())
    """

    END = END

    def __init__(
        self,
        state_type: Type[S],
        name: str = "Workflow",
        max_steps: Optional[int] = None
    ):
        if max_steps is not None and max_steps < 1:
            raise ConfigurationError("max_steps must be positive")
        self.state_type = state_type
        self.name = name
        self.max_steps = max_steps
        self._steps: Dict[str, Step[S]] = {}
        self._start: Optional[str] = None

    # ==================== Graph Building ====================

    def add_step(self, name: str, handler: StepHandler) -> "Workflow[S]":
        """Register a step. Returns the workflow for chaining."""
        self._register(Step(name=name, handler=handler))
        return self

    def add_strict_step(
        self,
        name: str,
        required: Mapping[str, Union[type, tuple]],
        handler: StepHandler
    ) -> "Workflow[S]":
        """
        Register a step whose state preconditions are checked before it runs.

        Args:
            name: Step name
            required: Field name -> expected type(s); each field must be
                present (not None) and an instance of the type
            handler: Step body
        """
        if not required:
            raise ConfigurationError(f"Strict step '{name}' declares no required fields")
        self._register(
            Step(name=name, handler=handler, required=RequiredShape(dict(required)))
        )
        return self

    def set_start(self, name: str) -> "Workflow[S]":
        """Designate the entry step."""
        self._start = name
        return self

    def _register(self, step: Step[S]) -> None:
        if not step.name or not isinstance(step.name, str):
            raise ConfigurationError("Step name must be a non-empty string")
        if step.name == repr(END):
            raise ConfigurationError(f"'{step.name}' is reserved for the end of the run")
        if step.name in self._steps:
            raise ConfigurationError(f"Step '{step.name}' is already registered")
        if not callable(step.handler):
            raise ConfigurationError(f"Handler for step '{step.name}' is not callable")
        self._steps[step.name] = step

    # ==================== Introspection ====================

    @property
    def start(self) -> Optional[str]:
        return self._start

    @property
    def steps(self) -> List[str]:
        return list(self._steps)

    def has_step(self, name: str) -> bool:
        return name in self._steps

    # ==================== Execution ====================

    async def run(self, **initial_fields: Any) -> WorkflowRun[S]:
        """
        Execute the graph from the start step.

        Args:
            **initial_fields: Values merged into the state defaults

        Returns:
            WorkflowRun with the final state and the executed step names

        Raises:
            ConfigurationError: no (registered) start step
            StateValidationError: bad initial fields or strict step precondition
            UnknownStepError: a step returned an unregistered name
            StepLimitExceededError: ``max_steps`` was exceeded
            Exception: anything raised by a step, unchanged
        """
        if self._start is None:
            raise ConfigurationError(f"{self.name} has no start step")
        if self._start not in self._steps:
            raise ConfigurationError(
                f"{self.name} start step '{self._start}' is not registered"
            )

        state = create_initial_state(self.state_type, **initial_fields)
        run = WorkflowRun(state=state)
        log = logger.with_agent(self.name)

        current: Optional[str] = self._start
        while current is not None:
            if self.max_steps is not None and len(run.steps) >= self.max_steps:
                raise StepLimitExceededError(self.max_steps)

            step = self._steps[current]
            run.steps.append(current)
            log.debug(f"Running step '{current}'")

            try:
                if step.required is not None:
                    step.required.validate(current, state)
                result = step.handler(state)
                if inspect.isawaitable(result):
                    result = await result
            except Exception as e:
                log.error(f"Step '{current}' failed: {e}")
                raise

            transition = to_transition(result)
            if isinstance(transition, Continue):
                if transition.step not in self._steps:
                    raise UnknownStepError(transition.step, source=current)
                log.info(f"{current} -> {transition.step}")
                current = transition.step
            else:
                log.info(f"{current} -> END")
                current = None

        return run
