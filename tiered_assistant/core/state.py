"""
State definitions for the escalation workflow.

Defines the shared state that flows between steps, and the step
transition values the engine understands.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any, Dict, List, Optional, Type, TypeVar, Union

from ..memory import Message, ReadOnlyMemory
from .errors import StateValidationError


# ==================== Transitions ====================

class _End:
    """Sentinel returned by a step to finish the run."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "END"


END = _End()


@dataclass(frozen=True)
class Continue:
    """Transition to the named step."""
    step: str


@dataclass(frozen=True)
class End:
    """Transition that terminates the run."""


Transition = Union[Continue, End]

# What a step handler may return.
StepReturn = Union[str, _End, None]


def to_transition(value: StepReturn) -> Transition:
    """
    Normalize a step's return value.

    Returning nothing is a synonym for END: a step that has no successor
    simply falls off the end of the graph.
    """
    if value is None or value is END:
        return End()
    if isinstance(value, str):
        return Continue(value)
    raise TypeError(
        f"Step must return a step name, END or None, got {type(value).__name__}"
    )


# ==================== Workflow State ====================

@dataclass
class WorkflowState:
    """
    Per-run state of the escalation workflow.

    ``memory`` is injected by the caller and stays fixed for the run;
    steps only write ``answer``.
    """
    answer: Optional[Message] = None
    memory: Optional[ReadOnlyMemory] = None


S = TypeVar("S")


def create_initial_state(state_type: Type[S], **initial_fields: Any) -> S:
    """
    Build a fresh state by merging initial fields into the schema defaults.

    Raises:
        StateValidationError: if a field is not part of the schema
    """
    known = {f.name for f in fields(state_type)}
    for name in initial_fields:
        if name not in known:
            raise StateValidationError("<init>", name, "unknown")
    return state_type(**initial_fields)


# ==================== Strict Step Shapes ====================

@dataclass(frozen=True)
class RequiredShape:
    """Fields (and their types) a strict step needs before it may run."""
    fields: Dict[str, Union[type, tuple]] = field(default_factory=dict)

    def validate(self, step: str, state: Any) -> None:
        """
        Check that every required field is present and well-typed.

        Raises:
            StateValidationError: naming the first missing/invalid field
        """
        for name, expected in self.fields.items():
            value = getattr(state, name, None)
            if value is None:
                raise StateValidationError(step, name, "missing")
            if not isinstance(value, expected):
                raise StateValidationError(
                    step,
                    name,
                    "invalid",
                    f"expected {_type_names(expected)}, got {type(value).__name__}"
                )

    @property
    def names(self) -> List[str]:
        return list(self.fields)


def _type_names(expected: Union[type, tuple]) -> str:
    if isinstance(expected, tuple):
        return " | ".join(t.__name__ for t in expected)
    return expected.__name__
