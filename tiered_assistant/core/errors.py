"""
Error taxonomy for the Tiered Assistant.

Every failure that can end a workflow run derives from WorkflowError so the
console session can report it with a single handler.
"""

from typing import Optional


class WorkflowError(Exception):
    """Base class for errors that abort a workflow run."""


class ConfigurationError(WorkflowError):
    """The step graph is not runnable (no start step, bad registration)."""


class StateValidationError(WorkflowError):
    """A strict step's preconditions are not met by the current state."""

    def __init__(
        self,
        step: str,
        field: str,
        reason: str = "missing",
        detail: Optional[str] = None
    ):
        self.step = step
        self.field = field
        self.reason = reason
        suffix = f": {detail}" if detail else ""
        super().__init__(
            f"Step '{step}' requires state field '{field}' ({reason}{suffix})"
        )


class UnknownStepError(WorkflowError):
    """A step returned the name of a step that was never registered."""

    def __init__(self, step: str, source: Optional[str] = None):
        self.step = step
        self.source = source
        origin = f" (returned by '{source}')" if source else ""
        super().__init__(f"Unknown step '{step}'{origin}")


class StepLimitExceededError(WorkflowError):
    """The optional max-step bound of a workflow was exceeded."""

    def __init__(self, limit: int):
        self.limit = limit
        super().__init__(f"Workflow exceeded the limit of {limit} steps")


class ResponderError(WorkflowError):
    """A responder agent could not produce an answer."""

    def __init__(self, agent: str, message: str):
        self.agent = agent
        super().__init__(f"{agent}: {message}")


class CritiqueError(WorkflowError):
    """The critique backend was unreachable or returned an unusable score."""


class PluginError(Exception):
    """A capability plugin failed; handled by the responder that invoked it."""

    def __init__(self, plugin: str, message: str):
        self.plugin = plugin
        super().__init__(f"{plugin}: {message}")


class QuestionAborted(Exception):
    """A single console question was cancelled before it was answered."""


class BackendError(Exception):
    """The language model backend could not be reached or refused the call."""
