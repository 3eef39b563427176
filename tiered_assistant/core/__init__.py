"""
Core module containing configuration, errors and state.

The step-graph engine and the escalation workflow live in
``core.workflow`` and ``core.graph`` and are imported from there.
"""

from .config import Config, settings
from .errors import (
    WorkflowError,
    ConfigurationError,
    StateValidationError,
    UnknownStepError,
    StepLimitExceededError,
    ResponderError,
    CritiqueError,
    PluginError,
)
from .state import END, WorkflowState

__all__ = [
    "Config",
    "settings",
    "WorkflowError",
    "ConfigurationError",
    "StateValidationError",
    "UnknownStepError",
    "StepLimitExceededError",
    "ResponderError",
    "CritiqueError",
    "PluginError",
    "END",
    "WorkflowState",
]
