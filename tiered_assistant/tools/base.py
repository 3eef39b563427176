"""
Capability plugin interface.

Plugins are external lookup tools the complex agent can call by name.
Each one takes a single free-text query and returns text the model can
read, or raises PluginError.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict


@dataclass
class PluginOutput:
    """Result of a plugin invocation."""
    text: str
    metadata: Dict[str, Any] = field(default_factory=dict)

    def is_empty(self) -> bool:
        return not self.text.strip()


class Plugin(ABC):
    """
    Abstract base class for capability plugins.

    Subclasses set ``name``, ``description`` and ``query_description``;
    the responder turns these into a function declaration for the model.
    """

    name: str = "plugin"
    description: str = ""
    query_description: str = "Free-text query"

    @abstractmethod
    async def run(self, query: str) -> PluginOutput:
        """
        Run the lookup.

        Raises:
            PluginError: if the lookup failed
        """
        pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"
