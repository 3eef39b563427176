"""
Capability plugins for the complex agent (encyclopedia, weather, web search).
"""

from typing import List

from .base import Plugin, PluginOutput
from .wikipedia import WikipediaTool
from .open_meteo import OpenMeteoTool
from .tavily_search import TavilySearchTool, TavilySearchConfig


def default_capabilities() -> List[Plugin]:
    """The lookup capabilities given to the escalated responder."""
    return [WikipediaTool(), OpenMeteoTool(), TavilySearchTool()]


__all__ = [
    "Plugin",
    "PluginOutput",
    "WikipediaTool",
    "OpenMeteoTool",
    "TavilySearchTool",
    "TavilySearchConfig",
    "default_capabilities",
]
