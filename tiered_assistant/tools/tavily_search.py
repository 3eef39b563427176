"""
Tavily AI web search capability.

Provides clean, parsed web search results for the complex agent.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from tavily import AsyncTavilyClient

from .base import Plugin, PluginOutput
from ..core.config import settings
from ..core.errors import PluginError
from ..utils.logger import get_logger
from ..utils.helpers import async_retry, extract_domain, sanitize_text, truncate_text


logger = get_logger()


@dataclass
class TavilySearchConfig:
    """Configuration for Tavily search."""
    max_results: int = 5
    search_depth: str = "basic"  # "basic" or "advanced"
    include_answer: bool = True
    max_content_chars: int = 600


class TavilySearchTool(Plugin):
    """
    Web search plugin backed by Tavily AI.

    Features:
    - Clean, parsed text output (no raw HTML)
    - Tavily's own answer summary placed first when available
    """

    name = "web_search"
    description = (
        "Search the web for current events, recent news and facts not "
        "covered by an encyclopedia."
    )
    query_description = "Web search query"

    def __init__(
        self,
        api_key: Optional[str] = None,
        config: Optional[TavilySearchConfig] = None,
        client: Optional[AsyncTavilyClient] = None
    ):
        """
        Initialize Tavily search tool.

        Args:
            api_key: Tavily API key
            config: Search configuration
            client: Pre-built async client (mainly for tests)
        """
        self.api_key = api_key or settings.tavily_api_key
        self.config = config or TavilySearchConfig(
            max_results=settings.tavily_max_results
        )

        if client is not None:
            self.client = client
        elif self.api_key:
            self.client = AsyncTavilyClient(api_key=self.api_key)
        else:
            self.client = None
            logger.with_agent("ComplexAgent").warning(
                "Tavily API key not configured - web search will be disabled"
            )

    async def run(self, query: str) -> PluginOutput:
        """Perform a web search and format the results for the model."""
        if not self.client:
            raise PluginError(self.name, "Tavily API key not configured")

        logger.with_agent("ComplexAgent").info(
            f"Web search: {query[:50]}... (max_results={self.config.max_results})"
        )

        try:
            response = await self._search(query)
        except Exception as e:
            raise PluginError(self.name, f"search failed: {e}") from e

        results = self._parse_results(response)
        answer = response.get("answer")

        if not results and not answer:
            raise PluginError(self.name, f"no results for '{query}'")

        parts = []
        if answer:
            parts.append(f"Summary: {sanitize_text(answer)}")
        for i, result in enumerate(results, 1):
            parts.append(
                f"{i}. {result['title']} ({result['domain']})\n"
                f"{result['content']}\n{result['url']}"
            )

        return PluginOutput(
            text="\n\n".join(parts),
            metadata={"results": results, "answer": answer}
        )

    @async_retry(max_retries=2, delay=1.0)
    async def _search(self, query: str) -> Dict[str, Any]:
        return await self.client.search(
            query=query,
            max_results=self.config.max_results,
            search_depth=self.config.search_depth,
            include_answer=self.config.include_answer
        )

    def _parse_results(self, response: Dict[str, Any]) -> List[Dict[str, str]]:
        results = []
        for item in response.get("results", []):
            url = item.get("url", "")
            results.append({
                "title": sanitize_text(item.get("title", "")),
                "url": url,
                "domain": extract_domain(url),
                "content": truncate_text(
                    sanitize_text(item.get("content", "")),
                    max_length=self.config.max_content_chars
                ),
            })
        return results
