"""
Wikipedia encyclopedia search capability.

Searches the Wikipedia REST API and returns the summaries of the best
matching pages.
"""

from typing import Any, Dict, List, Optional
from urllib.parse import quote

from .base import Plugin, PluginOutput
from .http import HttpPluginMixin
from ..core.config import settings
from ..core.errors import PluginError
from ..utils.logger import get_logger
from ..utils.helpers import sanitize_text, truncate_text


logger = get_logger()


class WikipediaTool(HttpPluginMixin, Plugin):
    """Encyclopedia lookup over Wikipedia page search and summaries."""

    name = "wikipedia"
    description = (
        "Search Wikipedia for encyclopedic knowledge about people, places, "
        "history, science and other established facts."
    )
    query_description = "Topic or question to look up"

    def __init__(
        self,
        language: Optional[str] = None,
        max_results: Optional[int] = None,
        timeout: Optional[float] = None
    ):
        self.language = language or settings.wikipedia_language
        self.max_results = max_results or settings.wikipedia_max_results
        self.timeout = timeout

    @property
    def search_url(self) -> str:
        return f"https://{self.language}.wikipedia.org/w/rest.php/v1/search/page"

    def summary_url(self, key: str) -> str:
        return (
            f"https://{self.language}.wikipedia.org/api/rest_v1/page/summary/"
            f"{quote(key, safe='')}"
        )

    async def run(self, query: str) -> PluginOutput:
        logger.with_agent("ComplexAgent").info(f"Wikipedia search: {query[:50]}...")

        found = await self.fetch_json(
            self.search_url, params={"q": query, "limit": self.max_results}
        )
        pages: List[Dict[str, Any]] = found.get("pages", []) if isinstance(found, dict) else []
        if not pages:
            raise PluginError(self.name, f"no articles found for '{query}'")

        summaries = []
        for page in pages[:self.max_results]:
            key = page.get("key")
            if not key:
                continue
            try:
                summary = await self.fetch_json(self.summary_url(key))
            except PluginError as e:
                logger.with_agent("ComplexAgent").warning(f"Skipping page {key}: {e}")
                continue
            if not isinstance(summary, dict):
                continue
            extract = sanitize_text(summary.get("extract") or "")
            if not extract:
                continue
            summaries.append({
                "title": summary.get("title") or page.get("title", key),
                "description": sanitize_text(page.get("description") or ""),
                "extract": truncate_text(extract, max_length=1200),
                "url": summary.get("content_urls", {}).get("desktop", {}).get("page", ""),
            })

        if not summaries:
            raise PluginError(self.name, f"no readable summaries for '{query}'")

        text = "\n\n".join(
            f"{s['title']}"
            + (f" ({s['description']})" if s["description"] else "")
            + f"\n{s['extract']}"
            for s in summaries
        )
        return PluginOutput(text=text, metadata={"pages": summaries})
