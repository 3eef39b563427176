"""
Shared HTTP access for the lookup plugins.
"""

import asyncio
from typing import Any, Dict, Optional

import aiohttp

from ..core.config import settings
from ..core.errors import PluginError


USER_AGENT = "tiered-assistant/1.0 (conversational lookup plugin)"


class HttpPluginMixin:
    """
    JSON-over-HTTP access for plugins.

    A fresh ClientSession is opened per request and closed on every exit
    path; the assistant issues at most one lookup at a time.
    """

    name: str = "plugin"
    timeout: Optional[float] = None

    async def fetch_json(
        self,
        url: str,
        params: Optional[Dict[str, Any]] = None
    ) -> Any:
        """
        GET a URL and decode its JSON body.

        Raises:
            PluginError: on transport errors, non-200 status or bad JSON
        """
        timeout = aiohttp.ClientTimeout(total=self.timeout or settings.http_timeout)
        try:
            async with aiohttp.ClientSession(
                timeout=timeout,
                headers={"User-Agent": USER_AGENT}
            ) as session:
                async with session.get(url, params=params) as response:
                    if response.status != 200:
                        raise PluginError(
                            self.name, f"HTTP {response.status} from {url}"
                        )
                    return await response.json(content_type=None)
        except PluginError:
            raise
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            raise PluginError(self.name, f"request to {url} failed: {e}") from e
