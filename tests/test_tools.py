"""
Tests for the lookup capability plugins.

HTTP access is replaced by canned JSON keyed on the requested URL.
"""

import asyncio

import pytest

from tiered_assistant.core.errors import PluginError
from tiered_assistant.tools import (
    OpenMeteoTool,
    TavilySearchConfig,
    TavilySearchTool,
    WikipediaTool,
    default_capabilities,
)
from tiered_assistant.tools.base import PluginOutput
from tiered_assistant.tools.open_meteo import FORECAST_URL, GEOCODING_URL, describe_weather_code


class CannedFetchMixin:
    """Replaces fetch_json with a lookup in ``responses``."""

    def __init__(self, responses, **kwargs):
        super().__init__(**kwargs)
        self.responses = responses
        self.requests = []

    async def fetch_json(self, url, params=None):
        self.requests.append((url, params))
        response = self.responses[url]
        if isinstance(response, Exception):
            raise response
        return response


class CannedWikipedia(CannedFetchMixin, WikipediaTool):
    pass


class CannedOpenMeteo(CannedFetchMixin, OpenMeteoTool):
    pass


class FakeTavilyClient:
    def __init__(self, response):
        self.response = response
        self.queries = []

    async def search(self, query, **kwargs):
        self.queries.append((query, kwargs))
        return self.response


class TestWikipediaTool:
    """Tests for the encyclopedia plugin."""

    SEARCH = "https://en.wikipedia.org/w/rest.php/v1/search/page"
    SUMMARY = "https://en.wikipedia.org/api/rest_v1/page/summary/Eiffel_Tower"

    def test_summaries(self):
        """Test search hits are summarised."""
        tool = CannedWikipedia({
            self.SEARCH: {"pages": [
                {"key": "Eiffel_Tower", "title": "Eiffel Tower", "description": "Tower in Paris"}
            ]},
            self.SUMMARY: {
                "title": "Eiffel Tower",
                "extract": "The Eiffel Tower is a wrought-iron lattice tower.",
                "content_urls": {"desktop": {"page": "https://en.wikipedia.org/wiki/Eiffel_Tower"}},
            },
        }, language="en", max_results=1)

        output = asyncio.run(tool.run("Eiffel Tower"))

        assert output.text.startswith("Eiffel Tower (Tower in Paris)")
        assert "wrought-iron" in output.text
        assert output.metadata["pages"][0]["url"].endswith("/Eiffel_Tower")
        assert tool.requests[0][1] == {"q": "Eiffel Tower", "limit": 1}

    def test_no_pages(self):
        """Test an empty search fails."""
        tool = CannedWikipedia({self.SEARCH: {"pages": []}}, language="en")
        with pytest.raises(PluginError):
            asyncio.run(tool.run("zzzz"))

    def test_transport_error(self):
        """Test fetch errors propagate as plugin errors."""
        tool = CannedWikipedia(
            {self.SEARCH: PluginError("wikipedia", "HTTP 503")}, language="en"
        )
        with pytest.raises(PluginError):
            asyncio.run(tool.run("Eiffel Tower"))

    def test_failed_summary_skipped(self):
        """Test a page whose summary cannot be fetched is left out."""
        missing = "https://en.wikipedia.org/api/rest_v1/page/summary/Eiffel_Tower_film"
        listed = "https://en.wikipedia.org/api/rest_v1/page/summary/List_of_towers"
        tool = CannedWikipedia({
            self.SEARCH: {"pages": [
                {"key": "Eiffel_Tower_film", "title": "Eiffel Tower (film)"},
                {"key": "List_of_towers", "title": "List of towers"},
                {"key": "Eiffel_Tower", "title": "Eiffel Tower"},
            ]},
            missing: PluginError("wikipedia", "HTTP 404"),
            listed: ["not", "a", "summary"],
            self.SUMMARY: {"title": "Eiffel Tower", "extract": "A tower in Paris."},
        }, language="en", max_results=3)

        output = asyncio.run(tool.run("Eiffel Tower"))

        assert "A tower in Paris." in output.text
        assert [page["title"] for page in output.metadata["pages"]] == ["Eiffel Tower"]

    def test_language_edition(self):
        """Test the language selects the host."""
        tool = WikipediaTool(language="de")
        assert tool.search_url.startswith("https://de.wikipedia.org/")
        assert tool.summary_url("Prag/Altstadt").endswith("Prag%2FAltstadt")


class TestOpenMeteoTool:
    """Tests for the weather plugin."""

    def test_current_weather(self):
        """Test geocoding and the current conditions."""
        tool = CannedOpenMeteo({
            GEOCODING_URL: {"results": [
                {"name": "Prague", "country": "Czechia", "latitude": 50.08, "longitude": 14.42}
            ]},
            FORECAST_URL: {
                "current": {"time": "2024-05-01T12:00", "temperature_2m": 21.3, "weather_code": 2},
                "current_units": {"temperature_2m": "°C"},
            },
        })

        output = asyncio.run(tool.run("Prague, CZ"))

        assert "Prague, Czechia" in output.text
        assert "partly cloudy" in output.text
        assert "Temperature: 21.3°C" in output.text
        assert tool.requests[0][1]["name"] == "Prague"
        assert tool.requests[1][1]["latitude"] == 50.08

    def test_unknown_location(self):
        """Test an unknown place fails."""
        tool = CannedOpenMeteo({GEOCODING_URL: {}})
        with pytest.raises(PluginError, match="unknown location"):
            asyncio.run(tool.run("Atlantis"))

    def test_location_without_coordinates(self):
        """Test a geocoding hit without coordinates fails as a plugin error."""
        tool = CannedOpenMeteo({GEOCODING_URL: {"results": [{"name": "Atlantis"}]}})
        with pytest.raises(PluginError, match="no coordinates"):
            asyncio.run(tool.run("Atlantis"))
        assert len(tool.requests) == 1

    def test_weather_codes(self):
        """Test WMO code descriptions."""
        assert describe_weather_code(0) == "clear sky"
        assert describe_weather_code(42) == "weather code 42"
        assert describe_weather_code(None) == "unknown conditions"


class TestTavilySearchTool:
    """Tests for the web search plugin."""

    def test_results_formatted(self):
        """Test the answer summary comes first, then numbered results."""
        client = FakeTavilyClient({
            "answer": "Paris is the capital of France.",
            "results": [{
                "title": "Paris",
                "url": "https://www.example.com/paris",
                "content": "Paris is the capital and largest city of France.",
            }],
        })
        tool = TavilySearchTool(client=client, config=TavilySearchConfig(max_results=3))

        output = asyncio.run(tool.run("capital of France"))

        assert output.text.startswith("Summary: Paris is the capital of France.")
        assert "1. Paris (example.com)" in output.text
        assert client.queries[0][1]["max_results"] == 3

    def test_no_results(self):
        """Test an empty search fails."""
        tool = TavilySearchTool(client=FakeTavilyClient({"results": []}))
        with pytest.raises(PluginError):
            asyncio.run(tool.run("zzzz"))

    def test_not_configured(self, monkeypatch):
        """Test the plugin fails without an API key."""
        from tiered_assistant.tools import tavily_search
        monkeypatch.setattr(tavily_search.settings, "tavily_api_key", "")

        tool = TavilySearchTool()

        assert tool.client is None
        with pytest.raises(PluginError):
            asyncio.run(tool.run("anything"))


class TestCapabilities:
    """Tests for the default capability set."""

    def test_default_capabilities(self):
        """Test the escalated responder gets all three lookups."""
        names = [plugin.name for plugin in default_capabilities()]
        assert names == ["wikipedia", "open_meteo", "web_search"]

    def test_plugin_output(self):
        """Test empty output detection."""
        assert PluginOutput(text="  ").is_empty()
        assert not PluginOutput(text="data").is_empty()
