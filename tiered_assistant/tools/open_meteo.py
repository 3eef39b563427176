"""
Open-Meteo weather lookup capability.

Resolves a place name with the Open-Meteo geocoding API and reads the
current conditions from the forecast API. No API key is required.
"""

from typing import Any, Dict, Optional

from .base import Plugin, PluginOutput
from .http import HttpPluginMixin
from ..core.errors import PluginError
from ..utils.logger import get_logger


logger = get_logger()


GEOCODING_URL = "https://geocoding-api.open-meteo.com/v1/search"
FORECAST_URL = "https://api.open-meteo.com/v1/forecast"

CURRENT_FIELDS = (
    "temperature_2m",
    "apparent_temperature",
    "relative_humidity_2m",
    "precipitation",
    "wind_speed_10m",
    "weather_code",
)

# WMO weather interpretation codes
WEATHER_CODES = {
    0: "clear sky",
    1: "mainly clear",
    2: "partly cloudy",
    3: "overcast",
    45: "fog",
    48: "depositing rime fog",
    51: "light drizzle",
    53: "moderate drizzle",
    55: "dense drizzle",
    61: "slight rain",
    63: "moderate rain",
    65: "heavy rain",
    71: "slight snow",
    73: "moderate snow",
    75: "heavy snow",
    77: "snow grains",
    80: "slight rain showers",
    81: "moderate rain showers",
    82: "violent rain showers",
    85: "slight snow showers",
    86: "heavy snow showers",
    95: "thunderstorm",
    96: "thunderstorm with slight hail",
    99: "thunderstorm with heavy hail",
}


def describe_weather_code(code: Optional[int]) -> str:
    if code is None:
        return "unknown conditions"
    return WEATHER_CODES.get(int(code), f"weather code {code}")


class OpenMeteoTool(HttpPluginMixin, Plugin):
    """Current weather for a named location."""

    name = "open_meteo"
    description = (
        "Get the current weather (temperature, humidity, wind, precipitation) "
        "for a city or place."
    )
    query_description = "Name of the city or place, e.g. 'Prague' or 'Boston, US'"

    def __init__(self, timeout: Optional[float] = None):
        self.timeout = timeout

    async def run(self, query: str) -> PluginOutput:
        logger.with_agent("ComplexAgent").info(f"Weather lookup: {query[:50]}")

        location = await self._geocode(query)
        forecast = await self.fetch_json(
            FORECAST_URL,
            params={
                "latitude": location["latitude"],
                "longitude": location["longitude"],
                "current": ",".join(CURRENT_FIELDS),
                "timezone": "auto",
            }
        )
        current = forecast.get("current") if isinstance(forecast, dict) else None
        if not current:
            raise PluginError(self.name, f"no current weather for '{query}'")

        units = forecast.get("current_units", {})
        place = ", ".join(
            part for part in (location.get("name"), location.get("country")) if part
        )
        lines = [
            f"Current weather in {place} at {current.get('time', 'now')}: "
            f"{describe_weather_code(current.get('weather_code'))}."
        ]
        for key, label in (
            ("temperature_2m", "Temperature"),
            ("apparent_temperature", "Feels like"),
            ("relative_humidity_2m", "Humidity"),
            ("precipitation", "Precipitation"),
            ("wind_speed_10m", "Wind speed"),
        ):
            if current.get(key) is not None:
                lines.append(f"{label}: {current[key]}{units.get(key, '')}")

        return PluginOutput(
            text="\n".join(lines),
            metadata={"location": location, "current": current}
        )

    async def _geocode(self, query: str) -> Dict[str, Any]:
        found = await self.fetch_json(
            GEOCODING_URL,
            params={"name": query.split(",")[0].strip(), "count": 1, "format": "json"}
        )
        results = found.get("results") if isinstance(found, dict) else None
        if not results:
            raise PluginError(self.name, f"unknown location '{query}'")
        location = results[0]
        if not isinstance(location, dict) or location.get("latitude") is None \
                or location.get("longitude") is None:
            raise PluginError(self.name, f"no coordinates for '{query}'")
        return location
