"""
Weather ability — free, no API key required.

Uses the Open-Meteo forecast API for current conditions.
"""

import asyncio
import logging
from typing import Optional

import requests

import config
from abilities.http import get_json
from errors import TransportError
from models import WeatherSnapshot

log = logging.getLogger(__name__)

CURRENT_FIELDS = (
    "temperature_2m",
    "relative_humidity_2m",
    "apparent_temperature",
    "is_day",
    "precipitation",
    "weather_code",
    "wind_speed_10m",
)

# WMO weather interpretation codes
WEATHER_CODES = {
    0: "Clear sky",
    1: "Mainly clear",
    2: "Partly cloudy",
    3: "Overcast",
    45: "Fog",
    48: "Depositing rime fog",
    51: "Light drizzle",
    53: "Moderate drizzle",
    55: "Dense drizzle",
    61: "Slight rain",
    63: "Moderate rain",
    65: "Heavy rain",
    71: "Slight snow fall",
    73: "Moderate snow fall",
    75: "Heavy snow fall",
    77: "Snow grains",
    80: "Slight rain showers",
    81: "Moderate rain showers",
    82: "Violent rain showers",
    85: "Slight snow showers",
    86: "Heavy snow showers",
    95: "Thunderstorm",
    96: "Thunderstorm with slight hail",
    99: "Thunderstorm with heavy hail",
}


def describe_weather(code: int) -> str:
    return WEATHER_CODES.get(code, "Unknown")


class WeatherClient:
    def __init__(self, session: Optional[requests.Session] = None, url: str = "",
                 timeout: Optional[float] = None):
        self.session = session or requests.Session()
        self.url = url or config.FORECAST_URL
        self.timeout = timeout if timeout is not None else config.HTTP_TIMEOUT

    async def current(self, latitude: float, longitude: float) -> WeatherSnapshot:
        """Current conditions at a coordinate, in the location's own timezone."""
        params = {
            "latitude": latitude,
            "longitude": longitude,
            "current": ",".join(CURRENT_FIELDS),
            "timezone": "auto",
        }
        payload = await asyncio.to_thread(
            get_json, self.session, self.url, params, self.timeout,
            "Weather service unavailable",
        )
        try:
            return WeatherSnapshot.from_current(payload["current"])
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            log.warning(f"Malformed forecast payload for ({latitude}, {longitude}): {e!r}")
            raise TransportError("Received an unreadable response") from e
