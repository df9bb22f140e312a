"""
Primary search — explicit city lookup followed by a weather fetch.

Unlike autocomplete, failures here are shown to the user, and the loading
state is always cleared on the way out.
"""

from __future__ import annotations
import logging
from datetime import date
from typing import Callable, Optional

from abilities.geocoding import GeoSuggestClient
from abilities.weather import WeatherClient, describe_weather
from errors import LookupFailed
from models import WeatherView
from render import RenderPort

log = logging.getLogger(__name__)


class WeatherSearch:
    def __init__(self, geo: GeoSuggestClient, weather: WeatherClient, render: RenderPort,
                 today: Callable[[], date] = date.today):
        self.geo = geo
        self.weather = weather
        self.render = render
        self.today = today

    async def search(self, raw_text: str):
        """Geocode the typed city (best match only) and show its weather."""
        city = raw_text.strip()
        if not city:
            return

        await self.render.hide_suggestions()
        await self._begin()
        try:
            place = await self.geo.locate(city)
            log.info(f"Resolved {city!r} to {place.label} ({place.latitude}, {place.longitude})")
            await self.fetch_weather_by_coords(place.latitude, place.longitude,
                                               place.name, place.country)
        except LookupFailed as e:
            log.info(f"Search for {city!r} failed: {e}")
            await self.render.show_error(e.message)
        finally:
            await self.render.set_loading(False)

    async def fetch_weather_by_coords(self, latitude: float, longitude: float,
                                      name: str, country: Optional[str] = None):
        await self._begin()
        try:
            snapshot = await self.weather.current(latitude, longitude)
            view = WeatherView.build(
                snapshot, name, country,
                description=describe_weather(snapshot.weather_code),
                today=self.today(),
            )
            await self.render.show_weather(view)
        except LookupFailed as e:
            log.info(f"Weather fetch for {name!r} failed: {e}")
            await self.render.show_error(e.message)
        finally:
            await self.render.set_loading(False)

    async def _begin(self):
        await self.render.show_error(None)
        await self.render.set_loading(True)
        await self.render.hide_weather()
