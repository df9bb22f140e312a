"""
Render port — everything the widget core shows goes through here.

The core never touches presentation state directly. Front-ends implement
RenderPort (see telegram_port.py); RecordingRenderPort keeps the state in
memory for the dashboard API and for tests.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Optional

from models import PlaceCandidate, WeatherView


class RenderPort(ABC):
    @abstractmethod
    async def show_suggestions(self, candidates: list[PlaceCandidate]):
        """Replace the suggestion panel with `candidates` (shown as `candidate.label`) and reveal it."""

    @abstractmethod
    async def hide_suggestions(self):
        ...

    @abstractmethod
    async def set_loading(self, loading: bool):
        """Show the loading indicator and disable search while True."""

    @abstractmethod
    async def show_error(self, message: Optional[str]):
        """Show the error banner, or hide it when `message` is None."""

    @abstractmethod
    async def show_weather(self, view: WeatherView):
        ...

    @abstractmethod
    async def hide_weather(self):
        ...


class RecordingRenderPort(RenderPort):
    def __init__(self):
        self.suggestions: list[PlaceCandidate] = []
        self.suggestions_visible = False
        self.loading = False
        self.error: Optional[str] = None
        self.weather: Optional[WeatherView] = None
        self.events: list[tuple] = []

    async def show_suggestions(self, candidates):
        self.suggestions = list(candidates)
        self.suggestions_visible = True
        self.events.append(("show_suggestions", [c.label for c in candidates]))

    async def hide_suggestions(self):
        self.suggestions_visible = False
        self.events.append(("hide_suggestions",))

    async def set_loading(self, loading):
        self.loading = loading
        self.events.append(("set_loading", loading))

    async def show_error(self, message):
        self.error = message
        self.events.append(("show_error", message))

    async def show_weather(self, view):
        self.weather = view
        self.events.append(("show_weather", view.city_label))

    async def hide_weather(self):
        self.weather = None
        self.events.append(("hide_weather",))

    @property
    def visible_labels(self) -> list[str]:
        if not self.suggestions_visible:
            return []
        return [c.label for c in self.suggestions]

    def to_dict(self) -> dict:
        return {
            "suggestions": self.visible_labels,
            "loading": self.loading,
            "error": self.error,
            "weather": self.weather.to_dict() if self.weather else None,
        }
