"""
Sessions — one weather widget per chat.

A WeatherWidget wires an AutocompleteController and a WeatherSearch to a
single render port. The SessionManager hands out widgets by chat id,
creating them lazily through a render-port factory.
"""

from __future__ import annotations
import logging
from datetime import datetime, timezone
from typing import Callable, Optional

import config
from abilities.geocoding import GeoSuggestClient
from abilities.weather import WeatherClient
from autocomplete import AutocompleteController
from render import RenderPort
from search import WeatherSearch

log = logging.getLogger(__name__)


class WeatherWidget:
    def __init__(self, chat_id: int, render: RenderPort,
                 geo: GeoSuggestClient, weather: WeatherClient, **autocomplete_options):
        self.chat_id = chat_id
        self.render = render
        self.search = WeatherSearch(geo, weather, render)
        self.autocomplete = AutocompleteController(
            geo, render, on_select=self.search.fetch_weather_by_coords, **autocomplete_options,
        )
        self.last_active = datetime.now(timezone.utc)

    def on_input(self, text: str):
        self._touch()
        self.autocomplete.on_input(text)

    async def submit(self, text: str):
        """Explicit search. Any pending suggestion lookup is abandoned first."""
        self._touch()
        self.autocomplete.cancel_pending()
        await self.search.search(text)

    async def select(self, index: int) -> bool:
        """Pick the `index`th visible suggestion. Returns False if it is no longer on screen."""
        self._touch()
        suggestions = self.autocomplete.suggestions
        if not self.autocomplete.visible or not 0 <= index < len(suggestions):
            return False
        await self.autocomplete.on_candidate_selected(suggestions[index])
        return True

    async def dismiss(self):
        self._touch()
        await self.autocomplete.on_dismiss()

    def _touch(self):
        self.last_active = datetime.now(timezone.utc)

    def to_dict(self) -> dict:
        return {
            "chat_id": self.chat_id,
            "state": self.autocomplete.state.value,
            "suggestions": [c.label for c in self.autocomplete.suggestions],
            "pending_query": self.autocomplete.pending.query if self.autocomplete.pending else None,
            "last_active": self.last_active.isoformat(),
        }


class SessionManager:
    def __init__(self, render_factory: Optional[Callable[[int], RenderPort]] = None,
                 geo: Optional[GeoSuggestClient] = None,
                 weather: Optional[WeatherClient] = None, idle_timeout: Optional[int] = None,
                 **autocomplete_options):
        self.render_factory = render_factory
        self.idle_timeout = idle_timeout if idle_timeout is not None else config.SESSION_IDLE_TIMEOUT
        self.geo = geo or GeoSuggestClient()
        self.weather = weather or WeatherClient()
        self.autocomplete_options = autocomplete_options
        self.widgets: dict[int, WeatherWidget] = {}

    def set_render_factory(self, factory: Callable[[int], RenderPort]):
        """Register how a chat's render port is built. Needed before the first widget is created."""
        self.render_factory = factory

    def get(self, chat_id: int) -> WeatherWidget:
        self.prune_idle()
        widget = self.widgets.get(chat_id)
        if widget is None:
            if self.render_factory is None:
                raise RuntimeError("No render factory registered")
            widget = WeatherWidget(chat_id, self.render_factory(chat_id),
                                   self.geo, self.weather, **self.autocomplete_options)
            self.widgets[chat_id] = widget
            log.info(f"Created widget for chat {chat_id}")
        return widget

    def forget(self, chat_id: int) -> bool:
        widget = self.widgets.pop(chat_id, None)
        if widget is None:
            return False
        widget.autocomplete.cancel_pending()
        return True

    def prune_idle(self, now: Optional[datetime] = None) -> int:
        """Forget widgets idle for longer than idle_timeout seconds (0 disables). Returns how many."""
        if not self.idle_timeout:
            return 0
        now = now or datetime.now(timezone.utc)
        stale = [
            chat_id for chat_id, w in self.widgets.items()
            if (now - w.last_active).total_seconds() > self.idle_timeout
        ]
        for chat_id in stale:
            self.forget(chat_id)
        if stale:
            log.info(f"Dropped {len(stale)} idle widget(s)")
        return len(stale)

    def get_all(self) -> list[WeatherWidget]:
        return list(self.widgets.values())

    def get_status_text(self) -> str:
        """Formatted status for the /status command."""
        widgets = self.get_all()
        if not widgets:
            return "No active sessions."
        lines = [f"Sessions: {len(widgets)}\n"]
        for w in widgets:
            lines.append(f"  {w.chat_id}  {w.autocomplete.state.value:<10}  "
                         f"{len(w.autocomplete.suggestions)} suggestion(s)")
        return "\n".join(lines)
