"""
Autocomplete — turns a stream of raw input values into place suggestions.

Keystrokes are debounced; when the input goes quiet the trimmed text is
looked up. At most one suggestion request is outstanding at a time: the
pending request is always cancelled before its slot is replaced or cleared,
and a cancelled request's outcome is dropped instead of rendered. Renders
therefore follow the order requests were issued in, whatever order the
network answers in.

States:
  IDLE        nothing pending, no list shown
  DEBOUNCING  input long enough to look up, waiting for the quiet window
  FETCHING    a suggestion request is in flight
  DISPLAYING  a suggestion list is shown
"""

from __future__ import annotations
import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import AsyncIterable, Awaitable, Callable, Optional

import config
from abilities.geocoding import CancellationToken, GeoSuggestClient
from errors import Cancelled
from models import PlaceCandidate
from render import RenderPort

log = logging.getLogger(__name__)

SelectSink = Callable[[float, float, str, Optional[str]], Awaitable[None]]
DiagnosticSink = Callable[[str, Exception], None]


class State(str, Enum):
    IDLE = "idle"
    DEBOUNCING = "debouncing"
    FETCHING = "fetching"
    DISPLAYING = "displaying"


@dataclass
class PendingRequest:
    query: str
    token: CancellationToken = field(default_factory=CancellationToken)
    task: Optional[asyncio.Task] = None

    def cancel(self):
        self.token.cancel()


def log_failure(query: str, error: Exception):
    log.warning(f"Error fetching suggestions for {query!r}: {error}")


class AutocompleteController:
    def __init__(
        self,
        client: GeoSuggestClient,
        render: RenderPort,
        on_select: Optional[SelectSink] = None,
        *,
        debounce_ms: Optional[int] = None,
        min_chars: Optional[int] = None,
        max_results: Optional[int] = None,
        hide_on_error: Optional[bool] = None,
        diagnostics: DiagnosticSink = log_failure,
    ):
        self.client = client
        self.render = render
        self.on_select = on_select
        self.debounce = (debounce_ms if debounce_ms is not None else config.SUGGEST_DEBOUNCE_MS) / 1000
        self.min_chars = min_chars if min_chars is not None else config.SUGGEST_MIN_CHARS
        self.max_results = max_results if max_results is not None else config.SUGGEST_MAX_RESULTS
        self.hide_on_error = hide_on_error if hide_on_error is not None else config.SUGGEST_HIDE_ON_ERROR
        self.diagnostics = diagnostics

        self.state = State.IDLE
        self.suggestions: list[PlaceCandidate] = []
        self.visible = False
        self._pending: Optional[PendingRequest] = None
        self._debounce_task: Optional[asyncio.Task] = None
        self._tasks: set[asyncio.Task] = set()

    @property
    def pending(self) -> Optional[PendingRequest]:
        return self._pending

    # ── Input ───────────────────────────────────────────────────

    def on_input(self, raw_text: str):
        """Called for every keystroke. Restarts the debounce window; must run inside the event loop."""
        if self._debounce_task:
            self._debounce_task.cancel()
        self._debounce_task = self._spawn(self._debounce(raw_text))
        if len(raw_text.strip()) >= self.min_chars:
            self.state = State.DEBOUNCING
        elif self.state is State.DEBOUNCING:
            # the timer still runs so the list is hidden once the window elapses
            self.state = State.DISPLAYING if self.visible else State.IDLE

    async def run(self, events: AsyncIterable[str]):
        """Feed every value of an input stream through on_input."""
        async for raw_text in events:
            self.on_input(raw_text)

    async def on_candidate_selected(self, candidate: PlaceCandidate):
        self.cancel_pending()
        await self._hide()
        self.state = State.IDLE
        if self.on_select:
            await self.on_select(candidate.latitude, candidate.longitude,
                                 candidate.name, candidate.country)

    async def on_dismiss(self):
        """Hide the list. A pending request is left running and may still be shown."""
        await self._hide()
        if self.state is State.DISPLAYING:
            self.state = State.IDLE

    def cancel_pending(self):
        """Drop the debounce window and the in-flight request, if any."""
        if self._debounce_task:
            self._debounce_task.cancel()
            self._debounce_task = None
        self._replace_pending(None)
        if self.state in (State.DEBOUNCING, State.FETCHING):
            self.state = State.DISPLAYING if self.visible else State.IDLE

    async def settle(self):
        """Wait until no debounce window or request task is outstanding."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    # ── Internals ───────────────────────────────────────────────

    def _spawn(self, coro) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def _replace_pending(self, request: Optional[PendingRequest]):
        if self._pending is not None:
            self._pending.cancel()
        self._pending = request

    async def _debounce(self, raw_text: str):
        await asyncio.sleep(self.debounce)
        self._debounce_task = None
        self._fire(raw_text)

    def _fire(self, raw_text: str):
        query = raw_text.strip()
        if len(query) < self.min_chars:
            self._replace_pending(None)
            self.state = State.IDLE
            self._spawn(self._hide())
            return

        request = PendingRequest(query)
        self._replace_pending(request)
        self.state = State.FETCHING
        request.task = self._spawn(self._fetch(request))

    async def _fetch(self, request: PendingRequest):
        try:
            candidates = await self.client.suggest(request.query, self.max_results, request.token)
        except Cancelled:
            if request is self._pending:
                self._pending = None
                if self.state is State.FETCHING:
                    self.state = State.DISPLAYING if self.visible else State.IDLE
            return
        except Exception as e:
            if request.token.cancelled:
                return
            self._pending = None
            self.diagnostics(request.query, e)
            if self.hide_on_error or not self.visible:
                await self._settle_hidden()
            elif self.state is State.FETCHING:
                self.state = State.DISPLAYING
            return

        if request.token.cancelled:
            return
        self._pending = None

        if not candidates:
            await self._settle_hidden()
            return

        self.suggestions = list(candidates)
        self.visible = True
        if self.state is State.FETCHING:
            self.state = State.DISPLAYING
        await self.render.show_suggestions(self.suggestions)

    async def _settle_hidden(self):
        if self.state is State.FETCHING:
            self.state = State.IDLE
        await self._hide()

    async def _hide(self):
        self.suggestions = []
        self.visible = False
        await self.render.hide_suggestions()
