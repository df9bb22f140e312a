"""
Geocoding ability — free, no API key required.

Uses the Open-Meteo geocoding API. Suggestion queries accept a
CancellationToken so a superseded lookup can be abandoned mid-flight.
"""

from __future__ import annotations
import asyncio
import logging
from typing import Optional

import requests

import config
from abilities.http import drain, get_json
from errors import Cancelled, NotFound, TransportError
from models import PlaceCandidate

log = logging.getLogger(__name__)


class CancellationToken:
    """One-shot cancel signal shared between a caller and an in-flight lookup."""

    def __init__(self):
        self._event = asyncio.Event()

    def cancel(self):
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    async def wait(self):
        await self._event.wait()


class GeoSuggestClient:
    def __init__(self, session: Optional[requests.Session] = None, url: str = "",
                 language: str = "", timeout: Optional[float] = None):
        self.session = session or requests.Session()
        self.url = url or config.GEOCODING_URL
        self.language = language or config.LANGUAGE
        self.timeout = timeout if timeout is not None else config.HTTP_TIMEOUT

    async def suggest(self, query: str, max_results: int = 5,
                      token: Optional[CancellationToken] = None) -> list[PlaceCandidate]:
        """
        Look up places matching `query`, in provider relevance order.

        Raises Cancelled if `token` fires first, ServiceUnavailable on a
        non-success status, TransportError on any other network failure.
        An empty result set is returned as [].
        """
        token = token or CancellationToken()
        if token.cancelled:
            raise Cancelled()

        params = {
            "name": query,
            "count": max_results,
            "language": self.language,
            "format": "json",
        }
        fetch = asyncio.ensure_future(asyncio.to_thread(
            get_json, self.session, self.url, params, self.timeout,
            "Geocoding service unavailable", token,
        ))
        waiter = asyncio.ensure_future(token.wait())
        try:
            await asyncio.wait({fetch, waiter}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            waiter.cancel()

        if token.cancelled:
            # the worker thread finishes on its own; its outcome is dropped
            fetch.add_done_callback(drain)
            log.debug(f"Suggestion lookup cancelled: {query!r}")
            raise Cancelled()

        payload = fetch.result()
        try:
            return [PlaceCandidate.from_result(r) for r in payload.get("results") or []]
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            log.warning(f"Malformed geocoding payload for {query!r}: {e!r}")
            raise TransportError("Received an unreadable response") from e

    async def locate(self, city: str) -> PlaceCandidate:
        """Resolve a city name to its best match, or raise NotFound."""
        results = await self.suggest(city, max_results=1)
        if not results:
            raise NotFound()
        return results[0]
