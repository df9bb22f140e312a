"""
Blocking JSON GET shared by the Open-Meteo clients.

Maps transport outcomes onto the lookup error kinds. Never retries.
"""

import logging
from typing import Optional

import requests

from errors import Cancelled, ServiceUnavailable, TransportError

log = logging.getLogger(__name__)


def get_json(session: requests.Session, url: str, params: dict, timeout: float,
             unavailable_message: str, token=None) -> dict:
    """
    GET `url` and decode the JSON body.

    When `token` is given it is checked once the response headers are in;
    a cancelled request is closed without reading the body.
    """
    try:
        resp = session.get(url, params=params, timeout=timeout, stream=True)
    except requests.RequestException as e:
        log.debug(f"GET {url} failed: {e}")
        raise TransportError(f"Network error: {e.__class__.__name__}") from e

    try:
        if token is not None and token.cancelled:
            raise Cancelled()
        if not resp.ok:
            log.debug(f"GET {url} returned HTTP {resp.status_code}")
            raise ServiceUnavailable(unavailable_message)
        try:
            return resp.json()
        except (ValueError, requests.RequestException) as e:
            raise TransportError("Received an unreadable response") from e
    finally:
        resp.close()


def drain(future) -> Optional[BaseException]:
    """Done-callback that retrieves an abandoned future's outcome so it is not reported as unhandled."""
    if future.cancelled():
        return None
    return future.exception()
