import asyncio
import threading

import pytest
import requests

from abilities.geocoding import CancellationToken, GeoSuggestClient
from errors import Cancelled, NotFound, ServiceUnavailable, TransportError

PARIS_RECORD = {
    "id": 2988507,
    "name": "Paris",
    "latitude": 48.85341,
    "longitude": 2.3488,
    "country": "France",
    "admin1": "Île-de-France",
}
PARIS_TX_RECORD = {
    "name": "Paris",
    "latitude": 33.66094,
    "longitude": -95.55551,
    "country": "United States",
    "admin1": "Texas",
}


class DummyResponse:
    def __init__(self, status_code=200, payload=None, body_error=None):
        self.status_code = status_code
        self._payload = payload if payload is not None else {}
        self._body_error = body_error
        self.closed = False
        self.read = False

    @property
    def ok(self):
        return self.status_code < 400

    def json(self):
        self.read = True
        if self._body_error:
            raise self._body_error
        return self._payload

    def close(self):
        self.closed = True


class DummySession:
    def __init__(self, response=None, error=None, gate=None):
        self.response = response
        self.error = error
        self.gate = gate
        self.calls = []

    def get(self, url, params=None, timeout=None, stream=False):
        self.calls.append((url, params, timeout))
        if self.gate is not None:
            self.gate.wait(5)
        if self.error:
            raise self.error
        return self.response


def make_client(session):
    return GeoSuggestClient(session=session, url="https://geo.test/v1/search",
                            language="en", timeout=10)


def test_suggest_parses_candidates_in_order():
    session = DummySession(DummyResponse(payload={"results": [PARIS_RECORD, PARIS_TX_RECORD]}))
    candidates = asyncio.run(make_client(session).suggest("Paris", 5))

    assert [c.label for c in candidates] == [
        "Paris, Île-de-France, France",
        "Paris, Texas, United States",
    ]
    assert candidates[1].latitude == 33.66094
    url, params, timeout = session.calls[0]
    assert url == "https://geo.test/v1/search"
    assert params == {"name": "Paris", "count": 5, "language": "en", "format": "json"}
    assert timeout == 10
    assert session.response.closed


def test_suggest_without_results_returns_empty_list():
    session = DummySession(DummyResponse(payload={"generationtime_ms": 0.5}))
    assert asyncio.run(make_client(session).suggest("Xqzv", 5)) == []


def test_suggest_label_omits_missing_parts():
    record = {"name": "Monaco", "latitude": 43.73, "longitude": 7.42}
    session = DummySession(DummyResponse(payload={"results": [record]}))
    candidates = asyncio.run(make_client(session).suggest("Monaco", 5))
    assert candidates[0].label == "Monaco"
    assert candidates[0].country is None


def test_suggest_non_success_status_is_service_unavailable():
    session = DummySession(DummyResponse(status_code=503))
    with pytest.raises(ServiceUnavailable) as exc_info:
        asyncio.run(make_client(session).suggest("Paris", 5))
    assert exc_info.value.message == "Geocoding service unavailable"
    assert not session.response.read


@pytest.mark.parametrize("error", [
    requests.ConnectionError("reset by peer"),
    requests.Timeout("read timed out"),
])
def test_suggest_network_failure_is_transport_error(error):
    session = DummySession(error=error)
    with pytest.raises(TransportError):
        asyncio.run(make_client(session).suggest("Paris", 5))


def test_suggest_unreadable_body_is_transport_error():
    session = DummySession(DummyResponse(body_error=ValueError("Expecting value")))
    with pytest.raises(TransportError):
        asyncio.run(make_client(session).suggest("Paris", 5))


def test_suggest_with_cancelled_token_skips_request():
    session = DummySession(DummyResponse(payload={"results": [PARIS_RECORD]}))

    async def scenario():
        token = CancellationToken()
        token.cancel()
        await make_client(session).suggest("Paris", 5, token)

    with pytest.raises(Cancelled):
        asyncio.run(scenario())
    assert session.calls == []


def test_suggest_cancelled_in_flight_raises_and_closes_response():
    gate = threading.Event()
    session = DummySession(DummyResponse(payload={"results": [PARIS_RECORD]}), gate=gate)
    outcome = {}

    async def scenario():
        token = CancellationToken()
        task = asyncio.ensure_future(make_client(session).suggest("Paris", 5, token))
        await asyncio.sleep(0.05)
        token.cancel()
        try:
            await task
        except Cancelled:
            outcome["cancelled"] = True
        gate.set()
        for _ in range(50):
            if session.response.closed:
                break
            await asyncio.sleep(0.01)

    asyncio.run(scenario())
    assert outcome == {"cancelled": True}
    assert session.response.closed
    assert not session.response.read


def test_suggest_does_not_retry():
    session = DummySession(DummyResponse(status_code=500))
    with pytest.raises(ServiceUnavailable):
        asyncio.run(make_client(session).suggest("Paris", 5))
    assert len(session.calls) == 1


def test_locate_returns_best_match():
    session = DummySession(DummyResponse(payload={"results": [PARIS_RECORD]}))
    place = asyncio.run(make_client(session).locate("Paris"))
    assert place.name == "Paris"
    assert session.calls[0][1]["count"] == 1


def test_locate_without_results_is_not_found():
    session = DummySession(DummyResponse(payload={}))
    with pytest.raises(NotFound) as exc_info:
        asyncio.run(make_client(session).locate("Xqzv"))
    assert exc_info.value.message == "City not found. Please try again."


@pytest.mark.parametrize("payload", [
    {"results": [{"name": "Paris"}]},
    {"results": [{"name": "Paris", "latitude": "north", "longitude": 2.3}]},
    {"results": "Paris"},
    ["Paris"],
])
def test_suggest_malformed_payload_is_transport_error(payload):
    session = DummySession(DummyResponse(payload=payload))
    with pytest.raises(TransportError) as exc_info:
        asyncio.run(make_client(session).suggest("Paris", 5))
    assert exc_info.value.message == "Received an unreadable response"
