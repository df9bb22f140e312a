import asyncio
from datetime import date

from errors import ServiceUnavailable, TransportError
from fakes import PARIS, StaticGeo, StaticWeather
from models import WeatherSnapshot
from render import RecordingRenderPort
from search import WeatherSearch


def make_search(geo=None, weather=None):
    render = RecordingRenderPort()
    search = WeatherSearch(
        geo or StaticGeo({"paris": [PARIS]}),
        weather or StaticWeather(),
        render,
        today=lambda: date(2026, 10, 19),
    )
    return search, render


def test_search_renders_weather():
    search, render = make_search()
    asyncio.run(search.search("  Paris "))

    assert render.error is None
    assert render.loading is False
    assert render.weather.city_label == "Paris, France"
    assert render.weather.temperature == "21"
    assert render.weather.description == "Thunderstorm"
    assert render.weather.date_label == "Monday, Oct 19"
    assert search.geo.calls == [("Paris", 1)]
    assert search.weather.calls == [(PARIS.latitude, PARIS.longitude)]


def test_search_hides_suggestions_and_shows_loading_first():
    search, render = make_search()
    asyncio.run(search.search("Paris"))

    assert render.events[:4] == [
        ("hide_suggestions",),
        ("show_error", None),
        ("set_loading", True),
        ("hide_weather",),
    ]
    assert render.events[-1] == ("set_loading", False)


def test_search_city_not_found():
    search, render = make_search(geo=StaticGeo({}))
    asyncio.run(search.search("Xqzv"))

    assert render.error == "City not found. Please try again."
    assert render.loading is False
    assert render.weather is None
    assert search.weather.calls == []


def test_search_geocoding_unavailable():
    geo = StaticGeo(error=ServiceUnavailable("Geocoding service unavailable"))
    search, render = make_search(geo=geo)
    asyncio.run(search.search("Paris"))

    assert render.error == "Geocoding service unavailable"
    assert render.loading is False


def test_search_weather_transport_error():
    weather = StaticWeather(error=TransportError("Network error: ConnectionError"))
    search, render = make_search(weather=weather)
    asyncio.run(search.search("Paris"))

    assert render.error == "Network error: ConnectionError"
    assert render.loading is False
    assert render.weather is None


def test_blank_search_does_nothing():
    search, render = make_search()
    asyncio.run(search.search("   "))
    assert render.events == []
    assert search.geo.calls == []


def test_fetch_by_coords_unknown_code():
    weather = StaticWeather(WeatherSnapshot(9.6, 7.5, 90, 30.2, 102))
    search, render = make_search(weather=weather)
    asyncio.run(search.fetch_weather_by_coords(51.5, -0.12, "London", "United Kingdom"))

    assert render.weather.description == "Unknown"
    assert render.weather.temperature == "10"
    assert render.loading is False


def test_search_with_malformed_place_record_shows_error():
    from abilities.geocoding import GeoSuggestClient
    from test_geocoding import DummyResponse, DummySession

    session = DummySession(DummyResponse(payload={"results": [{"name": "Paris"}]}))
    geo = GeoSuggestClient(session=session, url="https://geo.test/v1/search", language="en", timeout=10)
    search, render = make_search(geo=geo)
    asyncio.run(search.search("Paris"))

    assert render.error == "Received an unreadable response"
    assert render.loading is False
    assert render.weather is None


def test_search_with_malformed_forecast_shows_error():
    from abilities.weather import WeatherClient
    from test_geocoding import DummyResponse, DummySession

    session = DummySession(DummyResponse(payload={"current": {"temperature_2m": 21.4}}))
    weather = WeatherClient(session=session, url="https://forecast.test/v1/forecast", timeout=10)
    search, render = make_search(weather=weather)
    asyncio.run(search.search("Paris"))

    assert render.error == "Received an unreadable response"
    assert render.loading is False
    assert render.weather is None


def test_fetch_by_coords_with_list_payload_shows_error():
    from abilities.weather import WeatherClient
    from test_geocoding import DummyResponse, DummySession

    session = DummySession(DummyResponse(payload=[1, 2, 3]))
    weather = WeatherClient(session=session, url="https://forecast.test/v1/forecast", timeout=10)
    search, render = make_search(weather=weather)
    asyncio.run(search.fetch_weather_by_coords(48.85, 2.35, "Paris", "France"))

    assert render.error == "Received an unreadable response"
    assert render.loading is False
