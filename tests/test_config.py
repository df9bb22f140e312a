import importlib

import config


def teardown_function(function):
    importlib.reload(config)


def test_defaults(monkeypatch):
    for name in ["SUGGEST_DEBOUNCE_MS", "SUGGEST_MIN_CHARS", "SUGGEST_MAX_RESULTS",
                 "SUGGEST_HIDE_ON_ERROR", "LANGUAGE", "GEOCODING_URL", "FORECAST_URL"]:
        monkeypatch.delenv(name, raising=False)
    importlib.reload(config)

    assert config.SUGGEST_DEBOUNCE_MS == 150
    assert config.SUGGEST_MIN_CHARS == 2
    assert config.SUGGEST_MAX_RESULTS == 5
    assert config.SUGGEST_HIDE_ON_ERROR is False
    assert config.LANGUAGE == "en"
    assert config.GEOCODING_URL == "https://geocoding-api.open-meteo.com/v1/search"
    assert config.FORECAST_URL == "https://api.open-meteo.com/v1/forecast"


def test_reads_env(monkeypatch):
    monkeypatch.setenv("SUGGEST_DEBOUNCE_MS", "300")
    monkeypatch.setenv("SUGGEST_HIDE_ON_ERROR", "yes")
    monkeypatch.setenv("LANGUAGE", "de")
    monkeypatch.setenv("HTTP_TIMEOUT", "2.5")
    importlib.reload(config)

    assert config.SUGGEST_DEBOUNCE_MS == 300
    assert config.SUGGEST_HIDE_ON_ERROR is True
    assert config.LANGUAGE == "de"
    assert config.HTTP_TIMEOUT == 2.5


def test_controller_picks_up_config(monkeypatch):
    monkeypatch.setenv("SUGGEST_DEBOUNCE_MS", "40")
    monkeypatch.setenv("SUGGEST_MIN_CHARS", "3")
    importlib.reload(config)

    from autocomplete import AutocompleteController
    from render import RecordingRenderPort

    controller = AutocompleteController(None, RecordingRenderPort())
    assert controller.debounce == 0.04
    assert controller.min_chars == 3
