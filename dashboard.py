"""
Status Dashboard — Flask web UI next to the bot.

Provides:
  - Session overview with each chat's autocomplete state
  - REST API for suggestions and one-shot weather searches

Runs in a background thread alongside the Telegram bot.
"""

import asyncio

from flask import Flask, render_template, request, jsonify

import config
from errors import LookupFailed
from render import RecordingRenderPort
from search import WeatherSearch


_sessions = None  # set via create_app()


def _run(coro):
    loop = asyncio.new_event_loop()
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


def create_app(sessions):
    global _sessions
    _sessions = sessions

    app = Flask(__name__)

    # ── Pages ───────────────────────────────────────────────

    @app.route("/")
    def index():
        widgets = _sessions.get_all()
        stats = {
            "total": len(widgets),
            "displaying": sum(1 for w in widgets if w.autocomplete.state.value == "displaying"),
            "fetching": sum(1 for w in widgets if w.autocomplete.state.value == "fetching"),
        }
        return render_template(
            "dashboard.html",
            widgets=[w.to_dict() for w in widgets],
            stats=stats,
            geocoding_url=config.GEOCODING_URL,
            forecast_url=config.FORECAST_URL,
        )

    # ── API endpoints ───────────────────────────────────────

    @app.route("/api/sessions", methods=["GET"])
    def api_sessions():
        return jsonify([w.to_dict() for w in _sessions.get_all()])

    @app.route("/api/suggest", methods=["GET"])
    def api_suggest():
        query = request.args.get("q", "").strip()
        if len(query) < config.SUGGEST_MIN_CHARS:
            return jsonify([])
        try:
            candidates = _run(_sessions.geo.suggest(query, config.SUGGEST_MAX_RESULTS))
        except LookupFailed as e:
            return jsonify({"error": e.message}), 502
        return jsonify([c.to_dict() for c in candidates])

    @app.route("/api/weather", methods=["GET"])
    def api_weather():
        city = request.args.get("city", "").strip()
        if not city:
            return jsonify({"error": "city is required"}), 400
        port = RecordingRenderPort()
        _run(WeatherSearch(_sessions.geo, _sessions.weather, port).search(city))
        return jsonify(port.to_dict())

    return app
