"""
Weather Dashboard — Flask web UI for city lookups.

Provides:
  - Search page: city box, °C/°F toggle, current conditions, forecast cards
  - Startup restore: with no query, the last searched city is shown
  - REST API for programmatic access

Runs in a background thread alongside the Telegram bot, or standalone:
  python dashboard.py
"""

import asyncio
import logging

from flask import Flask, render_template, request, jsonify

from config import DASHBOARD_SECRET
from models import DisplayUnit
from render import current_panel, forecast_cards

_orchestrator = None  # set via create_app()

WEB_SESSION = "web"  # the page keeps its own unit, apart from any Telegram chat


def _run(coro):
    """Drive an orchestrator coroutine from a sync Flask view."""
    loop = asyncio.new_event_loop()
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


def _parse_unit(value):
    try:
        return DisplayUnit.parse(value, default=_orchestrator.session(WEB_SESSION).unit)
    except ValueError:
        return None


def create_app(orchestrator):
    global _orchestrator
    _orchestrator = orchestrator

    app = Flask(__name__)
    app.secret_key = DASHBOARD_SECRET

    # ── Pages ───────────────────────────────────────────────

    @app.route("/")
    def index():
        # Unchecked checkbox sends nothing, so no "unit" means Celsius here
        try:
            unit = DisplayUnit.parse(request.args.get("unit"))
        except ValueError:
            return "Unknown unit", 400
        _orchestrator.session(WEB_SESSION).unit = unit

        query = request.args.get("q", "").strip()
        if query:
            result = _run(_orchestrator.search(query, WEB_SESSION))
        else:
            result = _run(_orchestrator.restore(WEB_SESSION))
            query = result.query if result else ""

        current, cards = None, []
        if result is not None and result.ok:
            current = current_panel(result.label, result.current, unit)
            cards = forecast_cards(result.forecast, unit)
        return render_template(
            "weather.html",
            query=query,
            unit=unit,
            result=result,
            current=current,
            cards=cards,
            searches=_orchestrator.persistence.get_searches(limit=10),
        )

    # ── API endpoints ───────────────────────────────────────

    @app.route("/api/weather", methods=["GET"])
    def api_weather():
        query = request.args.get("q", "").strip()
        if not query:
            return jsonify({"error": "q is required"}), 400
        unit = _parse_unit(request.args.get("unit"))
        if unit is None:
            return jsonify({"error": "unit must be 'c' or 'f'"}), 400
        _orchestrator.session(WEB_SESSION).unit = unit
        result = _run(_orchestrator.search(query, WEB_SESSION))
        if result is None:
            return jsonify({"status": "superseded"}), 409
        return jsonify(_result_payload(result, unit))

    @app.route("/api/unit", methods=["POST"])
    def api_set_unit():
        data = request.get_json(silent=True) or {}
        try:
            unit = DisplayUnit.parse(data.get("unit"))
        except ValueError:
            return jsonify({"error": "unit must be 'c' or 'f'"}), 400
        if not _orchestrator.persistence.get_last_query():
            _orchestrator.session(WEB_SESSION).unit = unit
            return jsonify({"status": "no_last_query", "unit": unit.value})
        result = _run(_orchestrator.set_unit(unit, WEB_SESSION))
        if result is None:
            return jsonify({"status": "superseded", "unit": unit.value}), 409
        return jsonify(_result_payload(result, unit))

    @app.route("/api/last", methods=["GET"])
    def api_last():
        return jsonify({"query": _orchestrator.persistence.get_last_query()})

    @app.route("/api/searches", methods=["GET"])
    def api_searches():
        limit = request.args.get("limit", 20, type=int)
        return jsonify([s.to_dict() for s in _orchestrator.persistence.get_searches(limit=limit)])

    return app


def _result_payload(result, unit: DisplayUnit) -> dict:
    payload = result.to_dict()
    payload["unit"] = unit.value
    if result.ok:
        payload["display"] = {
            "current": current_panel(result.label, result.current, unit),
            "forecast": forecast_cards(result.forecast, unit),
        }
    return payload


if __name__ == "__main__":
    from config import DASHBOARD_HOST, DASHBOARD_PORT
    from orchestrator import Orchestrator

    logging.basicConfig(
        format="%(asctime)s [%(name)s] %(levelname)s %(message)s",
        level=logging.INFO,
    )
    create_app(Orchestrator()).run(host=DASHBOARD_HOST, port=DASHBOARD_PORT)
