# app.py
from typing import Optional

from flask import Flask, jsonify, request

from errors import InputInvalid, NoPathFound
from models import ROUTE_INPUT_INVALID, ROUTE_NONE, Point, RouteResult, parse_zones
from route_planner import SafeRouter, build_router

NO_ROUTE_WARNING = "No safe route found. Try a different destination."
INPUT_INVALID_WARNING = "Your start or destination is inside a danger zone."


def create_app(router: Optional[SafeRouter] = None) -> Flask:
    """
    Flask app exposing the safe-routing core.

    The router (and with it the offline road graph) is built once here
    and shared read-only by every request.
    """
    app = Flask(__name__)
    app.extensions["safe_router"] = router or build_router()

    def _router() -> SafeRouter:
        return app.extensions["safe_router"]

    @app.errorhandler(InputInvalid)
    def handle_input_invalid(e):
        result = RouteResult(status=ROUTE_INPUT_INVALID, reason=e.reason_code)
        return jsonify({**result.to_dict(), "warning": INPUT_INVALID_WARNING}), 422

    @app.errorhandler(NoPathFound)
    def handle_no_path(e):
        result = RouteResult(status=ROUTE_NONE, reason=e.reason_code)
        return jsonify({**result.to_dict(), "warning": NO_ROUTE_WARNING}), 404

    @app.route("/health")
    def health():
        names = _router().strategy_names
        return jsonify({"ok": True, "offline_graph": "offline_graph" in names, "strategies": names})

    @app.route("/route", methods=["POST"])
    def route():
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            return jsonify({"ok": False, "error": "Request body must be a JSON object"}), 400
        try:
            start = Point.from_dict(data.get("start"))
            end = Point.from_dict(data.get("end"))
            zones = parse_zones(data.get("zones", []))
        except ValueError as e:
            return jsonify({"ok": False, "error": str(e)}), 400

        result = _router().route_or_raise(start, end, zones)
        return jsonify(result.to_dict())

    return app


if __name__ == "__main__":
    # Run Flask dev server
    create_app().run(host="0.0.0.0", port=5500, debug=True)
