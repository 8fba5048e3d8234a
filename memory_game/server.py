# memory_game/server.py
from __future__ import annotations
from flask import Flask, request, jsonify

from .engine import GameEngine

# One engine per app: a single local game for a single player.


def create_app(engine: GameEngine) -> Flask:
    app = Flask(__name__)

    def bad_request(message: str):
        return jsonify({"status": "error", "message": message}), 400

    def json_field(key: str):
        data = request.get_json(silent=True)
        return data.get(key) if isinstance(data, dict) else None

    @app.post("/new")
    def api_new():
        engine.new_game()
        return jsonify({"status": "ok", "state": engine.state()})

    @app.post("/flip")
    def api_flip():
        card = json_field("card")
        if isinstance(card, bool) or not isinstance(card, int):
            return bad_request("card must be an integer")
        result = engine.attempt_flip(card)
        result["state"] = engine.state()
        return jsonify(result)

    @app.get("/state")
    def api_state():
        return jsonify({"status": "ok", "state": engine.state()})

    @app.put("/player")
    def api_player():
        name = json_field("name")
        if not isinstance(name, str):
            return bad_request("name must be a string")
        engine.player_name = name
        return jsonify({"status": "ok", "player_name": engine.player_name})

    @app.get("/scores/top")
    def api_top_scores():
        scores = engine.request_top_ten()
        return jsonify({"status": "ok", "scores": [s.to_dict() for s in scores]})

    @app.get("/scores/player/<name>")
    def api_player_scores(name: str):
        scores = engine.stats_for_player(name)
        return jsonify({"status": "ok", "scores": [s.to_dict() for s in scores]})

    return app
