"""Flask API application hosting one shared engine and per-actor roll states."""

import logging
import math
from typing import Any, Optional

from flask import Flask, jsonify, request
from werkzeug.exceptions import HTTPException

from rarityroll.api.actor_registry import ActorRegistry, ActorSession
from rarityroll.api.host_config import HostConfig
from rarityroll.config import DEFAULT_LOG_LEVEL
from rarityroll.engine.rarity_engine import RarityEngine

logging.basicConfig(level=DEFAULT_LOG_LEVEL, format='[%(name)-19s - %(levelname)5s] %(message)s')

app = Flask("flask.rarityroll")


@app.before_request
def log_request_info():
    app.logger.info('Access to: %s from %s (%s)',
        request.url,
        request.headers.get('X-Forwarded-For', request.remote_addr),
        request.headers.get('User-Agent'))


@app.errorhandler(HTTPException)
def handle_http_exception(e: HTTPException):
    """Return JSON instead of HTML for HTTP errors in API routes."""
    if request.path.startswith("/api/"):
        response = e.get_response()
        response.data = jsonify(
            {
                "error": e.name,
                "code": e.code,
                "description": e.description,
            }
        ).data
        response.content_type = "application/json"
        return response
    return e


@app.errorhandler(ValueError)
def handle_value_error(e: ValueError):
    """Invalid roll arguments (negative luck, count, cost, malformed payload)."""
    app.logger.warning(f"Rejected request to {request.path}: {e}")
    return jsonify({"error": "Bad Request", "message": str(e)}), 400


@app.errorhandler(500)
def handle_internal_error(e: Exception):
    """Handle 500 errors."""
    if request.path.startswith("/api/"):
        app.logger.error(f"Internal server error: {e}", exc_info=True)
        return jsonify({"error": "Internal Server Error", "message": "An unexpected error occurred"}), 500
    return "Internal Server Error", 500


_host_config = HostConfig()
_engine = RarityEngine.create(_host_config.load_engine_config())
_registry = ActorRegistry(_engine)


def _get_session(actor_id: str) -> Optional[ActorSession]:
    return _registry.get(actor_id)


def _json_body() -> dict[str, Any]:
    if not request.data:
        return {}
    if not request.is_json:
        raise ValueError("Content-Type must be application/json")
    data = request.get_json()
    if not isinstance(data, dict):
        raise ValueError("Request body must be a JSON object")
    return data


def _optional_float(value: Any, name: str) -> Optional[float]:
    if value is None:
        return None
    try:
        number = float(value)
    except (TypeError, ValueError) as e:
        raise ValueError(f"{name} must be a number") from e
    if not math.isfinite(number):
        raise ValueError(f"{name} must be finite")
    return number


def _finite_or_none(value: float) -> Optional[float]:
    """JSON has no infinity; unreachable outcomes are reported as null."""
    return value if math.isfinite(value) else None


def _serialize_session(session: ActorSession) -> dict[str, Any]:
    return {
        "actor_id": session.actor_id,
        "state": session.state.model_dump(mode="json"),
        "balances": dict(session.balances),
    }


@app.route("/api/rarities", methods=["GET"])
def list_rarities():
    """List the configured outcomes sorted by tier."""
    luck = _optional_float(request.args.get("luck"), "luck")
    rarities = [
        {"name": name, **_engine.rarities[name].model_dump()}
        for name in _engine.order
    ]
    return jsonify({
        "rarities": rarities,
        "expected": _engine.get_expected(luck),
        "chance_text": _engine.get_chance_text(luck),
    })


@app.route("/api/actors", methods=["GET"])
def list_actors():
    """List all actor ids."""
    return jsonify({"actors": _registry.list_ids()})


@app.route("/api/actors", methods=["POST"])
def create_actor():
    """Create a new actor with a fresh roll state."""
    data = _json_body()

    seed = data.get("seed")
    if seed is not None and (not isinstance(seed, int) or isinstance(seed, bool)):
        raise ValueError("seed must be an integer")

    actor_id = data.get("actor_id")
    if actor_id is not None and (not isinstance(actor_id, str) or not actor_id):
        raise ValueError("actor_id must be a non-empty string")

    balance = _optional_float(data.get("balance"), "balance")
    if balance is None:
        balance = _host_config.starting_balance

    session = _registry.create(
        seed=seed,
        balances={_host_config.default_pool: balance},
        pity_target_tiers=data.get("pity_target_tiers"),
        actor_id=actor_id,
    )
    app.logger.info(f"Created actor {session.actor_id} (seed={seed})")
    return jsonify({"success": True, **_serialize_session(session)}), 201


@app.route("/api/actors/<actor_id>", methods=["GET"])
def get_actor(actor_id: str):
    """Get an actor's state and balances."""
    session = _get_session(actor_id)
    if not session:
        return jsonify({"error": "Actor not found"}), 404
    with session.lock:
        return jsonify(_serialize_session(session))


@app.route("/api/actors/<actor_id>", methods=["DELETE"])
def delete_actor(actor_id: str):
    """Discard an actor and its state."""
    if not _registry.remove(actor_id):
        return jsonify({"error": "Actor not found"}), 404
    app.logger.info(f"Removed actor {actor_id}")
    return jsonify({"success": True})


@app.route("/api/actors/<actor_id>/roll", methods=["POST"])
def roll(actor_id: str):
    """Roll once for an actor."""
    session = _get_session(actor_id)
    if not session:
        return jsonify({"error": "Actor not found"}), 404

    data = _json_body()
    luck = _optional_float(data.get("luck"), "luck")
    cost = _optional_float(data.get("cost"), "cost")
    pool = data.get("pool") or _host_config.default_pool

    with session.lock:
        result = _engine.roll(
            session.state,
            luck=luck,
            cost=_host_config.roll_cost if cost is None else cost,
            balances=session.balances,
            pool=pool,
        )
        return jsonify({"result": result.model_dump(mode="json"), "balances": dict(session.balances)})


@app.route("/api/actors/<actor_id>/bulk", methods=["POST"])
def bulk_roll(actor_id: str):
    """Roll many times for an actor, charged upfront."""
    session = _get_session(actor_id)
    if not session:
        return jsonify({"error": "Actor not found"}), 404

    data = _json_body()
    count = data.get("count")
    if not isinstance(count, int) or isinstance(count, bool):
        raise ValueError("count must be an integer")
    if count > _host_config.max_bulk_count:
        raise ValueError(f"count must not exceed {_host_config.max_bulk_count}")

    luck = _optional_float(data.get("luck"), "luck")
    cost = _optional_float(data.get("cost"), "cost")
    pool = data.get("pool") or _host_config.default_pool

    with session.lock:
        result = _engine.bulk(
            session.state,
            count,
            luck=luck,
            cost=_host_config.roll_cost if cost is None else cost,
            balances=session.balances,
            pool=pool,
        )
        return jsonify({"result": result.model_dump(mode="json"), "balances": dict(session.balances)})


@app.route("/api/actors/<actor_id>/chances", methods=["GET"])
def next_roll_chances(actor_id: str):
    """Distribution of the actor's next roll."""
    session = _get_session(actor_id)
    if not session:
        return jsonify({"error": "Actor not found"}), 404

    luck = _optional_float(request.args.get("luck"), "luck")
    with session.lock:
        chances = _engine.get_next_roll_chances(session.state, luck)
        expected_rolls = {
            name: _finite_or_none(_engine.get_expected_rolls_for(session.state, name, luck))
            for name in _engine.order
        }
    return jsonify({"chances": chances, "expected_rolls": expected_rolls})


@app.route("/api/actors/<actor_id>/summary", methods=["GET"])
def summary(actor_id: str):
    """Text projections and dry streaks for display."""
    session = _get_session(actor_id)
    if not session:
        return jsonify({"error": "Actor not found"}), 404

    luck = _optional_float(request.args.get("luck"), "luck")
    with session.lock:
        state = session.state
        return jsonify({
            "chance_text": _engine.get_chance_text(luck),
            "expected_rolls_text": _engine.get_expected_rolls_text(state, luck),
            "pity_text": _engine.get_pity_text(state),
            "dry_streaks": {name: _engine.get_dry_streak(state, name) for name in _engine.order},
            "tier_dry_streaks": {
                str(tier): _engine.get_tier_dry_streak(state, tier)
                for tier in sorted({definition.tier for definition in _engine.rarities.values()})
            },
        })


@app.route("/api/actors/<actor_id>/reset", methods=["POST"])
def reset_actor(actor_id: str):
    """Zero an actor's counters, keeping its seed and random stream."""
    session = _get_session(actor_id)
    if not session:
        return jsonify({"error": "Actor not found"}), 404
    with session.lock:
        _engine.reset_state(session.state)
        return jsonify({"success": True, **_serialize_session(session)})


if __name__ == "__main__":
    app.run(debug=True, port=5000)
