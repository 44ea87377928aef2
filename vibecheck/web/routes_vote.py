"""
Web API — Voting and live tallies.

Blueprint: vote_bp
Prefix: /api
Routes:
    /api/vote           POST {vibeName}
    /api/vibes          one-shot snapshot
    /api/vibes/stream   Server-Sent Events, one snapshot per ledger change
"""

from __future__ import annotations

import logging
import queue

from flask import Blueprint, current_app, jsonify, request

from ..engine.live import LiveView, build_snapshot
from ..engine.votes import cast_vote
from ..validation import (
    BackendError,
    UnknownVibeError,
    ValidationError,
    validate_vibe_name,
)

logger = logging.getLogger(__name__)

vote_bp = Blueprint("vote", __name__)


def _backend():
    return current_app.config["BACKEND"]


@vote_bp.route("/vote", methods=["POST"])
def api_vote():
    """Cast a vote; censored votes still answer 200."""
    try:
        vibe_name = validate_vibe_name(request.get_json(silent=True))
    except ValidationError as e:
        return jsonify({"error": e.message}), 400

    try:
        result = cast_vote(_backend(), vibe_name)
    except UnknownVibeError as e:
        return jsonify({"error": e.message}), 404
    except BackendError as e:
        logger.error(f"Error incrementing vibe count: {e.message}")
        return jsonify({"error": e.message}), 500

    return jsonify(result.to_response()), 200


@vote_bp.route("/vibes")
def api_vibes():
    """Current tallies plus the overall vibe."""
    try:
        vibes = _backend().list_vibes()
    except BackendError as e:
        logger.error(f"Error fetching vibes: {e.message}")
        return jsonify({"error": e.message}), 500
    return jsonify(build_snapshot(vibes).model_dump())


@vote_bp.route("/vibes/stream")
def api_vibes_stream():
    """SSE endpoint — initial snapshot, then one per ledger change."""
    keepalive = current_app.config.get("SSE_KEEPALIVE_SECONDS", 15)
    updates: "queue.Queue" = queue.Queue()

    view = LiveView(_backend(), on_update=updates.put)
    view.start()
    if not view.ready:
        # Let the page show "loading" until the first good read
        updates.put(view.snapshot)

    def generate():
        try:
            while True:
                try:
                    snapshot = updates.get(timeout=keepalive)
                except queue.Empty:
                    yield ": keepalive\n\n"
                    continue
                yield f"data: {snapshot.model_dump_json()}\n\n"
        finally:
            view.stop()

    return current_app.response_class(
        generate(),
        mimetype="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )
