"""
Web API — Censorship flag.

Blueprint: admin_bp
Prefix: /api
Routes:
    /api/settings/censorship          GET, public read of the flag
    /api/admin/toggle-censorship      POST {password, newState}

The admin page's login step is cosmetic; the password is sent with every
toggle and checked here.
"""

from __future__ import annotations

import logging

from flask import Blueprint, current_app, jsonify, request

from ..engine.censorship import read_censorship, toggle_censorship
from ..models.vibes import CENSOR_SETTING_KEY
from ..validation import (
    AuthorizationError,
    BackendError,
    ConfigurationError,
    ValidationError,
    require_json_object,
)

logger = logging.getLogger(__name__)

admin_bp = Blueprint("admin", __name__)


def _backend():
    return current_app.config["BACKEND"]


def _config():
    return current_app.config["VIBECHECK"]


@admin_bp.route("/settings/censorship")
def api_censorship_state():
    """Current flag value; absent row reads as false."""
    try:
        active = read_censorship(_backend())
    except BackendError as e:
        logger.error(f"Error fetching censorship state: {e.message}")
        return jsonify({"error": e.message}), 500
    return jsonify({"key": CENSOR_SETTING_KEY, "value": active})


@admin_bp.route("/admin/toggle-censorship", methods=["POST"])
def api_toggle_censorship():
    """Overwrite the flag if the shared secret matches."""
    try:
        data = require_json_object(request.get_json(silent=True))
    except ValidationError as e:
        return jsonify({"error": e.message}), 400

    try:
        result = toggle_censorship(
            _backend(),
            password=data.get("password"),
            new_state=data.get("newState"),
            admin_password=_config().admin_password,
        )
    except ConfigurationError as e:
        return jsonify({"error": str(e)}), 500
    except AuthorizationError:
        return jsonify({"error": "Unauthorized"}), 401
    except ValidationError as e:
        return jsonify({"error": e.message}), 400
    except BackendError as e:
        logger.error(f"Error updating censorship setting: {e.message}")
        return jsonify({"error": e.message}), 500

    return jsonify(result.to_response()), 200
