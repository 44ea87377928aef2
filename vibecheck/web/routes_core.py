"""
Web — Pages and health.

Blueprint: core_bp
Routes:
    /             (voting page with live tallies)
    /admin        (censorship control)
    /api/health
"""

from __future__ import annotations

from flask import Blueprint, current_app, jsonify, send_from_directory

core_bp = Blueprint("core", __name__)


def _static_page(filename: str):
    static = current_app.static_folder
    return send_from_directory(static, filename)


@core_bp.route("/")
def index():
    """Serve the voting page."""
    return _static_page("index.html")


@core_bp.route("/admin")
def admin_page():
    """Serve the admin panel."""
    return _static_page("admin.html")


@core_bp.route("/api/health")
def api_health():
    """Component health; 503 when unhealthy."""
    from ..observability.health import HealthChecker

    checker = HealthChecker(current_app.config["BACKEND"], current_app.config["VIBECHECK"])
    result = checker.check()
    return jsonify(result.to_dict()), 503 if result.status.value == "unhealthy" else 200
