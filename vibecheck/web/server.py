"""
Web Server — Flask application factory and runner.

The backend and config are built once per app and stashed in
``app.config`` so blueprints and tests share a single instance.
"""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Optional

from flask import Flask, jsonify, request

from ..config.loader import AppConfig, load_config
from ..config.validator import ConfigValidator
from ..store.base import Backend
from ..store.registry import create_backend
from .routes_admin import admin_bp
from .routes_core import core_bp
from .routes_vote import vote_bp

logger = logging.getLogger(__name__)

# Polled by open pages; logged at DEBUG
QUIET_ENDPOINTS = ("/api/vibes/stream", "/api/health")


def create_app(
    config: Optional[AppConfig] = None,
    backend: Optional[Backend] = None,
) -> Flask:
    """Create the Flask application."""
    config = config or load_config()
    backend = backend or create_backend(config)

    static_folder = Path(__file__).parent / "static"

    app = Flask(
        __name__,
        static_folder=str(static_folder),
        static_url_path="/static",
    )

    app.config["VIBECHECK"] = config
    app.config["BACKEND"] = backend
    app.config["SSE_KEEPALIVE_SECONDS"] = 15

    # ── Register Blueprints ───────────────────────────────────────
    app.register_blueprint(core_bp)                         # /, /admin, /api/health
    app.register_blueprint(vote_bp, url_prefix="/api")      # /api/vote, /api/vibes*
    app.register_blueprint(admin_bp, url_prefix="/api")     # /api/admin/*, /api/settings/*

    # ── Error Handlers ────────────────────────────────────────────

    @app.errorhandler(404)
    def not_found(e):
        if request.path.startswith("/api/"):
            return jsonify({"error": "Not found"}), 404
        return "Not found", 404

    @app.errorhandler(405)
    def method_not_allowed(e):
        return jsonify({"error": f"Method {request.method} not allowed"}), 405

    @app.errorhandler(500)
    def internal_server_error(e):
        """Catch-all: return JSON for any unhandled 500 so clients never see raw HTML."""
        original = getattr(e, "original_exception", None) or e
        logger.exception(
            f"Unhandled 500 on {request.method} {request.path}: {original}"
        )
        return jsonify({"error": str(original) or "An unknown error occurred."}), 500

    # ── Request Logging ───────────────────────────────────────────

    @app.before_request
    def log_request_start():
        request._start_time = time.time()

    @app.after_request
    def log_request_end(response):
        """Log request with duration for API endpoints."""
        duration_ms = 0
        if hasattr(request, "_start_time"):
            duration_ms = int((time.time() - request._start_time) * 1000)

        if request.path.startswith("/api/"):
            log_fn = logger.debug if request.path in QUIET_ENDPOINTS else logger.info
            log_fn(
                f"{request.method} {request.path} → {response.status_code} ({duration_ms}ms)"
            )
        return response

    logger.info(f"Vibe Check app initialized (backend={backend.name})")

    return app


def run_server(
    host: str = "127.0.0.1",
    port: int = 5000,
    debug: bool = False,
) -> None:
    """
    Run the web server.

    Args:
        host: Bind address (default: localhost only)
        port: Port to run on
        debug: Enable Flask debug mode
    """
    from ..logging_config import setup_logging

    setup_logging(level="DEBUG" if debug else None)

    config = load_config()
    ConfigValidator(config).log_status()
    backend = create_backend(config)

    # Local store starts out seeded, like the hosted tables
    seed = getattr(backend, "seed", None)
    if callable(seed) and seed():
        logger.info("Created fresh vibe data")

    app = create_app(config=config, backend=backend)

    url = f"http://{host}:{port}"
    debug_tag = " [DEBUG]" if debug else ""

    print(f"""
╔══════════════════════════════════════════════════════════════╗
║                     VIBE CHECK{debug_tag:<31}║
╠══════════════════════════════════════════════════════════════╣
║                                                              ║
║  Voting page:  {url + "/":<46}║
║  Admin panel:  {url + "/admin":<46}║
║                                                              ║
║  Press Ctrl+C to stop                                        ║
║                                                              ║
╚══════════════════════════════════════════════════════════════╝
""")

    try:
        # threaded: each SSE client holds a worker
        app.run(host=host, port=port, debug=debug, use_reloader=False, threaded=True)
    finally:
        backend.close()
