"""
Vibe Check Web — Flask server for voting, live tallies and the admin toggle.

Usage:
    python -m vibecheck.web
    # Serves http://localhost:5000

Features:
    - Vote on a fixed set of vibes (POST /api/vote)
    - Live tallies over Server-Sent Events (GET /api/vibes/stream)
    - Flip the "censor bad vibes" flag (POST /api/admin/toggle-censorship)
"""

from .server import create_app, run_server

__all__ = ["create_app", "run_server"]
