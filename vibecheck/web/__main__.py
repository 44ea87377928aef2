"""
Run the web server directly.

Usage:
    python -m vibecheck.web
    python -m vibecheck.web --port 8000
    python -m vibecheck.web --host 0.0.0.0 --debug
"""

import argparse

from .server import run_server


def main():
    parser = argparse.ArgumentParser(description="Vibe Check web server")
    parser.add_argument("--host", default="127.0.0.1", help="Bind address")
    parser.add_argument("--port", type=int, default=5000, help="Port (default: 5000)")
    parser.add_argument("--debug", action="store_true", help="Enable debug mode")
    
    args = parser.parse_args()
    
    run_server(
        host=args.host,
        port=args.port,
        debug=args.debug,
    )


if __name__ == "__main__":
    main()
