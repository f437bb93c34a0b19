#!/usr/bin/env python3
"""
Cull - Web API Server
=====================
A JSON API for scanning a directory, reviewing duplicate groups and
removing the redundant copies.

Run with: python -m cull serve
Or: cull-server

Options:
    -q, --quiet     Quiet mode - suppress all output except errors
    -v, --verbose   Verbose mode - show all Flask request logs
    -p, --port      Port to run on (default: 5000)
"""

import argparse
import logging
from typing import Optional

from flask import Flask

from .api import api
from .state import ScanState


# Logging levels
LOG_QUIET = 0    # No output except errors
LOG_MINIMAL = 1  # Startup info only (default)
LOG_VERBOSE = 2  # All Flask request logs


def create_app(scan_state: Optional[ScanState] = None, log_level: int = LOG_MINIMAL) -> Flask:
    """
    Create and configure the Flask application.

    Args:
        scan_state: State shared by the routes; a fresh one if omitted
        log_level: Logging verbosity level

    Returns:
        Configured Flask app instance
    """
    app = Flask(__name__)
    app.config['SCAN_STATE'] = scan_state if scan_state is not None else ScanState()

    # Configure logging based on level
    if log_level < LOG_VERBOSE:
        # Suppress Flask's default request logging
        log = logging.getLogger('werkzeug')
        log.setLevel(logging.ERROR if log_level == LOG_QUIET else logging.WARNING)

    # Register routes
    app.register_blueprint(api)

    return app


def suppress_flask_banner():
    """Suppress Flask's development server banner and startup messages."""
    try:
        import flask.cli
        flask.cli.show_server_banner = lambda *args, **kwargs: None
    except (ImportError, AttributeError):
        pass

    # Suppress werkzeug's startup log messages
    logging.getLogger('werkzeug').setLevel(logging.ERROR)


def main():
    """Main entry point for the API server."""
    parser = argparse.ArgumentParser(
        description='Cull - duplicate image API server',
        formatter_class=argparse.RawDescriptionHelpFormatter
    )
    parser.add_argument(
        '-q', '--quiet',
        action='store_true',
        help='Quiet mode - suppress all output except errors'
    )
    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Verbose mode - show all Flask request logs'
    )
    parser.add_argument(
        '-p', '--port',
        type=int,
        default=5000,
        help='Port to run the server on (default: 5000)'
    )

    args = parser.parse_args()

    # Determine log level
    if args.quiet:
        log_level = LOG_QUIET
    elif args.verbose:
        log_level = LOG_VERBOSE
    else:
        log_level = LOG_MINIMAL

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    )

    url = f'http://127.0.0.1:{args.port}'
    if log_level >= LOG_MINIMAL:
        print()
        print("  CULL - DUPLICATE IMAGE API")
        print(f"  Server running at: {url}")
        print("  Press Ctrl+C to stop")
        print()

    # Suppress Flask banner for non-verbose modes
    if log_level < LOG_VERBOSE:
        suppress_flask_banner()

    app = create_app(log_level=log_level)

    try:
        app.run(
            host='127.0.0.1',
            port=args.port,
            debug=False,
            threaded=True,
            use_reloader=False
        )
    except KeyboardInterrupt:
        if log_level >= LOG_MINIMAL:
            print("\n  Server stopped\n")


if __name__ == '__main__':
    main()
