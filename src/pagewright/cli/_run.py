"""``pagewright run`` — development or production server command.

Resolves an import string to a pagewright App and starts either the
development server (single worker, auto-reload, content watcher) or the
production server (multi-worker, caches trusted for the process life).
"""

import argparse
import logging
import sys

from pagewright.cli._resolve import resolve_app

LOG_FORMAT = "[%(asctime)s] %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str) -> None:
    """Send pagewright logs to stderr at *level* (e.g. ``"info"``)."""
    logging.basicConfig(format=LOG_FORMAT, level=level.upper())


def run_server(args: argparse.Namespace) -> None:
    """Start the pagewright server (dev or production mode).

    Production mode is used when ``--production`` is passed or the app
    is not configured with ``debug=True``.
    """
    try:
        app = resolve_app(args.app)
    except (ModuleNotFoundError, AttributeError, TypeError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    configure_logging(app.config.log_level)

    host = args.host or app.config.host
    port = args.port or app.config.port

    if args.production or not app.config.debug:
        from pagewright.server.production import run_production_server

        app._ensure_frozen()
        run_production_server(
            app,
            host=host,
            port=port,
            workers=args.workers if args.workers is not None else app.config.workers,
            log_format=app.config.log_format,
            log_level=app.config.log_level,
        )
    else:
        from pagewright.server.dev import run_dev_server

        app._ensure_frozen()
        run_dev_server(
            app,
            host,
            port,
            reload=True,
            reload_include=app.config.reload_include,
            reload_dirs=app.config.reload_dirs,
            app_path=args.app,
        )
