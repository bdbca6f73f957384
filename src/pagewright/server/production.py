"""Production server.

Starts a multi-worker pounce server. No content watcher runs in this
mode: cached routes, files, layouts and middleware stay valid for the
life of each worker.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pagewright import App


def run_production_server(
    app: App,
    host: str = "0.0.0.0",
    port: int = 3000,
    workers: int = 0,  # 0 = auto-detect from CPU count
    *,
    log_format: str = "text",
    log_level: str = "info",
) -> None:
    """Run a pagewright app in production mode.

    Args:
        app: Pagewright App instance.
        host: Bind address (default: 0.0.0.0 for all interfaces).
        port: Bind port (default: 3000).
        workers: Worker count (0 = auto-detect from CPU count).
        log_format: Log format ("json" or "text").
        log_level: Log level (debug, info, warning, error, critical).

    Example:
        >>> from site_app import app
        >>> from pagewright.server.production import run_production_server
        >>> run_production_server(app, workers=4)
    """
    from pounce.config import ServerConfig
    from pounce.server import Server

    config = ServerConfig(
        host=host,
        port=port,
        workers=workers,
        log_format=log_format,
        log_level=log_level,
    )
    server = Server(config, app)
    server.run()
