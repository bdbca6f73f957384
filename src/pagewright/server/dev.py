"""Development server with hot reload.

Starts a pounce ASGI server with the live pagewright App object.
Uses single-worker mode with reload enabled for development.
"""


def run_dev_server(
    app: object,
    host: str,
    port: int,
    *,
    reload: bool = True,
    reload_include: tuple[str, ...] = (),
    reload_dirs: tuple[str, ...] = (),
    app_path: str | None = None,
) -> None:
    """Start a pounce dev server with the given pagewright App.

    Pounce's ``run()`` takes an import string (e.g., ``"site:app"``),
    but pagewright has a live ``App`` object. We use ``pounce.Server``
    directly with the ASGI callable.

    Content edits under ``pages/`` do not need a reload: the content
    watcher evicts the affected cache entries instead. Reload covers
    Python code such as the module that exposes bridge functions.

    Args:
        app: ASGI callable (pagewright App instance).
        host: Bind host address.
        port: Bind port number.
        reload: Enable auto-reload on file changes (default True).
        reload_include: Extra file extensions to watch when reload is
            active.
        reload_dirs: Extra directories to watch alongside cwd.
        app_path: Optional ``"module:attribute"`` import string.  When
            provided, pounce reimports the app on each reload cycle.
    """
    from pounce.config import ServerConfig
    from pounce.server import Server

    config = ServerConfig(
        host=host,
        port=port,
        workers=1,
        reload=reload,
        reload_include=reload_include,
        reload_dirs=reload_dirs,
    )
    server = Server(config, app, app_path=app_path)
    server.run()
