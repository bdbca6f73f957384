"""Pagewright — file-convention pages with layouts, middleware and a client bridge.

The directory tree under ``pages/`` is the router: directories are URL
segments, ``[name]`` binds a parameter, ``(group)`` organises without
consuming a segment, and ``_layout.html`` / ``_middleware.py`` wrap
everything beneath them.

Basic usage::

    from pagewright import App, AppConfig

    app = App(AppConfig(debug=True))

    @app.expose
    def greet(name):
        return f"Hello, {name}!"

    app.run()
"""

__version__ = "0.1.0"
__all__ = [
    "App",
    "AppConfig",
    "CacheStore",
    "ConfigurationError",
    "HTTPError",
    "MethodNotAllowed",
    "NotFound",
    "PagewrightError",
    "Request",
    "Response",
    "ResponseWriter",
    "RouteMatch",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import pagewright`` fast while providing a clean top-level API.
    """
    if name == "App":
        from pagewright.app import App

        return App

    if name == "AppConfig":
        from pagewright.config import AppConfig

        return AppConfig

    if name == "Request":
        from pagewright.http.request import Request

        return Request

    if name in ("Response", "ResponseWriter"):
        from pagewright.http import response as _resp

        return getattr(_resp, name)

    if name == "CacheStore":
        from pagewright.pages.cache import CacheStore

        return CacheStore

    if name == "RouteMatch":
        from pagewright.pages.types import RouteMatch

        return RouteMatch

    if name in (
        "ConfigurationError",
        "HTTPError",
        "MethodNotAllowed",
        "NotFound",
        "PagewrightError",
    ):
        from pagewright import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
