"""Per-directory page middleware.

Usage::

    from pagewright.middleware import run_middlewares

    proceed = await run_middlewares(match.middlewares, request, writer, store=store)
"""

from pagewright.middleware.runner import MiddlewareProvider, load_middleware, run_middlewares

__all__ = [
    "MiddlewareProvider",
    "load_middleware",
    "run_middlewares",
]
