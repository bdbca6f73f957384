"""Page middleware: ``_middleware.py`` files in the content tree.

Each middleware module exports a callable named ``middleware`` taking
``(request, response)``. It may be ``def`` or ``async def``::

    # pages/admin/_middleware.py
    def middleware(request, response):
        if request.headers.get("x-admin-token") != "secret":
            response.status(401).send("Unauthorized")

Modules are loaded through a provider (``path -> callable``) and kept in
the middleware cache until the content watcher evicts them.
"""

import hashlib
import importlib.util
import logging
import time
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Any

from pagewright._internal.invoke import invoke
from pagewright.errors import MiddlewareLoadError
from pagewright.http.request import Request
from pagewright.http.response import ResponseWriter
from pagewright.pages.cache import CacheStore, cache_key

logger = logging.getLogger("pagewright.middleware")

MiddlewareProvider = Callable[[Path], Callable[..., Any]]

MIDDLEWARE_ATTRIBUTE = "middleware"


def load_middleware(path: Path) -> Callable[..., Any]:
    """Execute a middleware module from disk and return its callable.

    The module is executed fresh on every call and never registered in
    ``sys.modules``; caching is the middleware cache's job.

    Raises:
        MiddlewareLoadError: The module is missing, fails to execute,
            or does not export a callable ``middleware``.
    """
    digest = hashlib.sha1(str(path).encode("utf-8")).hexdigest()[:12]
    spec = importlib.util.spec_from_file_location(f"_pagewright_middleware_{digest}", path)
    if spec is None or spec.loader is None:
        raise MiddlewareLoadError(path, "not a loadable Python module")

    module = importlib.util.module_from_spec(spec)
    try:
        spec.loader.exec_module(module)
    except Exception as exc:
        raise MiddlewareLoadError(path, f"{type(exc).__name__}: {exc}") from exc

    func = getattr(module, MIDDLEWARE_ATTRIBUTE, None)
    if func is None or not callable(func):
        raise MiddlewareLoadError(path, f"no callable {MIDDLEWARE_ATTRIBUTE!r} exported")
    return func


def _get_middleware(
    path: Path,
    store: CacheStore,
    provider: MiddlewareProvider,
) -> Callable[..., Any]:
    key = cache_key(path)
    cached = store.middleware.get(key)
    if cached is not None:
        return cached
    func = provider(path)
    logger.debug("Loaded middleware: %s", path)
    return store.middleware.set(key, func)


async def run_middlewares(
    paths: Sequence[Path],
    request: Request,
    response: ResponseWriter,
    *,
    store: CacheStore,
    provider: MiddlewareProvider = load_middleware,
) -> bool:
    """Run page middleware in order, root to leaf.

    Returns:
        True if rendering should continue. False if a middleware sent a
        response or raised; in the latter case a 500 has been sent
        unless the middleware had already sent something.
    """
    start = time.perf_counter()
    applied = 0

    for path in paths:
        try:
            func = _get_middleware(path, store, provider)
        except MiddlewareLoadError as exc:
            logger.error("[%s] Skipping middleware %s: %s", request.request_id, exc.path, exc.reason)
            continue

        try:
            await invoke(func, request, response)
        except Exception:
            logger.exception("[%s] Error in middleware %s", request.request_id, path)
            if not response.headers_sent:
                response.status(500).send("Internal Server Error")
            return False

        applied += 1
        if response.headers_sent:
            logger.info(
                "[%s] Middleware sent a response, stopping chain at %s",
                request.request_id,
                path,
            )
            return False

    if paths:
        logger.debug(
            "[%s] Applied %d/%d middleware in %.2fms",
            request.request_id,
            applied,
            len(paths),
            (time.perf_counter() - start) * 1000,
        )
    return True
