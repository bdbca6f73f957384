"""Invoke helpers — call sync or async callables uniformly.

Middleware modules and exposed bridge functions can be ``def`` or
``async def``. Any code that calls user-provided code must handle both
cases, so the sync/async check lives in exactly one place.

Usage::

    from pagewright._internal.invoke import invoke

    result = await invoke(middleware, request, response)
"""

import inspect
from typing import Any


async def invoke(func: Any, *args: Any, **kwargs: Any) -> Any:
    """Call *func* and await the result if it's awaitable.

    Works with both sync and async callables::

        # sync: returns immediately
        def middleware(request, response):
            response.set_header("X-Section", "blog")

        # async: the coroutine is awaited
        async def middleware(request, response):
            if not await is_logged_in(request):
                response.redirect("/login")
    """
    result = func(*args, **kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result
