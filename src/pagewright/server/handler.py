"""ASGI handler — translates ASGI scope/messages to pagewright types.

The only component that touches raw ASGI directly. Builds a typed
Request, dispatches it to the invocation endpoint, the script assets or
the page renderer, and sends the Response back through ASGI send().
"""

import logging
import secrets
import time

from pagewright._internal.asgi import Receive, Scope, Send
from pagewright.bridge.handler import handle_invoke
from pagewright.bridge.registry import FunctionRegistry
from pagewright.bridge.scripts import serve_script
from pagewright.config import AppConfig
from pagewright.errors import HTTPError, MethodNotAllowed
from pagewright.http.request import Request
from pagewright.http.response import Response
from pagewright.pages.render import GENERIC_SERVER_ERROR, PageRenderer
from pagewright.server.sender import send_response

logger = logging.getLogger("pagewright.server")

_PAGE_METHODS = frozenset({"GET", "HEAD"})


def new_request_id() -> str:
    return f"req_{secrets.token_hex(6)}"


def _under(path: str, prefix: str) -> str | None:
    """The remainder of *path* below *prefix*, or ``None`` if outside it."""
    prefix = prefix.rstrip("/") + "/"
    if path.startswith(prefix):
        return path[len(prefix) :]
    return None


async def handle_request(
    scope: Scope,
    receive: Receive,
    send: Send,
    *,
    config: AppConfig,
    renderer: PageRenderer,
    registry: FunctionRegistry,
) -> None:
    """Process a single HTTP request through the full pipeline."""
    if scope["type"] != "http":
        return

    request = Request.from_asgi(scope, receive, request_id=new_request_id())
    start = time.perf_counter()
    logger.info("[%s] %s %s", request.request_id, request.method, request.path)

    try:
        response = await dispatch(request, config=config, renderer=renderer, registry=registry)
    except HTTPError as exc:
        response = Response(
            exc.detail or str(exc.status),
            status=exc.status,
            content_type="text/plain; charset=utf-8",
            headers=exc.headers,
        )
    except Exception:
        logger.exception("[%s] Error handling %s", request.request_id, request.path)
        response = Response(
            GENERIC_SERVER_ERROR, status=500, content_type="text/plain; charset=utf-8"
        )

    response = response.with_header("X-Request-ID", request.request_id)
    await send_response(response, send, head=request.method == "HEAD")

    logger.info(
        "[%s] %d in %.2fms",
        request.request_id,
        response.status,
        (time.perf_counter() - start) * 1000,
    )


async def dispatch(
    request: Request,
    *,
    config: AppConfig,
    renderer: PageRenderer,
    registry: FunctionRegistry,
) -> Response:
    """Route one request to the endpoint that serves it."""
    name = _under(request.path, config.invoke_path)
    if name is not None:
        return await handle_invoke(request, name, registry)

    script = _under(request.path, config.scripts_path)
    if script is not None:
        if request.method not in _PAGE_METHODS:
            raise MethodNotAllowed(_PAGE_METHODS)
        return await serve_script(config.scripts_dir, script, cache_control=config.cache_control)

    if request.method not in _PAGE_METHODS:
        raise MethodNotAllowed(_PAGE_METHODS)
    return await renderer.render(request)
