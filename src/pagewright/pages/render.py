"""Page rendering pipeline.

resolve -> middleware -> read content -> load layouts -> compose.

``PageRenderer`` holds the compiled, per-app collaborators (content
root, cache store, resolver, registry, middleware provider) and turns a
``Request`` into a ``Response``. Every failure is confined to the
response for that request.
"""

import logging
import time
from dataclasses import replace
from pathlib import Path

import anyio

from pagewright.bridge.registry import FunctionRegistry
from pagewright.config import AppConfig
from pagewright.errors import ContentReadError
from pagewright.http.request import Request
from pagewright.http.response import Response, ResponseWriter
from pagewright.middleware.runner import MiddlewareProvider, load_middleware, run_middlewares
from pagewright.pages.cache import CacheStore
from pagewright.pages.compose import BridgeState, compose, load_layouts, read_file
from pagewright.pages.resolve import RouteResolver

logger = logging.getLogger("pagewright.pages")

GENERIC_NOT_FOUND = "Page Not Found"
GENERIC_SERVER_ERROR = "Internal Server Error"
POWERED_BY = "Pagewright"


class PageRenderer:
    """Renders pages from one content root.

    Usage::

        renderer = PageRenderer(config, Path("pages").resolve(), CacheStore(), registry)
        response = await renderer.render(request)
    """

    __slots__ = ("config", "provider", "registry", "resolver", "root", "scripts", "store")

    def __init__(
        self,
        config: AppConfig,
        root: Path,
        store: CacheStore,
        registry: FunctionRegistry,
        *,
        provider: MiddlewareProvider = load_middleware,
        scripts: tuple[str, ...] = (),
    ) -> None:
        self.config = config
        self.root = root
        self.store = store
        self.registry = registry
        self.provider = provider
        self.scripts = scripts
        self.resolver = RouteResolver(
            root,
            store,
            layout_name=config.layout_name,
            middleware_name=config.middleware_name,
            verify=config.debug,
        )

    async def render(self, request: Request) -> Response:
        """Render the page for *request*, or its 404 / 500 response."""
        rid = request.request_id
        start = time.perf_counter()

        route = request.raw_path or request.path
        match = await self.resolver.resolve_async(route)
        logger.debug("[%s] Route resolved in %.2fms", rid, (time.perf_counter() - start) * 1000)
        request = replace(request, path_params=dict(match.params))

        writer = ResponseWriter()
        proceed = await run_middlewares(
            match.middlewares,
            request,
            writer,
            store=self.store,
            provider=self.provider,
        )
        if not proceed:
            logger.info("[%s] Request handled by middleware", rid)
            sent = writer.response
            if sent is None:
                return Response(GENERIC_SERVER_ERROR, status=500)
            return sent

        if match.matched_file is None:
            return await self.not_found(request)

        try:
            content = await read_file(match.matched_file, self.store.files)
        except ContentReadError as exc:
            logger.error("[%s] Failed to read %s: %s", rid, exc.path, exc.reason)
            return Response(GENERIC_SERVER_ERROR, status=500)

        layouts = await load_layouts(match.layouts, self.store)
        html = compose(content, layouts, match.params, self.bridge_state(route))

        response = (
            Response(html, status=writer.status_code, content_type=writer.content_type)
            .with_header("X-Powered-By", POWERED_BY)
            .with_header("Cache-Control", self.config.cache_control)
            .with_headers(dict(writer.headers))
        )
        logger.info(
            "[%s] Rendered %s with %d layouts in %.2fms",
            rid,
            self._relative(match.matched_file),
            len(layouts),
            (time.perf_counter() - start) * 1000,
        )
        return response

    async def not_found(self, request: Request) -> Response:
        """404 with the custom not-found page if there is one."""
        custom = self.root / self.config.not_found_page
        if await anyio.Path(custom).is_file():
            try:
                body = await read_file(custom, self.store.files)
            except ContentReadError as exc:
                logger.error("[%s] Failed to read %s: %s", request.request_id, exc.path, exc.reason)
            else:
                logger.info("[%s] Served custom 404 page for %s", request.request_id, request.path)
                return Response(body, status=404)
        logger.info("[%s] Served default 404 for %s", request.request_id, request.path)
        return Response(GENERIC_NOT_FOUND, status=404, content_type="text/plain; charset=utf-8")

    def bridge_state(self, route: str) -> BridgeState:
        return BridgeState(
            route=route,
            http_url=self.config.http_url,
            tcp_url=self.config.tcp_url,
            invoke_path=self.config.invoke_path,
            scripts=self.scripts,
            functions=tuple(self.registry.list_functions()),
            variables=self.registry.list_variables(),
        )

    def _relative(self, path: Path) -> str:
        try:
            return str(path.relative_to(self.root))
        except ValueError:
            return str(path)
